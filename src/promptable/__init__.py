"""Aggregate selected files into a single prompt-ready document."""

from promptable.aggregation import aggregate

__version__ = "0.1.0"

__all__ = ["__version__", "aggregate"]
