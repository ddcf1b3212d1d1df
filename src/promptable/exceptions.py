from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class PromptableError(Exception):
    """Base exception for errors in the promptable package."""


@dataclass(frozen=True)
class LookupFailureError(PromptableError):
    """Raised when a selected path does not resolve to a filesystem entry."""

    path: Path
    reason: str = "path not found or not accessible"

    def __str__(self) -> str:
        return f"cannot access {self.path}: {self.reason}"


@dataclass(frozen=True)
class ReadFailureError(PromptableError):
    """Raised when a selected file cannot be read at aggregation time."""

    path: Path
    reason: str = "file could not be read"

    def __str__(self) -> str:
        return f"cannot read {self.path}: {self.reason}"


@dataclass(frozen=True)
class IgnoreDiscoveryError(PromptableError):
    """Raised when `.gitignore` files under a root cannot be located or parsed."""

    root: Path | None
    reason: str = ""

    def __str__(self) -> str:
        return f"cannot load ignore rules under {self.root}: {self.reason}"


@dataclass(frozen=True)
class ClipboardError(PromptableError):
    """Raised when the system clipboard cannot be written."""

    reason: str = "clipboard unavailable"

    def __str__(self) -> str:
        return f"clipboard write failed: {self.reason}"
