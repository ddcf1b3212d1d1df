from __future__ import annotations

import os
from pathlib import Path

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field

ENV_FILE = find_dotenv(usecwd=True)


def env_default(name: str, default: str = "") -> str:
    """Read a default from the process environment, then from the `.env` file.

    Args:
        name (str): the variable name
        default (str, optional): value used when the variable is set nowhere. Defaults to "".

    Returns:
        str: the resolved value
    """
    if name in os.environ:
        return os.environ[name]
    values = dotenv_values(ENV_FILE) if ENV_FILE else {}
    return values.get(name) or default


def default_workspaces() -> list[Path]:
    configured = env_default("PROMPTABLE_WORKSPACE")
    return [Path(configured)] if configured else [Path.cwd()]


class Settings(BaseModel):
    """Configuration settings for one promptable run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    paths: list[Path] = Field(default_factory=list, description="Selected files or directories.")
    active_file: Path | None = Field(
        default=None,
        description="Fallback target when nothing is selected.",
    )
    workspace: list[Path] = Field(
        default_factory=default_workspaces,
        description="Workspace folders; the one holding the first target is the root.",
    )
    no_workspace: bool = Field(default=False, description="Ignore workspace folders.")
    output: Path | None = Field(default=None, description="Output file; stdout when unset.")
    clipboard: bool = Field(default=False, description="Copy the result to the clipboard.")
    log_file: str = Field(
        default_factory=lambda: env_default("PROMPTABLE_LOG_FILE"),
        description="Log file path.",
    )
