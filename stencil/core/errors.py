"""Exceptions raised by Stencil operations.

Low-level git and filesystem failures are wrapped with the identifying
context (destination, url, revision, action) before reaching the caller.
"""
from pathlib import Path
from typing import Optional, Sequence


class StencilError(Exception):
    """Base class for all Stencil errors."""


class ConfigError(StencilError):
    """Raised when a configuration file cannot be loaded or is invalid."""


class GitCommandError(StencilError):
    """Raised when a git invocation fails."""

    def __init__(self, args: Sequence[str], returncode: Optional[int], stderr: str = ""):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        command = " ".join(self.args_list)
        message = f"'{command}' failed"
        if returncode is not None:
            message += f" with exit code {returncode}"
        if self.stderr:
            message += f": {self.stderr}"
        super().__init__(message)


class RetrievalFailed(StencilError):
    """Raised when a template working copy cannot be cloned or updated."""

    def __init__(self, destination: Path, url: str, revision: str, cause: Exception):
        self.destination = Path(destination)
        self.url = url
        self.revision = revision
        self.cause = cause
        super().__init__(
            f"Failed to retrieve template {url} at revision '{revision}' "
            f"into {self.destination}: {cause}"
        )


class CreateFolderFailed(StencilError):
    """Raised when a folder needed for retrieval cannot be created."""

    def __init__(self, path: Path, cause: Exception):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to create folder {self.path}: {cause}")


class ToolNotConfigured(StencilError):
    """Raised when no merge or diff tool is configured in git."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(
            f"No {kind} tool configured. "
            f"Set it with 'git config --global {kind}.tool <name>' and "
            f"'git config --global {kind}tool.<name>.cmd <command>'"
        )


class ExecutionFailed(StencilError):
    """Raised when applying an action to the destination fails.

    Execution is fail-fast: actions applied before the failure are left
    in place and the remaining actions are not attempted.
    """

    def __init__(self, action, cause: Exception):
        self.action = action
        self.cause = cause
        super().__init__(
            f"Failed to apply {action.operation.value} for "
            f"{action.dst.absolute}: {cause}"
        )
