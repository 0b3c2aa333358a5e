"""
Errors — Exception hierarchy for mirror runs.

Every fatal condition of a sync run is a MirrorError subclass. The CLI
catches MirrorError, prints it and exits non-zero. Per-chart lookup
misses are not errors: they are logged and recorded in the SyncReport.
"""

from __future__ import annotations

from typing import Optional, Sequence


class MirrorError(Exception):
    """Base class for all mirror errors."""


class UsageError(MirrorError):
    """Malformed or conflicting command-line input."""


class DependencyMissingError(MirrorError):
    """A required external tool or client is not available."""

    def __init__(self, tool: str, guidance: Optional[str] = None):
        self.tool = tool
        self.guidance = guidance
        message = f"'{tool}' is required but could not be found."
        if guidance:
            message = f"{message} {guidance}"
        super().__init__(message)


class EmptyEnumerationError(MirrorError):
    """Top-level chart discovery returned nothing."""


class ExternalCommandFailure(MirrorError):
    """A delegated command (helm, git, discovery API) failed."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or "no output"
        super().__init__(
            f"Command failed ({returncode}): {' '.join(self.command)}: {detail}"
        )


class SyncCancelled(MirrorError):
    """The run was cancelled before all fetches were issued."""
