"""Error types raised by the window acquisition engine."""

from __future__ import annotations


class WinTargetError(Exception):
    """Base class for every error raised by wintarget."""


class ConfigurationError(WinTargetError, ValueError):
    """Raised when the acquisition configuration is missing or invalid."""


class NotFoundError(WinTargetError):
    """Raised when something the run depends on does not exist."""


class ExecutableNotFoundError(NotFoundError):
    """Raised when the configured executable is absent on disk."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Executable not found: {path}")
        self.path = path


class WindowNotFoundError(NotFoundError):
    """Raised when no acceptable window appeared before the timeout."""

    def __init__(self, pattern: str, timeout: float) -> None:
        super().__init__(
            f"No window matching {pattern!r} was acquired within {timeout:g}s"
        )
        self.pattern = pattern
        self.timeout = timeout


class PropertyReadError(WinTargetError):
    """Raised by providers when a window vanished or cannot be inspected.

    Always recovered locally: the window is skipped for the current
    enumeration and never reported to the caller.
    """


class ProcessLaunchError(WinTargetError):
    """Raised when the target executable could not be started."""


class AcquisitionCancelledError(WinTargetError):
    """Raised when a cancel event stops the polling loop."""


__all__ = [
    "AcquisitionCancelledError",
    "ConfigurationError",
    "ExecutableNotFoundError",
    "NotFoundError",
    "ProcessLaunchError",
    "PropertyReadError",
    "WinTargetError",
    "WindowNotFoundError",
]
