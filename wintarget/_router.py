"""Backend selection and provider dispatch."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from wintarget.errors import ConfigurationError

if TYPE_CHECKING:
    from wintarget._base import WindowProvider

# UI Automation through COM is preferred from Windows 10 onwards.
MODERN_MIN_WINDOWS_MAJOR = 10

BACKENDS = ("win32", "uia")

_MODE_ALIASES = {
    "auto": "auto",
    "win32": "win32",
    "uia": "uia",
    "uia2": "win32",
    "uia3": "uia",
    "legacy": "win32",
    "modern": "uia",
    "backenda": "win32",
    "backendb": "uia",
}


def normalize_mode(mode: str | None) -> str:
    """Map a configured backend mode (or alias) to 'auto', 'win32' or 'uia'."""
    key = (mode or "auto").strip().lower()
    try:
        return _MODE_ALIASES[key]
    except KeyError:
        raise ConfigurationError(
            f"Unknown backend {mode!r}. Valid: auto, {', '.join(BACKENDS)}"
        ) from None


def host_windows_major() -> int | None:
    """Return the host's Windows major version, or None off Windows."""
    if sys.platform != "win32":
        return None
    return sys.getwindowsversion().major


def select_backend(mode: str | None, windows_version: int | None = None) -> str:
    """Choose which accessibility backend to instantiate.

    An explicit mode wins.  'auto' picks 'uia' when the Windows major
    version is at least MODERN_MIN_WINDOWS_MAJOR, otherwise 'win32'.

    Args:
        mode: Configured backend mode, case-insensitive.
        windows_version: Host Windows major version.  Detected when None.
    """
    mode = normalize_mode(mode)
    if mode != "auto":
        return mode
    if windows_version is None:
        windows_version = host_windows_major()
    if windows_version is not None and windows_version >= MODERN_MIN_WINDOWS_MAJOR:
        return "uia"
    return "win32"


def get_provider(backend: str) -> WindowProvider:
    """Return a fresh, uninitialized provider for the given backend.

    The caller owns the instance and should use it as a context manager
    so the backend is released on every exit path.

    Raises:
        RuntimeError: If the backend is unknown or its dependencies are missing.
    """
    try:
        if backend == "win32":
            from wintarget.platforms.win32 import Win32Provider

            return Win32Provider()
        elif backend == "uia":
            from wintarget.platforms.uia import UIAProvider

            return UIAProvider()
    except ImportError as exc:
        raise RuntimeError(f"Backend '{backend}' is not available: {exc}") from exc
    raise RuntimeError(
        f"No provider available for backend '{backend}'. "
        f"Currently supported: {', '.join(BACKENDS)}."
    )
