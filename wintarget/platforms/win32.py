"""
Legacy Win32 window provider.

Enumerates top-level windows with user32 EnumWindows and reads each
window's properties straight from the window manager through ctypes.
Used on hosts older than Windows 10 or when the 'win32' backend is
requested explicitly.
"""

from __future__ import annotations

import ctypes
import ctypes.wintypes
import sys

from wintarget._base import WindowProvider
from wintarget.errors import PropertyReadError
from wintarget.model import Rect, VisualState, WindowInfo

if sys.platform != "win32":
    raise ImportError("The win32 backend requires Windows")

user32 = ctypes.windll.user32
WNDENUMPROC = ctypes.WINFUNCTYPE(ctypes.wintypes.BOOL, ctypes.wintypes.HWND, ctypes.wintypes.LPARAM)

SM_XVIRTUALSCREEN = 76
SM_YVIRTUALSCREEN = 77
SM_CXVIRTUALSCREEN = 78
SM_CYVIRTUALSCREEN = 79

SW_RESTORE = 9


# ---------------------------------------------------------------------------
# Win32 helpers
# ---------------------------------------------------------------------------


def _win32_enum_windows(*, visible_only: bool = True) -> list[int]:
    """Use Win32 EnumWindows to list top-level window handles. Near-instant."""
    results: list[int] = []

    @WNDENUMPROC
    def callback(hwnd, _lparam):
        if visible_only and not user32.IsWindowVisible(hwnd):
            return True  # skip hidden
        results.append(hwnd)
        return True

    user32.EnumWindows(callback, 0)
    return results


def _win32_window_text(hwnd: int) -> str:
    length = user32.GetWindowTextLengthW(hwnd)
    if length <= 0:
        return ""
    buf = ctypes.create_unicode_buffer(length + 1)
    user32.GetWindowTextW(hwnd, buf, length + 1)
    return buf.value


def _win32_get_window_rect(hwnd: int) -> Rect | None:
    """Return the window rect via Win32 GetWindowRect."""
    rect = ctypes.wintypes.RECT()
    if user32.GetWindowRect(hwnd, ctypes.byref(rect)):
        return Rect(rect.left, rect.top, rect.right - rect.left, rect.bottom - rect.top)
    return None


def _win32_virtual_screen() -> Rect:
    """Return the bounding rect of all monitors."""
    return Rect(
        user32.GetSystemMetrics(SM_XVIRTUALSCREEN),
        user32.GetSystemMetrics(SM_YVIRTUALSCREEN),
        user32.GetSystemMetrics(SM_CXVIRTUALSCREEN),
        user32.GetSystemMetrics(SM_CYVIRTUALSCREEN),
    )


def _intersects(a: Rect, b: Rect) -> bool:
    return (
        a.x < b.x + b.width
        and b.x < a.x + a.width
        and a.y < b.y + b.height
        and b.y < a.y + a.height
    )


def get_window_pid(hwnd: int) -> int | None:
    """Return the process ID for a window handle, or None if unresolved."""
    pid = ctypes.wintypes.DWORD()
    user32.GetWindowThreadProcessId(hwnd, ctypes.byref(pid))
    return pid.value or None


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------


class Win32Provider(WindowProvider):
    """Window provider for Windows via plain user32 calls."""

    def __init__(self):
        self._screen: Rect | None = None

    @property
    def backend_name(self) -> str:
        return "win32"

    def initialize(self) -> None:
        if self._screen is not None:
            return  # already initialized
        self._screen = _win32_virtual_screen()

    def close(self) -> None:
        self._screen = None

    def get_top_level_windows(self) -> list[int]:
        return _win32_enum_windows(visible_only=True)

    def snapshot(self, ref: int) -> WindowInfo:
        hwnd = ref
        if not user32.IsWindow(hwnd):
            raise PropertyReadError(f"Window {hwnd:#x} no longer exists")
        title = _win32_window_text(hwnd)

        if user32.IsIconic(hwnd):
            state = VisualState.MINIMIZED
        elif user32.IsZoomed(hwnd):
            state = VisualState.MAXIMIZED
        else:
            state = VisualState.NORMAL

        bounds = _win32_get_window_rect(hwnd)
        screen = self._screen or _win32_virtual_screen()
        if bounds is None:
            offscreen = None
        else:
            offscreen = state is VisualState.MINIMIZED or not _intersects(bounds, screen)

        return WindowInfo(
            title=title,
            handle=hwnd,
            bounds=bounds,
            enabled=bool(user32.IsWindowEnabled(hwnd)),
            offscreen=offscreen,
            visual_state=state,
            pid=get_window_pid(hwnd),
        )

    def focus(self, window: WindowInfo) -> None:
        hwnd = window.handle
        if user32.IsIconic(hwnd):
            user32.ShowWindow(hwnd, SW_RESTORE)
        user32.SetForegroundWindow(hwnd)
