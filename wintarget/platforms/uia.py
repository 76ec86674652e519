"""
UI Automation window provider.

Enumerates the desktop root's Window children through the raw
IUIAutomation COM interface.  A single FindAllBuildCache call fetches
every property the engine needs, so each window's snapshot comes from
one consistent cross-process read instead of a property-by-property walk.
"""

from __future__ import annotations

import ctypes
import sys
from typing import Any

from wintarget._base import WindowProvider
from wintarget.errors import PropertyReadError
from wintarget.model import Rect, VisualState, WindowInfo

if sys.platform != "win32":
    raise ImportError("The uia backend requires Windows")

import comtypes
import comtypes.client

# ---------------------------------------------------------------------------
# UIA COM constants
# ---------------------------------------------------------------------------

UIA_BoundingRectanglePropertyId = 30001
UIA_ProcessIdPropertyId = 30002
UIA_ControlTypePropertyId = 30003
UIA_NamePropertyId = 30005
UIA_IsEnabledPropertyId = 30010
UIA_NativeWindowHandlePropertyId = 30020
UIA_IsOffscreenPropertyId = 30022
UIA_IsWindowPatternAvailablePropertyId = 30044
UIA_WindowWindowVisualStatePropertyId = 30075

UIA_WindowControlTypeId = 50032

TreeScope_Element = 1
TreeScope_Children = 2

AutomationElementMode_None = 0

# WindowVisualState enumeration
VISUAL_STATES = {
    0: VisualState.NORMAL,
    1: VisualState.MAXIMIZED,
    2: VisualState.MINIMIZED,
}

# Everything a snapshot needs, fetched in one COM call
PROP_IDS = [
    UIA_NamePropertyId,
    UIA_BoundingRectanglePropertyId,
    UIA_IsEnabledPropertyId,
    UIA_IsOffscreenPropertyId,
    UIA_ProcessIdPropertyId,
    UIA_NativeWindowHandlePropertyId,
    UIA_IsWindowPatternAvailablePropertyId,
    UIA_WindowWindowVisualStatePropertyId,
]

user32 = ctypes.windll.user32


# ---------------------------------------------------------------------------
# UIA COM bootstrap
# ---------------------------------------------------------------------------


def init_uia():
    """Initialise the IUIAutomation COM interface."""
    comtypes.client.GetModule("UIAutomationCore.dll")
    from comtypes.gen.UIAutomationClient import CUIAutomation, IUIAutomation

    return comtypes.CoCreateInstance(
        CUIAutomation._reg_clsid_,
        interface=IUIAutomation,
        clsctx=comtypes.CLSCTX_INPROC_SERVER,
    )


def make_cache_request(uia):
    cr = uia.CreateCacheRequest()
    for pid in PROP_IDS:
        cr.AddProperty(pid)
    cr.TreeScope = TreeScope_Element
    cr.AutomationElementMode = AutomationElementMode_None
    return cr


# ---------------------------------------------------------------------------
# Cached property helpers (None when the property cannot be read)
# ---------------------------------------------------------------------------


def _cached(el, pid):
    try:
        return el.GetCachedPropertyValue(pid)
    except Exception:
        return None


def _cached_bool(el, pid) -> bool | None:
    v = _cached(el, pid)
    return None if v is None else bool(v)


def _cached_int(el, pid) -> int | None:
    v = _cached(el, pid)
    try:
        return None if v is None else int(v)
    except (TypeError, ValueError):
        return None


def _cached_rect(el) -> Rect | None:
    # GetCachedPropertyValue returns an (x, y, w, h) float tuple
    v = _cached(el, UIA_BoundingRectanglePropertyId)
    try:
        x, y, w, h = v
    except (TypeError, ValueError):
        return None
    return Rect(x, y, w, h)


def _cached_visual_state(el) -> VisualState | None:
    if not _cached_bool(el, UIA_IsWindowPatternAvailablePropertyId):
        return None
    return VISUAL_STATES.get(_cached_int(el, UIA_WindowWindowVisualStatePropertyId))


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------


class UIAProvider(WindowProvider):
    """Window provider for Windows via UIA COM."""

    def __init__(self):
        self._uia = None
        self._cache_request = None
        self._window_condition = None

    @property
    def backend_name(self) -> str:
        return "uia"

    def initialize(self) -> None:
        if self._uia is not None:
            return  # already initialized
        self._uia = init_uia()
        self._cache_request = make_cache_request(self._uia)
        self._window_condition = self._uia.CreatePropertyCondition(
            UIA_ControlTypePropertyId, UIA_WindowControlTypeId
        )

    def close(self) -> None:
        self._window_condition = None
        self._cache_request = None
        self._uia = None

    def get_top_level_windows(self) -> list[Any]:
        self.initialize()
        root = self._uia.GetRootElement()
        found = root.FindAllBuildCache(
            TreeScope_Children, self._window_condition, self._cache_request
        )
        if not found:
            return []
        return [found.GetElement(i) for i in range(found.Length)]

    def snapshot(self, ref: Any) -> WindowInfo:
        try:
            title = ref.CachedName or ""
        except Exception as exc:
            raise PropertyReadError(f"Window element is no longer readable: {exc}") from exc

        pid = _cached_int(ref, UIA_ProcessIdPropertyId)
        return WindowInfo(
            title=title,
            handle=_cached_int(ref, UIA_NativeWindowHandlePropertyId) or 0,
            bounds=_cached_rect(ref),
            enabled=_cached_bool(ref, UIA_IsEnabledPropertyId),
            offscreen=_cached_bool(ref, UIA_IsOffscreenPropertyId),
            visual_state=_cached_visual_state(ref),
            pid=pid if pid and pid > 0 else None,
        )

    def focus(self, window: WindowInfo) -> None:
        self.initialize()
        if window.handle:
            el = self._uia.ElementFromHandle(window.handle)
            el.SetFocus()
            user32.SetForegroundWindow(window.handle)
