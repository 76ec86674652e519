"""Value types shared by the providers, predicates and acquisition loop."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class VisualState(str, Enum):
    """Window visual state as reported by the accessibility backend."""

    NORMAL = "normal"
    MINIMIZED = "minimized"
    MAXIMIZED = "maximized"


@dataclass(frozen=True)
class Rect:
    """Bounding rectangle in screen pixels."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        # Backends report inverted rects for some placeholder windows
        object.__setattr__(self, "width", max(0, self.width))
        object.__setattr__(self, "height", max(0, self.height))


@dataclass(frozen=True)
class WindowInfo:
    """Snapshot of one top-level window, captured in a single read.

    Any property the backend failed to read is ``None``; predicates treat
    a missing value fail-safe instead of re-reading it.
    """

    title: str
    handle: int
    bounds: Rect | None = None
    enabled: bool | None = None
    offscreen: bool | None = None
    visual_state: VisualState | None = None
    pid: int | None = None

    def describe(self) -> str:
        """Return a short ``"title" [WxH]`` label for log lines."""
        if self.bounds is None:
            return f'"{self.title}" [?x?]'
        return f'"{self.title}" [{self.bounds.width:g}x{self.bounds.height:g}]'


@dataclass
class ProcessHandle:
    """A running target process, either attached to or freshly launched."""

    pid: int
    executable_path: str
    launched: bool
    process: Any = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class AcquisitionResult:
    """Outcome of one acquisition run: a window, or a timeout. Never both."""

    window: WindowInfo | None
    elapsed: float
    polls: int

    @classmethod
    def found_window(cls, window: WindowInfo, *, elapsed: float, polls: int) -> AcquisitionResult:
        return cls(window=window, elapsed=elapsed, polls=polls)

    @classmethod
    def timed_out_after(cls, *, elapsed: float, polls: int) -> AcquisitionResult:
        return cls(window=None, elapsed=elapsed, polls=polls)

    @property
    def found(self) -> bool:
        return self.window is not None

    @property
    def timed_out(self) -> bool:
        return self.window is None
