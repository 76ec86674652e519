"""Window predicates: plausible top-level candidate, and likely splash screen.

Both predicates work from one WindowInfo snapshot and never raise.  They
fail safe in opposite directions: a window that cannot be inspected is
not a candidate, and it is not a splash either.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from wintarget.model import VisualState, WindowInfo

if TYPE_CHECKING:
    from wintarget.config import AcquisitionConfig

log = logging.getLogger(__name__)

MIN_CANDIDATE_WIDTH = 100
MIN_CANDIDATE_HEIGHT = 50


def is_top_level_candidate(window: WindowInfo) -> bool:
    """Return True if the window is a plausible, interactable app window.

    Requires: on screen, enabled, not minimized, and at least
    MIN_CANDIDATE_WIDTH x MIN_CANDIDATE_HEIGHT.  Unreadable offscreen,
    enabled or bounds values disqualify the window.
    """
    try:
        if window.offscreen is not False:
            return False
        if window.enabled is not True:
            return False
        if window.visual_state is VisualState.MINIMIZED:
            return False
        bounds = window.bounds
        if bounds is None:
            return False
        return bounds.width >= MIN_CANDIDATE_WIDTH and bounds.height >= MIN_CANDIDATE_HEIGHT
    except Exception:
        log.debug("Candidate check failed; treating window as non-candidate.", exc_info=True)
        return False


def is_likely_splash(window: WindowInfo, elapsed: float, config: AcquisitionConfig) -> bool:
    """Return True if the window looks like a transient splash or decoy.

    A window is flagged when it is splash-sized while ``elapsed`` (seconds
    since acquisition started) is still inside the splash duration, or
    when it is minimized at any time.
    """
    try:
        bounds = window.bounds
        if bounds is None:
            return False
        if elapsed < config.splash_duration:
            if (
                bounds.width <= config.splash_max_width
                and bounds.height <= config.splash_max_height
            ):
                return True

        if window.visual_state is VisualState.MINIMIZED:
            return True
    except Exception:
        log.debug("Heuristic splash check failed; ignoring window.", exc_info=True)

    return False
