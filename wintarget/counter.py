"""Count running instances of the target app by window title."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from wintarget.errors import PropertyReadError
from wintarget.filters import is_top_level_candidate

if TYPE_CHECKING:
    from wintarget._base import WindowProvider
    from wintarget.model import WindowInfo

log = logging.getLogger(__name__)


def compile_title_pattern(pattern: str | re.Pattern) -> re.Pattern:
    """Compile a title pattern case-insensitively; compiled patterns pass through."""
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern, re.IGNORECASE)


def snapshot_windows(provider: WindowProvider) -> list[WindowInfo]:
    """Enumerate top-level windows and snapshot each one.

    Windows that vanish between enumeration and snapshot are dropped.
    """
    refs = provider.get_top_level_windows()
    log.debug("Enumerated %d top-level window(s).", len(refs))
    windows = []
    for ref in refs:
        try:
            windows.append(provider.snapshot(ref))
        except PropertyReadError as exc:
            log.debug("Skipping unreadable window: %s", exc)
    return windows


def count_instances(
    provider: WindowProvider,
    pattern: str | re.Pattern,
    distinct_by_process: bool = True,
) -> int:
    """Count candidate windows whose title matches ``pattern``.

    Only windows passing is_top_level_candidate() are considered.  With
    ``distinct_by_process`` the windows are collapsed by owning process
    and unresolved process ids are discarded, so the result never exceeds
    the raw match count.
    """
    regex = compile_title_pattern(pattern)
    matches = [
        w
        for w in snapshot_windows(provider)
        if is_top_level_candidate(w) and regex.search(w.title or "")
    ]
    log.info("Matched %d window(s) by title regex.", len(matches))

    if not distinct_by_process:
        return len(matches)

    pids = {w.pid for w in matches if w.pid is not None and w.pid > 0}
    log.info("Found %d distinct process instance(s).", len(pids))
    return len(pids)
