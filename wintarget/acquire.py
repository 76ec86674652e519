"""Timeout-bounded polling for the target window."""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Callable

from wintarget.counter import snapshot_windows
from wintarget.errors import AcquisitionCancelledError
from wintarget.filters import is_likely_splash
from wintarget.model import AcquisitionResult

if TYPE_CHECKING:
    from wintarget._base import WindowProvider
    from wintarget.config import AcquisitionConfig
    from wintarget.model import WindowInfo

log = logging.getLogger(__name__)


def find_title_matches(provider: WindowProvider, config: AcquisitionConfig) -> list[WindowInfo]:
    """Return snapshots of the top-level windows whose title matches the pattern.

    No candidate filtering happens here; the splash heuristic alone
    decides which matches are acceptable.
    """
    return [w for w in snapshot_windows(provider) if config.title_regex.search(w.title or "")]


def wait_for_window(
    provider: WindowProvider,
    config: AcquisitionConfig,
    *,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    cancel: threading.Event | None = None,
) -> AcquisitionResult:
    """Poll the provider until a non-splash title match appears or time runs out.

    The first acceptable match in enumeration order wins.  The timeout is
    checked after each sleep, so the call returns within
    ``wait_timeout + poll_interval``.

    Args:
        provider: An initialized window provider.
        config: Acquisition settings (pattern, timeout, poll interval, splash limits).
        clock: Monotonic time source in seconds.
        sleep: Pause function used between polls when ``cancel`` is None.
        cancel: Optional event; when set, polling stops with
            AcquisitionCancelledError.
    """
    timeout = config.wait_timeout
    poll = config.poll_interval
    start = clock()
    polls = 0
    log.info(
        "Begin waiting for window. Timeout=%dms, Poll=%dms",
        config.wait_timeout_ms,
        config.poll_interval_ms,
    )

    while True:
        if cancel is not None and cancel.is_set():
            raise AcquisitionCancelledError("Window acquisition was cancelled.")

        polls += 1
        candidates = find_title_matches(provider, config)
        if candidates:
            log.debug("Found %d candidate window(s) by title pattern.", len(candidates))

        for win in candidates:
            if not is_likely_splash(win, clock() - start, config):
                log.info("Selected window: %s", win.describe())
                return AcquisitionResult.found_window(win, elapsed=clock() - start, polls=polls)
            log.debug("Skipping likely splash window: %s", win.describe())

        if cancel is not None:
            cancel.wait(poll)
        else:
            sleep(poll)

        elapsed = clock() - start
        if elapsed >= timeout:
            log.warning("Timed out while waiting for target window.")
            return AcquisitionResult.timed_out_after(elapsed=elapsed, polls=polls)
