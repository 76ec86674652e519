"""
wintarget -- acquire a specific application's top-level window by title.

Locates the target app's main window by matching its title against a
case-insensitive regular expression, rejects splash screens and other
decoys, and hands back a snapshot carrying the native window handle.

Quick start::

    import wintarget

    config = wintarget.load_config("appsettings.json")
    window = wintarget.run_once(config)         # launch/attach, wait, focus
    print(window.title, window.handle, window.pid)

    # Diagnostics: how many instances are already up?
    n = wintarget.count_instances_by_title_regex(r"^Tool\\s+Con(n)?trol.*")
"""

from __future__ import annotations

import logging
import re
import time
from typing import Callable

from wintarget._base import ProcessRegistry, WindowProvider
from wintarget._router import get_provider, select_backend
from wintarget.acquire import wait_for_window
from wintarget.config import AcquisitionConfig, load_config
from wintarget.counter import count_instances
from wintarget.errors import (
    AcquisitionCancelledError,
    ConfigurationError,
    ExecutableNotFoundError,
    NotFoundError,
    ProcessLaunchError,
    PropertyReadError,
    WindowNotFoundError,
    WinTargetError,
)
from wintarget.filters import is_likely_splash, is_top_level_candidate
from wintarget.model import AcquisitionResult, ProcessHandle, Rect, VisualState, WindowInfo
from wintarget.process import ProcessLifecycleManager

__all__ = [
    "run_once",
    "count_instances_by_title_regex",
    "AutomationService",
    "AcquisitionConfig",
    "load_config",
    # Model
    "AcquisitionResult",
    "ProcessHandle",
    "Rect",
    "VisualState",
    "WindowInfo",
    # Errors
    "AcquisitionCancelledError",
    "ConfigurationError",
    "ExecutableNotFoundError",
    "NotFoundError",
    "ProcessLaunchError",
    "PropertyReadError",
    "WindowNotFoundError",
    "WinTargetError",
    # Advanced / building blocks
    "WindowProvider",
    "ProcessRegistry",
    "ProcessLifecycleManager",
    "get_provider",
    "select_backend",
    "wait_for_window",
    "count_instances",
    "is_top_level_candidate",
    "is_likely_splash",
]

log = logging.getLogger(__name__)

ProviderFactory = Callable[[str], WindowProvider]


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------


def run_once(config: AcquisitionConfig, **kwargs) -> WindowInfo:
    """Ensure the target app runs, acquire its window, focus it and return it.

    Keyword arguments are passed to AutomationService.
    """
    return AutomationService(config, **kwargs).run_once()


def count_instances_by_title_regex(
    pattern: str | re.Pattern,
    distinct_by_process: bool = True,
    *,
    backend: str = "auto",
    provider_factory: ProviderFactory = get_provider,
) -> int:
    """Count running instances by window title.  Side-effect free.

    Opens its own backend for the duration of the count and releases it.

    Args:
        pattern: Title regex; strings are compiled case-insensitively.
        distinct_by_process: Collapse windows owned by the same process.
        backend: Backend mode ('auto', 'win32' or 'uia').
    """
    kind = select_backend(backend)
    with provider_factory(kind) as provider:
        log.debug("Counting instances with backend: %s", provider.backend_name)
        return count_instances(provider, pattern, distinct_by_process)


# ---------------------------------------------------------------------------
# AutomationService -- one acquisition run
# ---------------------------------------------------------------------------


class AutomationService:
    """Runs the attach-or-launch, wait and focus sequence for one target app.

    The accessibility backend is opened per run and released when the run
    ends, whether or not a window was acquired.

    Example::

        service = wintarget.AutomationService(config)
        window = service.run_once()
    """

    def __init__(
        self,
        config: AcquisitionConfig,
        *,
        registry: ProcessRegistry | None = None,
        provider_factory: ProviderFactory = get_provider,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._cfg = config
        self._processes = ProcessLifecycleManager(registry)
        self._provider_factory = provider_factory
        self._clock = clock
        self._sleep = sleep
        self.last_result: AcquisitionResult | None = None
        self.process: ProcessHandle | None = None
        log.info(
            "AutomationService initialized. Backend=%s, Pattern=%s",
            config.backend,
            config.window_title_pattern,
        )

    @property
    def config(self) -> AcquisitionConfig:
        return self._cfg

    def validate_config(self) -> None:
        """Check the executable precondition, logging the failure before raising."""
        try:
            self._cfg.validate_executable()
        except ConfigurationError:
            log.error("ExecutablePath is not configured.")
            raise
        except ExecutableNotFoundError:
            log.error("Executable not found at path: %s", self._cfg.executable_path)
            raise
        log.info("Configuration validated. ExecutablePath=%s", self._cfg.executable_path)

    def count_instances(self, distinct_by_process: bool = True) -> int:
        """Count running instances matching the configured title pattern."""
        return count_instances_by_title_regex(
            self._cfg.title_regex,
            distinct_by_process,
            backend=self._cfg.backend,
            provider_factory=self._provider_factory,
        )

    def run_once(self) -> WindowInfo:
        """Validate, ensure the process runs, acquire and focus the window.

        Raises:
            ConfigurationError: executablePath missing or blank.
            ExecutableNotFoundError: executable absent on disk.
            ProcessLaunchError: the executable could not be started.
            WindowNotFoundError: no acceptable window before the timeout.
        """
        self.validate_config()

        instances = self.count_instances()
        log.info("Detected %d running instance(s) by title pattern.", instances)
        if instances > 1:
            log.warning(
                "%d instances match %s; the first acceptable window will be used.",
                instances,
                self._cfg.window_title_pattern,
            )

        self.process = self._processes.ensure_running(
            self._cfg.executable_path, self._cfg.executable_arguments
        )

        try:
            with self._provider_factory(select_backend(self._cfg.backend)) as provider:
                log.info("Automation backend created: %s", provider.backend_name)
                result = wait_for_window(
                    provider, self._cfg, clock=self._clock, sleep=self._sleep
                )
                self.last_result = result
                if result.timed_out:
                    log.error("No window found matching pattern: %s", self._cfg.window_title_pattern)
                    raise WindowNotFoundError(self._cfg.window_title_pattern, self._cfg.wait_timeout)

                window = result.window
                log.info(
                    'Target window acquired. Title="%s", Handle=%s, PID=%s',
                    window.title,
                    window.handle,
                    window.pid,
                )
                provider.focus(window)
                log.info("Window focused.")
                return window
        finally:
            log.info("AutomationService finished run_once.")
