"""Attach to the target process if it is already running, otherwise launch it."""

from __future__ import annotations

import logging
import ntpath
import os
import shlex
import subprocess
from typing import Any

import psutil

from wintarget._base import ProcessRegistry
from wintarget.errors import ProcessLaunchError
from wintarget.model import ProcessHandle

log = logging.getLogger(__name__)


def process_name_for(executable_path: str) -> str:
    """Return the image name the OS reports for an executable, without extension."""
    # ntpath splits on both separators, so Windows paths resolve on any host
    return os.path.splitext(ntpath.basename(executable_path))[0]


def same_path(a: str, b: str) -> bool:
    """Compare two executable paths case-insensitively."""
    return os.path.normpath(a).casefold() == os.path.normpath(b).casefold()


class PsutilProcessRegistry(ProcessRegistry):
    """Process registry backed by psutil, launching through subprocess."""

    def processes_by_name(self, name: str) -> list[psutil.Process]:
        wanted = name.casefold()
        found = []
        for proc in psutil.process_iter(["pid", "name"]):
            proc_name = proc.info.get("name") or ""
            if os.path.splitext(proc_name)[0].casefold() == wanted:
                found.append(proc)
        return found

    def main_module_path(self, process: psutil.Process) -> str:
        path = process.exe()
        if not path:
            raise psutil.AccessDenied(process.pid)
        return path

    def attach(self, process: psutil.Process, executable_path: str) -> ProcessHandle:
        return ProcessHandle(
            pid=process.pid,
            executable_path=executable_path,
            launched=False,
            process=process,
        )

    def launch(self, executable_path: str, arguments: str = "") -> ProcessHandle:
        args: Any
        if not arguments or not arguments.strip():
            args = [executable_path]
        elif os.name == "nt":
            # CreateProcess takes a raw command line; pass the arguments untouched
            args = f"{subprocess.list2cmdline([executable_path])} {arguments}"
        else:
            args = [executable_path, *shlex.split(arguments)]

        try:
            proc = subprocess.Popen(args)
        except (OSError, ValueError) as exc:
            raise ProcessLaunchError(f"Failed to launch '{executable_path}': {exc}") from exc
        return ProcessHandle(
            pid=proc.pid,
            executable_path=executable_path,
            launched=True,
            process=proc,
        )


class ProcessLifecycleManager:
    """Makes the single attach-or-launch decision for a run.

    Usage::

        manager = ProcessLifecycleManager()
        handle = manager.ensure_running(r"C:\\Tools\\ToolControl.exe", "/safe")
        print(handle.pid, handle.launched)
    """

    def __init__(self, registry: ProcessRegistry | None = None) -> None:
        self._registry = registry if registry is not None else PsutilProcessRegistry()

    def find_running(self, executable_path: str) -> list[Any]:
        """Return running processes whose main module is ``executable_path``.

        Processes whose path cannot be resolved are excluded.
        """
        name = process_name_for(executable_path)
        log.info("Checking for existing process: %s", name)

        matches = []
        for proc in self._registry.processes_by_name(name):
            try:
                path = self._registry.main_module_path(proc)
            except Exception as exc:
                log.debug("Cannot resolve main module of %r: %s", proc, exc)
                continue
            if same_path(path, executable_path):
                matches.append(proc)
        return matches

    def ensure_running(self, executable_path: str, arguments: str = "") -> ProcessHandle:
        """Attach to the first running instance of the executable, or launch one.

        Raises:
            ProcessLaunchError: If no instance is running and launching fails.
        """
        running = self.find_running(executable_path)
        if running:
            handle = self._registry.attach(running[0], executable_path)
            log.info("Attaching to existing process PID=%d", handle.pid)
            return handle

        log.info("No existing process found. Launching: %s %s", executable_path, arguments)
        try:
            handle = self._registry.launch(executable_path, arguments)
        except ProcessLaunchError:
            log.error("Launch failed: %s", executable_path)
            raise
        except OSError as exc:
            log.error("Launch failed: %s", executable_path)
            raise ProcessLaunchError(f"Failed to launch '{executable_path}': {exc}") from exc
        log.info("Launched process. PID=%d", handle.pid)
        return handle
