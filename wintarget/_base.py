"""Abstract bases for the accessibility provider and the process registry."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from wintarget.model import ProcessHandle, WindowInfo


class WindowProvider(ABC):
    """Interface that each accessibility backend must implement.

    Subclasses handle backend-specific initialization, top-level window
    enumeration and property reads.  The acquisition engine calls only
    the methods defined here and is otherwise backend-agnostic.

    Providers are context managers: the backend is initialized on entry
    and released on exit, whichever way the block is left.
    """

    # ---- identity --------------------------------------------------------

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend identifier ('win32' or 'uia')."""
        ...

    # ---- lifecycle -------------------------------------------------------

    @abstractmethod
    def initialize(self) -> None:
        """Perform any one-time setup (COM init, handle lookups, etc.).

        Implementations should be idempotent (safe to call multiple times).
        """
        ...

    def close(self) -> None:
        """Release backend resources.  Idempotent; the default does nothing."""

    def __enter__(self) -> WindowProvider:
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---- window enumeration ----------------------------------------------

    @abstractmethod
    def get_top_level_windows(self) -> list[Any]:
        """Return native references for the direct children of the desktop root.

        References are opaque to the engine and are only passed back to
        snapshot().
        """
        ...

    @abstractmethod
    def snapshot(self, ref: Any) -> WindowInfo:
        """Read every window property once and return them as a WindowInfo.

        Individual properties that cannot be read are left as None.

        Raises:
            PropertyReadError: If the window vanished before even its
                title could be read.
        """
        ...

    # ---- focus -----------------------------------------------------------

    @abstractmethod
    def focus(self, window: WindowInfo) -> None:
        """Bring the window to the foreground and give it keyboard focus."""
        ...


class ProcessRegistry(ABC):
    """Interface over the operating system's process table."""

    @abstractmethod
    def processes_by_name(self, name: str) -> list[Any]:
        """Return native process objects whose image name is ``name``.

        ``name`` carries no extension; matching is case-insensitive.
        Order is whatever the OS enumeration yields.
        """
        ...

    @abstractmethod
    def main_module_path(self, process: Any) -> str:
        """Return the full path of the process's main executable.

        Raises:
            Exception: Any failure (access denied, process exited) means
                the path cannot be resolved; callers exclude the process.
        """
        ...

    @abstractmethod
    def attach(self, process: Any, executable_path: str) -> ProcessHandle:
        """Return a handle for an already running process."""
        ...

    @abstractmethod
    def launch(self, executable_path: str, arguments: str = "") -> ProcessHandle:
        """Start a new process and return its handle.

        Raises:
            ProcessLaunchError: If the OS refuses to start the executable.
        """
        ...
