"""Scoped signal relay for the single spawned child process."""

from __future__ import annotations

import signal
import subprocess
import threading
from types import FrameType, TracebackType
from typing import Any

RELAYED_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class SpawnGuard:
    """Tie a child process to the lifetime of the orchestrator.

    While the guard is active, SIGINT and SIGTERM received by the
    orchestrator terminate the child instead of the orchestrator. Leaving
    the guard, on any path, terminates a still-running child and restores
    the previous handlers.
    """

    def __init__(self, process: subprocess.Popen[Any]):
        self.process = process
        self._previous: dict[signal.Signals, Any] = {}

    def __enter__(self) -> "SpawnGuard":
        if threading.current_thread() is threading.main_thread():
            for sig in RELAYED_SIGNALS:
                self._previous[sig] = signal.signal(sig, self._relay)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            self.terminate()
            self.process.wait()
        finally:
            for sig, handler in self._previous.items():
                signal.signal(sig, handler)
            self._previous.clear()

    def _relay(self, signum: int, frame: FrameType | None) -> None:
        self.terminate()

    def terminate(self) -> None:
        if self.process.poll() is None:
            self.process.terminate()

    def wait(self) -> int:
        """Wait for the child and return its exit code in shell convention."""
        returncode = self.process.wait()
        if returncode < 0:
            return 128 - returncode
        return returncode
