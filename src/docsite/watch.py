# watch.py
# Preview mode: the doc compiler runs in watch mode in the background while
# the site's dev server runs in the foreground. Both touch <base>/website/docs
# without any locking; the dev server simply picks up files as they land.

from __future__ import annotations

import subprocess
import threading
from typing import Optional

from .model import ExternalCommand
from .runner import ProcessRunner
from .ui.console import get_console


class BackgroundWatch:
    """
    Handle for a long-running command started in the background.

    The child process is waited on by a daemon thread, so it never keeps
    the interpreter alive on its own. `stop()` is the only way to end it
    early and is safe to call more than once.
    """

    def __init__(self, command: ExternalCommand, runner: ProcessRunner, grace_seconds: float = 5.0):
        self.command = command
        self.runner = runner
        self.grace_seconds = grace_seconds
        self.exit_code: Optional[int] = None

        self._proc: Optional[subprocess.Popen] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def start(self) -> "BackgroundWatch":
        with self._lock:
            if self._proc is not None:
                raise RuntimeError(f"watch '{self.command.name}' already started")
            self._proc = self.runner.spawn(self.command)

        self._thread = threading.Thread(
            target=self._wait,
            args=(self._proc,),
            name=f"docsite-watch-{self.command.name}",
            daemon=True,
        )
        self._thread.start()
        return self

    def _wait(self, proc: subprocess.Popen) -> None:
        self.exit_code = proc.wait()
        get_console().print_debug(f"watch '{self.command.name}' exited with {self.exit_code}")

    def stop(self) -> None:
        with self._lock:
            proc = self._proc
        if proc is None or proc.poll() is not None:
            return

        proc.terminate()
        try:
            proc.wait(timeout=self.grace_seconds)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()

        if self._thread is not None:
            self._thread.join(timeout=self.grace_seconds)


class PreviewCoordinator:
    """Run the watch compile in the background and the dev server in the foreground."""

    def __init__(self, watch_command: ExternalCommand, serve_command: ExternalCommand, runner: ProcessRunner):
        self.watch = BackgroundWatch(watch_command, runner)
        self.serve_command = serve_command
        self.runner = runner

    def run_preview(self) -> int:
        """Block on the dev server and return its exit code."""
        self.watch.start()
        try:
            return self.runner.run(self.serve_command)
        finally:
            self.watch.stop()
