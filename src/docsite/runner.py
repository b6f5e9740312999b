# runner.py
from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from .model import ExternalCommand
from .ui.console import get_console


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

@dataclass
class ExternalToolFailure(Exception):
    command: str
    cwd: str
    exit_code: int

    def __str__(self) -> str:
        return f"command failed (exit={self.exit_code}) in {self.cwd}: {self.command}"


TOOL_HINTS = {
    "npm": "Install Node.js (includes npm) or fix PATH.",
    "npx": "Install Node.js (includes npx) or fix PATH.",
    "yarn": "Install yarn (e.g., npm install -g yarn) or fix PATH.",
    "mdoc": "Install the mdoc launcher (e.g., cs install mdoc) or set doc_compiler in docsite_config.py.",
    "git": "Install Git or fix PATH.",
}


def hint_for(command: str) -> str | None:
    """Best-effort install hint keyed on the first word of a command line."""
    tool = command.strip().split(" ", 1)[0] if command.strip() else ""
    return TOOL_HINTS.get(tool)


# ----------------------------------------------------------------------
# Execution primitives
# ----------------------------------------------------------------------

class ProcessRunner:
    """
    Runs external commands with the tool's own stdout/stderr.

    Output is not captured: the operator sees exactly what the wrapped
    tool prints. `run` never raises on a non-zero exit; callers decide
    what a failing exit code means (see `check_exit`).
    """

    def __init__(self, root: str | Path = "."):
        self.root = Path(root)

    def _prepare(self, command: ExternalCommand) -> tuple[Path, Dict[str, str]]:
        cwd = (self.root / (command.cwd or ".")).resolve()
        if not cwd.exists():
            raise FileNotFoundError(f"step '{command.name}' cwd not found: {cwd}")

        env = os.environ.copy()
        env.update(command.env or {})
        return cwd, env

    def run(self, command: ExternalCommand) -> int:
        """Block until `command` exits and return its exit code."""
        cwd, env = self._prepare(command)
        get_console().print_command(command.run, str(cwd))

        proc = subprocess.run(
            command.run,
            shell=True,
            cwd=str(cwd),
            env=env,
        )
        return proc.returncode

    def spawn(self, command: ExternalCommand) -> subprocess.Popen:
        """Start `command` without waiting for it."""
        cwd, env = self._prepare(command)
        get_console().print_command(command.run, str(cwd))

        return subprocess.Popen(
            command.run,
            shell=True,
            cwd=str(cwd),
            env=env,
        )


def check_exit(exit_code: int, command: ExternalCommand) -> None:
    """Abort the invocation when an external tool fails."""
    if exit_code != 0:
        raise ExternalToolFailure(
            command=command.run,
            cwd=command.cwd or ".",
            exit_code=exit_code,
        )


def run_checked(runner: ProcessRunner, command: ExternalCommand) -> None:
    check_exit(runner.run(command), command)
