"""Console output formatting utilities for docsite."""

from __future__ import annotations

import sys
from typing import Optional, Sequence


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show command lines, cwd and stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_task_start(self, name: str, args: Sequence[str] = ()) -> None:
        """Print task start message."""
        suffix = f" {' '.join(args)}" if args else ""
        print(f"\nTASK: {name}{suffix}")

    def print_task_skipped(self, name: str) -> None:
        """Print message for a task that already ran in this invocation."""
        self.print_debug(f"{name} already executed, skipping")

    def print_command(self, command: str, cwd: str) -> None:
        """Print the command line about to be executed (debug only)."""
        self.print_debug(f"$ {command}  (cwd={cwd})")

    def print_plan(self, names: Sequence[str]) -> None:
        """Print the resolved execution order."""
        print("PLAN: " + " -> ".join(names))

    def print_tasks(self, rows: Sequence[tuple[str, Sequence[str], str]]) -> None:
        """Print the task catalogue: name, prerequisites, description."""
        width = max((len(name) for name, _, _ in rows), default=0)
        for name, needs, description in rows:
            deps = f" (needs: {', '.join(needs)})" if needs else ""
            print(f"  {name.ljust(width)}  {description}{deps}")

    def print_success(self, name: str) -> None:
        """Print success message."""
        print(f"DONE: {name}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
