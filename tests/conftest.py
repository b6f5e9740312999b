from __future__ import annotations

from typing import Dict, List

import pytest

from docsite.config import SiteConfig
from docsite.model import ExternalCommand
from docsite.runner import ProcessRunner
from docsite.ui.console import Console, set_console


class RecordingRunner(ProcessRunner):
    """ProcessRunner that records commands instead of executing them."""

    def __init__(self, exit_codes: Dict[str, int] | None = None):
        super().__init__(".")
        # substring of command line -> exit code
        self.exit_codes = exit_codes or {}
        self.commands: List[ExternalCommand] = []

    def run(self, command: ExternalCommand) -> int:
        self.commands.append(command)
        for needle, code in self.exit_codes.items():
            if needle in command.run:
                return code
        return 0

    @property
    def lines(self) -> List[str]:
        return [c.run for c in self.commands]


@pytest.fixture(autouse=True)
def quiet_console():
    set_console(Console(debug=False))
    yield


@pytest.fixture
def config() -> SiteConfig:
    return SiteConfig(name="ZIO Http", version="2.0.0+12-abcdef")


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()
