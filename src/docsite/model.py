# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Sequence


class TaskName(str, Enum):
    """The closed set of tasks docsite knows how to run."""

    COMPILE_DOCS = "compileDocs"
    INSTALL_WEBSITE = "installWebsite"
    PREVIEW_WEBSITE = "previewWebsite"
    PUBLISH_TO_NPM = "publishToNpm"
    PUBLISH_SNAPSHOT_TO_NPM = "publishSnapshotToNpm"
    PUBLISH_HASHVER_TO_NPM = "publishHashverToNpm"
    GENERATE_GITHUB_WORKFLOW = "generateGithubWorkflow"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: str) -> "TaskName":
        """Validate a task name coming from the command line (case-sensitive)."""
        from .dag import UnknownTask

        for member in cls:
            if member.value == raw:
                return member
        raise UnknownTask(name=raw, known=[m.value for m in cls])


@dataclass(frozen=True)
class ExternalCommand:
    """A single shell command plus the directory it runs in."""
    name: str
    run: str
    cwd: str | None = None
    env: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Prerequisite:
    """A task that must run before another one, with the args it runs with."""
    name: TaskName
    args: tuple[str, ...] = ()


Action = Callable[[Sequence[str]], None]


@dataclass
class Task:
    """
    A named unit of work: prerequisites + one side-effecting action.

    `needs` accepts either Prerequisite objects or bare TaskName values.
    """
    name: TaskName
    action: Action
    needs: list[Prerequisite] = field(default_factory=list)
    description: str = ""

    def __post_init__(self) -> None:
        self.needs = [n if isinstance(n, Prerequisite) else Prerequisite(n) for n in self.needs]
