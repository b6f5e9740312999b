# dag.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set, Tuple

from .model import Prerequisite, Task, TaskName
from .ui.console import get_console


# ----------------------------------------------------------------------
# Errors (configuration problems, raised before any action runs)
# ----------------------------------------------------------------------

@dataclass
class DuplicateTaskName(Exception):
    name: str

    def __str__(self) -> str:
        return f"Duplicate task name: {self.name}"


@dataclass
class UnknownTask(Exception):
    name: str
    known: List[str] = field(default_factory=list)
    required_by: str | None = None

    def __str__(self) -> str:
        if self.required_by:
            return (
                f"Task '{self.required_by}' needs missing task '{self.name}'. "
                f"Known tasks: {sorted(self.known)}"
            )
        return f"Unknown task '{self.name}'. Known tasks: {sorted(self.known)}"


@dataclass
class CyclicDependency(Exception):
    path: List[str]

    def __str__(self) -> str:
        return "Task graph has a cycle: " + " -> ".join(self.path)


# ----------------------------------------------------------------------
# Graph
# ----------------------------------------------------------------------

class TaskGraph:
    """
    Registry of tasks plus a memoizing, depth-first executor.

    One TaskGraph is one invocation session: a task that already ran is
    not run again, however many other tasks need it, until `reset()`.
    """

    def __init__(self) -> None:
        self._tasks: Dict[TaskName, Task] = {}
        self._executed: Set[TaskName] = set()

    def register(self, task: Task) -> Task:
        if task.name in self._tasks:
            raise DuplicateTaskName(str(task.name))
        self._tasks[task.name] = task
        return task

    def __iter__(self):
        return iter(self._tasks.values())

    @property
    def executed(self) -> Set[TaskName]:
        return set(self._executed)

    def reset(self) -> None:
        self._executed.clear()

    def plan(self, name: TaskName, args: Sequence[str] = ()) -> List[Tuple[TaskName, Tuple[str, ...]]]:
        """
        Resolve `name` into an execution order.

        Prerequisites come first, depth-first in declared order; each task
        appears once. Missing prerequisites and cycles are reported here,
        so `invoke` never starts an action on a broken graph.
        """
        order: List[Tuple[TaskName, Tuple[str, ...]]] = []
        done: Set[TaskName] = set()
        stack: List[TaskName] = []

        def visit(req: Prerequisite, required_by: TaskName | None) -> None:
            if req.name in done:
                return
            if req.name in stack:
                cycle = stack[stack.index(req.name):] + [req.name]
                raise CyclicDependency([str(n) for n in cycle])
            if req.name not in self._tasks:
                raise UnknownTask(
                    name=str(req.name),
                    known=[str(n) for n in self._tasks],
                    required_by=str(required_by) if required_by else None,
                )

            stack.append(req.name)
            for dep in self._tasks[req.name].needs:
                visit(dep, req.name)
            stack.pop()

            done.add(req.name)
            order.append((req.name, tuple(req.args)))

        visit(Prerequisite(name, tuple(args)), None)
        return order

    def invoke(self, name: TaskName, args: Sequence[str] = ()) -> List[TaskName]:
        """
        Run `name` after any of its prerequisites that have not run yet.

        Returns the names whose actions actually ran. The first failing
        action propagates its exception and nothing after it runs.
        """
        console = get_console()
        ran: List[TaskName] = []

        for task_name, task_args in self.plan(name, args):
            if task_name in self._executed:
                console.print_task_skipped(str(task_name))
                continue

            console.print_task_start(str(task_name), task_args)
            self._tasks[task_name].action(task_args)
            self._executed.add(task_name)
            ran.append(task_name)

        return ran
