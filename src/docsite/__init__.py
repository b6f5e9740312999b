from .config import SiteConfig, load_config
from .dag import TaskGraph
from .model import ExternalCommand, Task, TaskName
from .runner import ProcessRunner
from .tasks import build_task_graph

__all__ = [
    "SiteConfig",
    "load_config",
    "TaskGraph",
    "ExternalCommand",
    "Task",
    "TaskName",
    "ProcessRunner",
    "build_task_graph",
]
