# cli.py
from __future__ import annotations

import sys
from pathlib import Path
from typing import Sequence

import click

from docsite.config import ConfigError, discover_config
from docsite.dag import CyclicDependency, DuplicateTaskName, TaskGraph, UnknownTask
from docsite.model import TaskName
from docsite.runner import ExternalToolFailure, hint_for
from docsite.tasks import build_task_graph
from docsite.ui.console import Console, get_console, set_console
from docsite.versioning import NoReleaseTagFound


CONFIG_EXIT_CODE = 2


def load_graph(ctx: click.Context) -> TaskGraph:
    """Build the task graph for the config selected on the command line."""
    console = get_console()
    try:
        config = discover_config(ctx.obj.get("config"))
    except ConfigError as e:
        console.print_error(
            "Invalid configuration",
            str(e),
            suggestion="Define config() -> SiteConfig or CONFIG = SiteConfig(...) in docsite_config.py",
        )
        sys.exit(CONFIG_EXIT_CODE)

    console.print_debug(f"Project: {config.name} ({config.normalized_name})")
    return build_task_graph(config, root=Path("."))


def invoke_task(ctx: click.Context, name: TaskName, args: Sequence[str] = ()) -> None:
    """Run one task (and its prerequisites), mapping failures to exit codes."""
    console = get_console()
    graph = ctx.obj.get("graph") or load_graph(ctx)

    try:
        console.print_plan([str(n) for n, _ in graph.plan(name, args)])
        graph.invoke(name, args)
        console.print_success(str(name))

    except ExternalToolFailure as e:
        console.print_error(
            "External tool failed",
            str(e),
            suggestion=hint_for(e.command) if e.exit_code == 127 else None,
        )
        sys.exit(e.exit_code)
    except NoReleaseTagFound as e:
        console.print_error(
            "No release tag found",
            str(e),
            suggestion="Tag a release first, e.g.:\n  git tag v0.1.0",
        )
        sys.exit(1)
    except (DuplicateTaskName, CyclicDependency, UnknownTask) as e:
        console.print_error("Invalid task graph", str(e))
        sys.exit(CONFIG_EXIT_CODE)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show commands, stack traces and detailed output)",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    help="Config file path (defaults to docsite_config.py if present)",
)
@click.pass_context
def cli(ctx, debug, config_path):
    """docsite: compile, preview and publish project documentation."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["config"] = config_path


@cli.command("compileDocs")
@click.option("--watch", is_flag=True, default=False, help="Recompile on file change until interrupted")
@click.pass_context
def compile_docs(ctx, watch):
    """Compile docs."""
    invoke_task(ctx, TaskName.COMPILE_DOCS, ("--watch",) if watch else ())


@cli.command("installWebsite")
@click.pass_context
def install_website(ctx):
    """Install the website for the first time."""
    invoke_task(ctx, TaskName.INSTALL_WEBSITE)


@cli.command("previewWebsite")
@click.pass_context
def preview_website(ctx):
    """Preview website (recompiles docs on change)."""
    invoke_task(ctx, TaskName.PREVIEW_WEBSITE)


@cli.command("publishToNpm")
@click.pass_context
def publish_to_npm(ctx):
    """Publish website to the npm registry using the latest release tag."""
    invoke_task(ctx, TaskName.PUBLISH_TO_NPM)


@cli.command("publishSnapshotToNpm")
@click.pass_context
def publish_snapshot_to_npm(ctx):
    """Publish website to the npm registry using the working version."""
    invoke_task(ctx, TaskName.PUBLISH_SNAPSHOT_TO_NPM)


@cli.command("publishHashverToNpm")
@click.pass_context
def publish_hashver_to_npm(ctx):
    """Publish website to the npm registry using a date + commit hash version."""
    invoke_task(ctx, TaskName.PUBLISH_HASHVER_TO_NPM)


@cli.command("generateGithubWorkflow")
@click.pass_context
def generate_github_workflow(ctx):
    """Generate github workflow."""
    invoke_task(ctx, TaskName.GENERATE_GITHUB_WORKFLOW)


@cli.command("run", context_settings={"ignore_unknown_options": True})
@click.argument("task")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run(ctx, task, args):
    """Run a task by name, e.g. `docsite run compileDocs --watch`."""
    try:
        name = TaskName.parse(task)
    except UnknownTask as e:
        get_console().print_error(
            "Unknown task",
            str(e),
            suggestion="List available tasks:\n  docsite tasks",
        )
        sys.exit(CONFIG_EXIT_CODE)
    invoke_task(ctx, name, tuple(args))


@cli.command("tasks")
@click.pass_context
def list_tasks(ctx):
    """List available tasks and their prerequisites."""
    graph = ctx.obj.get("graph") or load_graph(ctx)
    console = get_console()
    console.print_header("Tasks")
    console.print_tasks([
        (str(t.name), [str(n.name) for n in t.needs], t.description)
        for t in graph
    ])


if __name__ == "__main__":
    cli()
