# tasks.py
from __future__ import annotations

import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .config import SiteConfig
from .dag import TaskGraph
from .model import ExternalCommand, Task, TaskName
from .runner import ProcessRunner, check_exit, run_checked
from .ui.console import get_console
from .versioning import (
    NoReleaseTagFound,
    hash_version,
    normalize_version,
    resolve_release_version,
    working_version,
)
from .watch import PreviewCoordinator
from . import workflow_template


VersionFn = Callable[[], str]


def _once(fn: VersionFn) -> VersionFn:
    """Resolve a version at most once; later calls see the same string."""
    resolved: List[str] = []

    def wrapper() -> str:
        if not resolved:
            resolved.append(fn())
        return resolved[0]

    return wrapper


# ----------------------------------------------------------------------
# Command builders
# ----------------------------------------------------------------------

def compile_docs_command(config: SiteConfig, *, watch: bool, variables: Dict[str, str]) -> ExternalCommand:
    parts: List[str] = [
        *shlex.split(config.doc_compiler),
        "--in", config.docs_in,
        "--out", config.docs_out,
    ]
    if watch:
        parts += ["--watch", "--no-livereload"]
    for dep in config.docs_dependencies:
        parts += ["--dependency", dep]
    for key, value in variables.items():
        parts += [f"--site.{key}", value]

    return ExternalCommand(name="compile docs", run=shlex.join(parts))


def install_website_command(config: SiteConfig) -> ExternalCommand:
    run = (
        f"npx {config.site_scaffold} {config.scaffold_dir_name} \\\n"
        f"  --description={shlex.quote(config.name)} \\\n"
        f"  --author={shlex.quote(config.author)} \\\n"
        f"  --email={shlex.quote(config.email)} \\\n"
        f"  --license={shlex.quote(config.license)} \\\n"
        f"  --architecture=Linux"
    )
    return ExternalCommand(name="install website", run=run, cwd=config.base_dir)


def serve_website_command(config: SiteConfig) -> ExternalCommand:
    return ExternalCommand(
        name="serve website",
        run=f"{config.package_manager} run start",
        cwd=config.website_dir,
    )


def publish_commands(config: SiteConfig, version: str) -> List[ExternalCommand]:
    env: Dict[str, str] = {}
    token = config.npm_token()
    if token:
        env["NODE_AUTH_TOKEN"] = token

    return [
        ExternalCommand(name="set version", run=f"npm version {shlex.quote(version)}", cwd=config.docs_out),
        ExternalCommand(name="set access", run="npm config set access public"),
        ExternalCommand(name="publish", run="npm publish", cwd=config.docs_out, env=env),
    ]


# ----------------------------------------------------------------------
# Task catalogue
# ----------------------------------------------------------------------

class DocsiteTasks:
    """
    The actions behind each TaskName, bound to one SiteConfig.

    `root` is the project directory every relative path in the config is
    resolved against.
    """

    def __init__(
        self,
        config: SiteConfig,
        runner: Optional[ProcessRunner] = None,
        *,
        root: str | Path = ".",
        release_version: Optional[VersionFn] = None,
        hash_version_fn: Optional[VersionFn] = None,
        working_version_fn: Optional[VersionFn] = None,
        preview_factory: Optional[Callable[[ExternalCommand, ExternalCommand, ProcessRunner], PreviewCoordinator]] = None,
    ):
        self.config = config
        self.root = Path(root)
        self.runner = runner or ProcessRunner(self.root)

        root_str = str(self.root)
        self.release_version = _once(release_version or (
            lambda: resolve_release_version(config.release_tag_marker, cwd=root_str)
        ))
        self.hash_version = _once(hash_version_fn or (lambda: hash_version(cwd=root_str)))
        self.working_version = _once(working_version_fn or (lambda: working_version(config, cwd=root_str)))
        self.preview_factory = preview_factory or PreviewCoordinator

    # ---- compileDocs ----

    def compiler_variables(self) -> Dict[str, str]:
        """Version variables for the doc compiler; any that git cannot supply are left out."""
        console = get_console()
        variables: Dict[str, str] = {}
        for key, resolve in (("VERSION", self.working_version), ("RELEASE_VERSION", self.release_version)):
            try:
                variables[key] = resolve()
            except (NoReleaseTagFound, subprocess.CalledProcessError, FileNotFoundError) as e:
                console.print_debug(f"{key} not set: {e}")
        return variables

    def compile_docs(self, args: Sequence[str]) -> None:
        watch = bool(args) and args[0].lower() == "--watch"
        get_console().print_info(f"Compiling docs using {self.config.doc_compiler} ...")
        command = compile_docs_command(self.config, watch=watch, variables=self.compiler_variables())
        run_checked(self.runner, command)

    # ---- installWebsite ----

    def install_website(self, args: Sequence[str]) -> None:
        console = get_console()
        base = self.root / self.config.base_dir
        website = self.root / self.config.website_dir
        if website.exists():
            raise FileExistsError(f"website already installed at {website}; remove it to reinstall")
        base.mkdir(parents=True, exist_ok=True)

        command = install_website_command(self.config)
        console.print_info(f"installing website for {self.config.normalized_name} ... \n{command.run}")
        run_checked(self.runner, command)

        scaffolded = base / self.config.scaffold_dir_name
        shutil.move(str(scaffolded), str(website))

        shutil.rmtree(website / ".git", ignore_errors=True)
        console.print_info(f"website installed at {self.config.website_dir}")

    # ---- previewWebsite ----

    def preview_website(self, args: Sequence[str]) -> None:
        get_console().print_info("Starting website preview (docs are recompiled on change) ...")
        watch_command = compile_docs_command(self.config, watch=True, variables=self.compiler_variables())
        serve_command = serve_website_command(self.config)

        coordinator = self.preview_factory(watch_command, serve_command, self.runner)
        exit_code = coordinator.run_preview()
        check_exit(exit_code, serve_command)

    # ---- publish* ----

    def _publish(self, version: str) -> None:
        get_console().print_info(f"Publishing docs package version {version} to npm ...")
        for command in publish_commands(self.config, version):
            run_checked(self.runner, command)

    def publish_to_npm(self, args: Sequence[str]) -> None:
        self._publish(self.release_version())

    def publish_snapshot_to_npm(self, args: Sequence[str]) -> None:
        self._publish(normalize_version(self.working_version()))

    def publish_hashver_to_npm(self, args: Sequence[str]) -> None:
        self._publish(self.hash_version())

    # ---- generateGithubWorkflow ----

    def generate_github_workflow(self, args: Sequence[str]) -> None:
        path = workflow_template.generate(self.root / self.config.workflow_path)
        get_console().print_info(f"GitHub workflow written to {path}")

    def tasks(self) -> List[Task]:
        compile_first = [TaskName.COMPILE_DOCS]
        return [
            Task(TaskName.COMPILE_DOCS, self.compile_docs,
                 description="compile docs ([--watch] to recompile on change)"),
            Task(TaskName.INSTALL_WEBSITE, self.install_website,
                 description="install the website for the first time"),
            Task(TaskName.PREVIEW_WEBSITE, self.preview_website, needs=compile_first,
                 description="preview website"),
            Task(TaskName.PUBLISH_TO_NPM, self.publish_to_npm, needs=compile_first,
                 description="publish website to the npm registry (latest release tag)"),
            Task(TaskName.PUBLISH_SNAPSHOT_TO_NPM, self.publish_snapshot_to_npm, needs=compile_first,
                 description="publish website to the npm registry (working version)"),
            Task(TaskName.PUBLISH_HASHVER_TO_NPM, self.publish_hashver_to_npm, needs=compile_first,
                 description="publish website to the npm registry (date + commit hash)"),
            Task(TaskName.GENERATE_GITHUB_WORKFLOW, self.generate_github_workflow,
                 description="generate github workflow"),
        ]


def build_task_graph(
    config: SiteConfig,
    runner: Optional[ProcessRunner] = None,
    **kwargs,
) -> TaskGraph:
    """Register every docsite task for `config` in a fresh TaskGraph."""
    graph = TaskGraph()
    for task in DocsiteTasks(config, runner, **kwargs).tasks():
        graph.register(task)
    return graph
