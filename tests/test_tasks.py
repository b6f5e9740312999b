from __future__ import annotations

import pytest

from docsite.config import SiteConfig
from docsite.model import TaskName
from docsite.runner import ExternalToolFailure
from docsite.tasks import build_task_graph, compile_docs_command, publish_commands
from docsite.versioning import NoReleaseTagFound

from conftest import RecordingRunner


def graph_for(config, runner, tmp_path, **kwargs):
    kwargs.setdefault("release_version", lambda: "1.2.0")
    kwargs.setdefault("hash_version_fn", lambda: "2024.03.07-0123456789ab")
    return build_task_graph(config, runner, root=tmp_path, **kwargs)


def no_tags():
    raise NoReleaseTagFound(marker="v")


class FakePreview:
    """Stands in for PreviewCoordinator; records what it was asked to run."""

    instances = []

    def __init__(self, watch_command, serve_command, runner, exit_code=0):
        self.watch_command = watch_command
        self.serve_command = serve_command
        self.runner = runner
        self.exit_code = exit_code
        FakePreview.instances.append(self)

    def run_preview(self):
        self.runner.commands.append(self.serve_command)
        return self.exit_code


@pytest.fixture(autouse=True)
def clear_previews():
    FakePreview.instances.clear()


def test_compile_docs_command(config):
    cmd = compile_docs_command(config, watch=False, variables={"VERSION": "1.0"})
    assert cmd.run == "mdoc --in docs --out target/website/docs --site.VERSION 1.0"


def test_compile_docs_watch_and_dependencies(config):
    config.docs_dependencies = ["dev.zio::zio:2.0.0"]
    cmd = compile_docs_command(config, watch=True, variables={})
    assert cmd.run == (
        "mdoc --in docs --out target/website/docs --watch --no-livereload "
        "--dependency dev.zio::zio:2.0.0"
    )


def test_compile_docs_passes_versions(config, recording_runner, tmp_path):
    graph_for(config, recording_runner, tmp_path).invoke(TaskName.COMPILE_DOCS)
    (line,) = recording_runner.lines
    assert "--site.VERSION 2.0.0+12-abcdef" in line
    assert "--site.RELEASE_VERSION 1.2.0" in line


def test_compile_docs_without_release_tag(config, recording_runner, tmp_path):
    graph_for(config, recording_runner, tmp_path, release_version=no_tags).invoke(TaskName.COMPILE_DOCS)
    (line,) = recording_runner.lines
    assert "RELEASE_VERSION" not in line


def test_compile_docs_failure_exit_code(config, tmp_path):
    runner = RecordingRunner({"mdoc": 2})
    with pytest.raises(ExternalToolFailure) as exc:
        graph_for(config, runner, tmp_path).invoke(TaskName.COMPILE_DOCS)
    assert exc.value.exit_code == 2


def test_publish_to_npm_sequence(config, recording_runner, tmp_path):
    ran = graph_for(config, recording_runner, tmp_path).invoke(TaskName.PUBLISH_TO_NPM)
    assert ran == [TaskName.COMPILE_DOCS, TaskName.PUBLISH_TO_NPM]
    assert recording_runner.lines[1:] == [
        "npm version 1.2.0",
        "npm config set access public",
        "npm publish",
    ]
    assert recording_runner.commands[1].cwd == "target/website/docs"


def test_publish_snapshot_normalizes_working_version(config, recording_runner, tmp_path):
    graph_for(config, recording_runner, tmp_path).invoke(TaskName.PUBLISH_SNAPSHOT_TO_NPM)
    assert "npm version 2.0.0--12-abcdef" in recording_runner.lines


def test_publish_hashver(config, recording_runner, tmp_path):
    graph_for(config, recording_runner, tmp_path).invoke(TaskName.PUBLISH_HASHVER_TO_NPM)
    assert "npm version 2024.03.07-0123456789ab" in recording_runner.lines


def test_publish_without_release_tag_runs_no_npm(config, recording_runner, tmp_path):
    graph = graph_for(config, recording_runner, tmp_path, release_version=no_tags)
    with pytest.raises(NoReleaseTagFound):
        graph.invoke(TaskName.PUBLISH_TO_NPM)
    assert not any(line.startswith("npm") for line in recording_runner.lines)


def test_publish_failure_stops_chain(config, tmp_path):
    runner = RecordingRunner({"npm publish": 1})
    graph = graph_for(config, runner, tmp_path)
    with pytest.raises(ExternalToolFailure) as exc:
        graph.invoke(TaskName.PUBLISH_TO_NPM)
    assert exc.value.exit_code == 1
    assert runner.lines[-1] == "npm publish"
    assert TaskName.PUBLISH_TO_NPM not in graph.executed


def test_failed_version_step_skips_publish(config, tmp_path):
    runner = RecordingRunner({"npm version": 1})
    with pytest.raises(ExternalToolFailure):
        graph_for(config, runner, tmp_path).invoke(TaskName.PUBLISH_TO_NPM)
    assert "npm publish" not in runner.lines


def test_publish_forwards_token(config, monkeypatch):
    monkeypatch.setenv("NPM_TOKEN", "secret")
    publish = publish_commands(config, "1.0.0")[-1]
    assert publish.env == {"NODE_AUTH_TOKEN": "secret"}


def test_publish_without_token(config, monkeypatch):
    monkeypatch.delenv("NPM_TOKEN", raising=False)
    assert publish_commands(config, "1.0.0")[-1].env == {}


def test_preview_compiles_once_before_serving(config, recording_runner, tmp_path):
    graph = graph_for(config, recording_runner, tmp_path, preview_factory=FakePreview)
    ran = graph.invoke(TaskName.PREVIEW_WEBSITE)

    assert ran == [TaskName.COMPILE_DOCS, TaskName.PREVIEW_WEBSITE]
    compiles = [line for line in recording_runner.lines if line.startswith("mdoc")]
    assert len(compiles) == 1
    assert "--watch" not in compiles[0]
    assert recording_runner.lines[-1] == "yarn run start"

    (preview,) = FakePreview.instances
    assert "--watch --no-livereload" in preview.watch_command.run
    assert preview.serve_command.cwd == "target/website"


def test_preview_server_failure(config, recording_runner, tmp_path):
    def failing(watch, serve, runner):
        return FakePreview(watch, serve, runner, exit_code=4)

    graph = graph_for(config, recording_runner, tmp_path, preview_factory=failing)
    with pytest.raises(ExternalToolFailure) as exc:
        graph.invoke(TaskName.PREVIEW_WEBSITE)
    assert exc.value.exit_code == 4


def test_install_website(config, tmp_path):
    class ScaffoldingRunner(RecordingRunner):
        def run(self, command):
            site = tmp_path / "target" / "zio-http-website"
            (site / ".git").mkdir(parents=True)
            (site / "package.json").write_text("{}")
            return super().run(command)

    runner = ScaffoldingRunner()
    graph_for(config, runner, tmp_path).invoke(TaskName.INSTALL_WEBSITE)

    (cmd,) = runner.commands
    assert cmd.cwd == "target"
    assert cmd.run.startswith("npx @zio.dev/create-zio-website@latest zio-http-website")
    assert "--description='ZIO Http'" in cmd.run
    website = tmp_path / "target" / "website"
    assert (website / "package.json").exists()
    assert not (website / ".git").exists()
    assert not (tmp_path / "target" / "zio-http-website").exists()


def test_install_website_failure_leaves_no_site(config, tmp_path):
    runner = RecordingRunner({"npx": 1})
    with pytest.raises(ExternalToolFailure):
        graph_for(config, runner, tmp_path).invoke(TaskName.INSTALL_WEBSITE)
    assert not (tmp_path / "target" / "website").exists()


def test_generate_github_workflow_task(config, recording_runner, tmp_path):
    graph_for(config, recording_runner, tmp_path).invoke(TaskName.GENERATE_GITHUB_WORKFLOW)
    assert (tmp_path / ".github" / "workflows" / "documentation.yml").exists()
    assert recording_runner.commands == []


def test_all_tasks_registered(config, recording_runner, tmp_path):
    graph = graph_for(config, recording_runner, tmp_path)
    assert {t.name for t in graph} == set(TaskName)


def test_install_website_refuses_existing_site(config, recording_runner, tmp_path):
    (tmp_path / "target" / "website").mkdir(parents=True)
    with pytest.raises(FileExistsError):
        graph_for(config, recording_runner, tmp_path).invoke(TaskName.INSTALL_WEBSITE)
    assert recording_runner.commands == []


def test_compile_docs_outside_git_repository(tmp_path, monkeypatch):
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    runner = RecordingRunner()
    config = SiteConfig(name="Demo", version="0.1.0")
    build_task_graph(config, runner, root=tmp_path).invoke(TaskName.COMPILE_DOCS)

    (line,) = runner.lines
    assert line.startswith("mdoc ")
    assert "--site.VERSION 0.1.0" in line
    assert "RELEASE_VERSION" not in line


def test_compile_docs_without_git_or_version(tmp_path, monkeypatch):
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    runner = RecordingRunner()
    build_task_graph(SiteConfig(name="Demo"), runner, root=tmp_path).invoke(TaskName.COMPILE_DOCS)

    (line,) = runner.lines
    assert "--site." not in line
