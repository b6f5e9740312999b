# workflow_template.py
from __future__ import annotations

from pathlib import Path

from .config import DEFAULT_WORKFLOW_PATH


GITHUB_WORKFLOW_TEMPLATE = """\
# This file was autogenerated using `docsite` via `docsite generateGithubWorkflow`
# task and should be included in the git repository. Please do not edit
# it manually.

name: Documentation

on:
  release:
    types: [created]
  workflow_dispatch:
    branches: [ main ]

jobs:
  publish-docs:
    runs-on: ubuntu-22.04
    timeout-minutes: 30
    steps:
      - uses: actions/checkout@v4
        with:
          fetch-depth: 0
      - name: Print Latest Tag For Debugging Purposes
        run: git tag --sort=committerdate | tail -1
      - uses: actions/setup-python@v5
        with:
          python-version: '3.11'
      - uses: coursier/setup-action@v1
        with:
          apps: mdoc
      - name: Install docsite
        run: pip install .
      - name: Compile Project's Documentation
        run: docsite compileDocs
      - uses: actions/setup-node@v4
        with:
          node-version: '18.x'
          registry-url: 'https://registry.npmjs.org'
      - name: Publishing Docs to NPM Registry
        run: docsite publishToNpm
        env:
          NODE_AUTH_TOKEN: ${{ secrets.NPM_TOKEN }}
"""


def generate(path: str | Path = DEFAULT_WORKFLOW_PATH) -> Path:
    """
    Write the documentation workflow to `path`.

    Any existing file is replaced wholesale; manual edits are not merged.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8", newline="\n") as fh:
        fh.write(GITHUB_WORKFLOW_TEMPLATE)
    return out
