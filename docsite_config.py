# docsite_config.py
# Example project configuration, loaded by `docsite` from the current directory.
from __future__ import annotations

from docsite.config import SiteConfig


def config():
    return SiteConfig(
        name="docsite",
        docs_dependencies=[],
    )
