# config.py
from __future__ import annotations

import os
import re
import runpy
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


DEFAULT_CONFIG_FILE = "docsite_config.py"
DEFAULT_WORKFLOW_PATH = ".github/workflows/documentation.yml"


@dataclass
class ConfigError(Exception):
    message: str
    path: str | None = None

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} ({self.path})"
        return self.message


def normalize_name(name: str) -> str:
    """
    Turn a display name into an identifier usable in package and dir names.

    "ZIO Http" -> "zio-http", "My_Lib 2" -> "my-lib-2".
    """
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


@dataclass
class SiteConfig:
    """
    Everything the docsite tasks need to know about a project.

    Built once per CLI invocation and handed to every task; tasks never
    look settings up anywhere else.
    """
    name: str
    version: Optional[str] = None
    normalized_name: Optional[str] = None

    # Layout (relative to the project root)
    base_dir: str = "target"
    docs_in: str = "docs"

    # Doc compiler
    doc_compiler: str = "mdoc"
    docs_dependencies: List[str] = field(default_factory=list)

    # Site scaffolding / serving
    site_scaffold: str = "@zio.dev/create-zio-website@latest"
    author: str = "ZIO Contributors"
    email: str = "email@zio.dev"
    license: str = "Apache-2.0"
    package_manager: str = "yarn"

    # Publishing
    release_tag_marker: str = "v"
    npm_token_env: str = "NPM_TOKEN"

    workflow_path: str = DEFAULT_WORKFLOW_PATH

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ConfigError("SiteConfig.name must not be empty")
        if not self.normalized_name:
            self.normalized_name = normalize_name(self.name)

    @classmethod
    def from_directory(cls, path: str | Path) -> "SiteConfig":
        """Defaults for a project that ships no docsite_config.py."""
        return cls(name=Path(path).resolve().name)

    @property
    def website_dir(self) -> str:
        return f"{self.base_dir}/website"

    @property
    def docs_out(self) -> str:
        return f"{self.website_dir}/docs"

    @property
    def scaffold_dir_name(self) -> str:
        return f"{self.normalized_name}-website"

    def npm_token(self) -> Optional[str]:
        """Read the registry token from the environment (at publish time)."""
        return os.environ.get(self.npm_token_env) or None


# ----------------------------------------------------------------------
# Loading (local python file)
# ----------------------------------------------------------------------

def load_config(path: str | Path) -> SiteConfig:
    """
    Load a SiteConfig from a python file path.

    The file must define either:
      - config() -> SiteConfig
      - CONFIG = SiteConfig(...)
    """
    cfg_path = Path(path).expanduser().resolve()
    if not cfg_path.exists():
        raise ConfigError("Config file not found", str(cfg_path))
    if cfg_path.suffix != ".py":
        raise ConfigError(f"Config must be a .py file, got: {cfg_path.name}", str(cfg_path))

    module_name = f"docsite_config_{cfg_path.stem}"
    globals_dict = runpy.run_path(str(cfg_path), run_name=module_name)

    cfg = None
    if "config" in globals_dict and callable(globals_dict["config"]):
        cfg = globals_dict["config"]()
    elif "CONFIG" in globals_dict:
        cfg = globals_dict["CONFIG"]

    if not isinstance(cfg, SiteConfig):
        raise ConfigError(
            "Config must return/define a SiteConfig. "
            "Define config() -> SiteConfig or CONFIG = SiteConfig(...).",
            str(cfg_path),
        )
    return cfg


def discover_config(config_arg: str | None, cwd: str | Path = ".") -> SiteConfig:
    """
    Resolve the SiteConfig for this invocation.

    An explicit path must exist. Otherwise docsite_config.py in `cwd` is
    used when present, and plain defaults when it is not.
    """
    if config_arg:
        cfg_path = Path(config_arg)
        if not cfg_path.exists() and cfg_path.suffix != ".py":
            cfg_path = Path(str(cfg_path) + ".py")
        return load_config(cfg_path)

    default = Path(cwd) / DEFAULT_CONFIG_FILE
    if default.exists():
        return load_config(default)

    return SiteConfig.from_directory(cwd)
