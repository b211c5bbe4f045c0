"""
sitedeploy Utilities

Project root detection and path helpers.
"""

import os
from pathlib import Path
from typing import Optional

from sitedeploy.constants import CONFIG_FILENAME, LOCAL_SOURCE_DIRNAME, LOGS_DIRNAME

ROOT_ENV_VAR = "SITEDEPLOY_ROOT"


def get_project_root(root: Optional[str] = None) -> Path:
    """
    Get the site project root.

    Resolution order: explicit argument, SITEDEPLOY_ROOT, current directory.
    """
    if root:
        return Path(root).expanduser().resolve()
    env_root = os.environ.get(ROOT_ENV_VAR)
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path.cwd()


def get_local_source_path(project_root: Path) -> Path:
    """Directory whose contents are mirrored to the remote site."""
    return project_root / LOCAL_SOURCE_DIRNAME


def get_config_path(project_root: Path) -> Path:
    return project_root / CONFIG_FILENAME


def get_logs_dir(project_root: Path) -> Path:
    return project_root / LOGS_DIRNAME
