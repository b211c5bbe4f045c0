"""
Configuration Management Service

Builds the DeploymentConfig from three ordered layers (hard-coded defaults,
environment, persisted JSON file) and persists it back.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import dotenv_values

from sitedeploy.constants import (
    DEFAULT_BACKUP_PATH,
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_MAX_BACKUPS,
    DEFAULT_REMOTE_PATH,
    DEFAULT_REQUIRE_CONFIRMATION,
    DEFAULT_SSH_KEY_PATH,
    DEFAULT_SSH_PORT,
    DEFAULT_SSH_USER,
    ENV_FILENAME,
    ENV_VARS,
    LEGACY_KEY_ALIASES,
)
from sitedeploy.exceptions import ConfigurationError
from sitedeploy.models.config import DeploymentConfig
from sitedeploy.utils import get_config_path, get_local_source_path

PERSISTED_KEYS = (
    "host",
    "user",
    "port",
    "key_path",
    "remote_path",
    "backup_path",
    "exclude_patterns",
    "max_backups",
    "require_confirmation",
)


def default_values() -> Dict[str, Any]:
    """Hard-coded defaults, before environment or file overrides."""
    return {
        "host": "",
        "user": DEFAULT_SSH_USER,
        "port": DEFAULT_SSH_PORT,
        "key_path": DEFAULT_SSH_KEY_PATH,
        "remote_path": DEFAULT_REMOTE_PATH,
        "backup_path": DEFAULT_BACKUP_PATH,
        "exclude_patterns": list(DEFAULT_EXCLUDE_PATTERNS),
        "max_backups": DEFAULT_MAX_BACKUPS,
        "require_confirmation": DEFAULT_REQUIRE_CONFIRMATION,
    }


def env_overrides(env: Mapping[str, Optional[str]]) -> Dict[str, str]:
    """Pick the recognised DEPLOY_* variables; empty values are ignored."""
    overrides = {}
    for key, var_name in ENV_VARS.items():
        value = env.get(var_name)
        if value:
            overrides[key] = value
    return overrides


def normalize_persisted(data: Mapping[str, Any]) -> tuple[Dict[str, Any], list[str]]:
    """
    Map persisted keys onto config keys.

    Returns:
        Tuple of (normalized values, unknown keys)
    """
    normalized: Dict[str, Any] = {}
    unknown = []
    for key, value in data.items():
        key = LEGACY_KEY_ALIASES.get(key, key)
        if key in PERSISTED_KEYS:
            normalized[key] = value
        elif key not in ("local_path", "localPath"):
            unknown.append(key)
    return normalized, unknown


def build_config(
    defaults: Mapping[str, Any],
    env: Mapping[str, Optional[str]],
    persisted: Mapping[str, Any],
    local_path: Path,
) -> DeploymentConfig:
    """
    Merge the configuration layers, later layers winning.

    Args:
        defaults: Hard-coded defaults
        env: Environment mapping (DEPLOY_* variables are picked out)
        persisted: Contents of the persisted config file
        local_path: Derived local source directory

    Raises:
        ConfigurationError: If the merged values are invalid
    """
    merged = dict(defaults)
    merged.update(env_overrides(env))
    normalized, _ = normalize_persisted(persisted)
    merged.update(normalized)

    try:
        return DeploymentConfig.from_dict(merged, local_path)
    except ValueError as e:
        raise ConfigurationError(f"Invalid deployment configuration: {e}")


class ConfigService:
    """
    Loads and saves the deployment configuration of one site project.

    Responsibilities:
    - Read .env and the process environment
    - Read and write deploy-config.json
    - Derive the local source path from the project root
    """

    def __init__(self, project_root: Path, environ: Optional[Mapping[str, str]] = None):
        self.project_root = Path(project_root)
        self._environ = environ
        self.unknown_keys: list[str] = []

    @property
    def config_path(self) -> Path:
        return get_config_path(self.project_root)

    @property
    def local_path(self) -> Path:
        return get_local_source_path(self.project_root)

    def load_environment(self) -> Dict[str, Optional[str]]:
        """.env values overlaid by the real process environment."""
        env: Dict[str, Optional[str]] = {}
        env_file = self.project_root / ENV_FILENAME
        if env_file.exists():
            env.update(dotenv_values(env_file))
        env.update(os.environ if self._environ is None else self._environ)
        return env

    def load_persisted(self) -> Dict[str, Any]:
        """
        Read the persisted config file.

        Returns:
            Parsed JSON object, or {} when the file does not exist

        Raises:
            ConfigurationError: If the file is not a JSON object
        """
        if not self.config_path.exists():
            return {}

        try:
            data = json.loads(self.config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Could not parse {self.config_path.name}: {e}",
                context=str(self.config_path),
            )

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"{self.config_path.name} must contain a JSON object",
                context=str(self.config_path),
            )

        _, self.unknown_keys = normalize_persisted(data)
        return data

    def load(self) -> DeploymentConfig:
        """Build the effective configuration for this run."""
        return build_config(
            default_values(),
            self.load_environment(),
            self.load_persisted(),
            self.local_path,
        )

    def save(self, config: DeploymentConfig) -> Path:
        """
        Persist a configuration (without the derived local path).

        Returns:
            Path of the written file
        """
        self.config_path.write_text(
            json.dumps(config.to_dict(), indent=2) + "\n", encoding="utf-8"
        )
        return self.config_path
