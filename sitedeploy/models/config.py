"""
Deployment Configuration Model

Immutable configuration built once per run from defaults, environment and
the persisted JSON file.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "y", "on"):
            return True
        if lowered in ("0", "false", "no", "n", "off", ""):
            return False
    if isinstance(value, int):
        return bool(value)
    raise ValueError(f"Expected a boolean, got {value!r}")


def _parse_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class DeploymentConfig:
    """Where to deploy from, where to deploy to, and how many backups to keep."""

    host: str
    user: str
    port: int
    key_path: str
    remote_path: str
    backup_path: str
    local_path: Path
    exclude_patterns: tuple = field(default_factory=tuple)
    max_backups: int = 5
    require_confirmation: bool = True

    def __post_init__(self):
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")
        if self.max_backups < 0:
            raise ValueError(f"max_backups must be >= 0, got {self.max_backups}")
        if not self.remote_path:
            raise ValueError("remote_path is required")
        if not self.backup_path:
            raise ValueError("backup_path is required")

    @classmethod
    def from_dict(cls, values: Mapping[str, Any], local_path: Path) -> "DeploymentConfig":
        """
        Build a config from a merged mapping.

        Args:
            values: Merged configuration values (snake_case keys)
            local_path: Derived local source directory

        Raises:
            ValueError: If a value has the wrong type or is out of range
        """
        excludes = values.get("exclude_patterns") or []
        if isinstance(excludes, str):
            excludes = [excludes]

        return cls(
            host=str(values.get("host") or ""),
            user=str(values.get("user") or ""),
            port=_parse_int("port", values.get("port")),
            key_path=str(values.get("key_path") or ""),
            remote_path=str(values.get("remote_path") or "").rstrip("/"),
            backup_path=str(values.get("backup_path") or "").rstrip("/"),
            local_path=Path(local_path),
            exclude_patterns=tuple(str(pattern) for pattern in excludes),
            max_backups=_parse_int("max_backups", values.get("max_backups")),
            require_confirmation=_parse_bool(values.get("require_confirmation", True)),
        )

    @property
    def is_configured(self) -> bool:
        """A host is the one setting without a usable default."""
        return bool(self.host)

    @property
    def key_path_expanded(self) -> Path:
        """Get expanded key path (resolves ~)."""
        return Path(self.key_path).expanduser()

    @property
    def connection_string(self) -> str:
        """Get SSH connection string (user@host)."""
        return f"{self.user}@{self.host}"

    @property
    def target(self) -> str:
        """Remote target as user@host:path."""
        return f"{self.connection_string}:{self.remote_path}"

    def backup_dir(self, backup_name: str) -> str:
        """Remote path of a named backup."""
        return f"{self.backup_path}/{backup_name}"

    def to_dict(self) -> Dict[str, Any]:
        """Persistable mapping; the derived local path is never included."""
        data = {}
        for f in fields(self):
            if f.name == "local_path":
                continue
            value = getattr(self, f.name)
            data[f.name] = list(value) if isinstance(value, tuple) else value
        return data

    def __repr__(self) -> str:
        return f"DeploymentConfig(target={self.target}, max_backups={self.max_backups})"
