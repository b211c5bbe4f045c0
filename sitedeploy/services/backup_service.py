"""Remote backup snapshots, retention and restore."""

from datetime import datetime, timezone
from typing import Callable, Optional

from sitedeploy.constants import BACKUP_PREFIX, ERROR_NO_BACKUPS
from sitedeploy.exceptions import (
    BackupError,
    BackupNotFoundError,
    RetentionError,
    RollbackError,
)
from sitedeploy.models.config import DeploymentConfig
from sitedeploy.services.transport import RemoteTransport


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_backup_name(now: Optional[datetime] = None) -> str:
    """
    Backup name derived from a UTC timestamp.

    Example:
        backup-2024-01-01T00-00-00-000Z
    """
    now = (now or utc_now()).astimezone(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H:%M:%S") + f".{now.microsecond // 1000:03d}Z"
    return BACKUP_PREFIX + stamp.replace(":", "-").replace(".", "-")


def select_expired(backups: list[str], max_backups: int) -> list[str]:
    """Entries past the first max_backups of a newest-first listing."""
    if len(backups) <= max_backups:
        return []
    return backups[max_backups:]


def select_rollback_target(backups: list[str], backup_name: Optional[str] = None) -> str:
    """
    Pick the backup to restore from a newest-first listing.

    Raises:
        RollbackError: If there are no backups
        BackupNotFoundError: If backup_name is not in the listing
    """
    if not backups:
        raise RollbackError(ERROR_NO_BACKUPS)
    if backup_name is None:
        return backups[0]
    if backup_name not in backups:
        raise BackupNotFoundError(backup_name, backups)
    return backup_name


def _is_missing_dir(stderr: str) -> bool:
    return "No such file or directory" in stderr


class BackupService:
    """Service for managing remote backup operations."""

    def __init__(
        self,
        transport: RemoteTransport,
        logger,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.transport = transport
        self.logger = logger
        self.clock = clock

    def list_backups(self, config: DeploymentConfig) -> list[str]:
        """
        List backup names, newest first (remote modification time order).

        A backup root that does not exist yet lists as empty.

        Raises:
            BackupError: If the remote listing fails
        """
        result = self.transport.list_entries(config.backup_path)
        if result.is_failure:
            if _is_missing_dir(result.stderr):
                return []
            raise BackupError(
                f"Could not list backups in {config.backup_path}",
                context=result.error_output,
            )
        return [name for name in result.lines if name.startswith(BACKUP_PREFIX)]

    def snapshot(self, config: DeploymentConfig) -> str:
        """
        Copy the live remote site into a new timestamped backup.

        Returns:
            Name of the created backup

        Raises:
            BackupError: If the backup root cannot be created or the copy fails
        """
        backup_name = generate_backup_name(self.clock())

        result = self.transport.make_dirs(config.backup_path)
        if result.is_failure:
            raise BackupError(
                f"Could not create backup directory {config.backup_path}",
                context=result.error_output,
            )

        result = self.transport.copy_tree(config.remote_path, config.backup_dir(backup_name))
        if result.is_failure:
            raise BackupError(
                f"Could not copy {config.remote_path} to {config.backup_dir(backup_name)}",
                context=result.error_output,
            )

        self.logger.success(f"Backup created: {backup_name}")
        return backup_name

    def clean_old_backups(self, config: DeploymentConfig) -> list[str]:
        """
        Delete backups beyond max_backups, in listing order.

        Returns:
            Names of the deleted backups

        Raises:
            RetentionError: If listing or any deletion fails
        """
        try:
            backups = self.list_backups(config)
        except BackupError as e:
            raise RetentionError(e.message, context=e.context)

        expired = select_expired(backups, config.max_backups)
        if not expired:
            return []

        self.logger.log(
            f"Cleaning old backups (keeping {config.max_backups} most recent)"
        )
        deleted = []
        for backup_name in expired:
            result = self.transport.remove_tree(config.backup_dir(backup_name))
            if result.is_failure:
                raise RetentionError(
                    f"Could not delete backup {backup_name}",
                    context=result.error_output,
                )
            deleted.append(backup_name)
            self.logger.success(f"Deleted old backup: {backup_name}")
        return deleted

    def restore(self, config: DeploymentConfig, backup_name: str) -> None:
        """
        Replace the live remote site with a copy of a backup.

        Raises:
            RollbackError: If the remote restore command fails
        """
        result = self.transport.restore_tree(config.backup_dir(backup_name), config.remote_path)
        if result.is_failure:
            raise RollbackError(
                f"Could not restore {backup_name}",
                context=result.error_output,
            )
