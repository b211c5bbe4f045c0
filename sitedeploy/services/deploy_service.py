"""
Deployment Manager

Connection test, backup, sync and rollback for one deployment target.
Every public operation returns an OperationResult; nothing raises to the
caller for an expected failure.
"""

from typing import Callable, Optional

from sitedeploy.constants import (
    ERROR_LOCAL_PATH_MISSING,
    ERROR_NOT_CONFIGURED,
    HINT_CONFIGURE,
    HINT_ROLLBACK,
)
from sitedeploy.exceptions import (
    BackupError,
    ConfigurationError,
    ConnectivityError,
    RetentionError,
    RollbackError,
    SiteDeployError,
    SyncError,
)
from sitedeploy.models.config import DeploymentConfig
from sitedeploy.models.results import ErrorKind, OperationResult
from sitedeploy.services.backup_service import BackupService, select_rollback_target
from sitedeploy.services.transport import RemoteTransport

ConfirmCallback = Callable[[str], bool]

CONFIRM_QUESTION = "This will replace files on the remote server. Continue?"


class DeploymentManager:
    """Orchestrates a deploy or rollback against a single remote host."""

    def __init__(
        self,
        config: DeploymentConfig,
        transport: RemoteTransport,
        logger,
        backup_service: Optional[BackupService] = None,
    ):
        self.config = config
        self.transport = transport
        self.logger = logger
        self.backups = backup_service or BackupService(transport, logger)

    def _fail(self, error: SiteDeployError, hint: Optional[str] = None) -> OperationResult:
        self.logger.log_error(error.message, context=error.context)
        if hint:
            self.logger.hint(hint)
        return OperationResult.from_error(error)

    def check_configuration(self) -> OperationResult:
        """Fail fast, before any remote command, if the run cannot proceed."""
        if not self.config.is_configured:
            return self._fail(ConfigurationError(ERROR_NOT_CONFIGURED), hint=HINT_CONFIGURE)
        if not self.config.local_path.is_dir():
            return self._fail(
                ConfigurationError(ERROR_LOCAL_PATH_MISSING.format(path=self.config.local_path))
            )
        return OperationResult.success()

    def test_connection(self) -> OperationResult:
        """Run a no-op remote command to prove the host is reachable."""
        self.logger.step("Testing SSH connection")
        result = self.transport.run('echo "Connection successful"')
        if result.is_success:
            self.logger.success("SSH connection successful")
            return OperationResult.success("SSH connection successful")

        failed = self._fail(
            ConnectivityError("SSH connection failed", context=result.error_output or None)
        )
        self.logger.hint("Troubleshooting:")
        self.logger.hint("  1. Check that your SSH key is correct")
        self.logger.hint("  2. Verify the host, user, and port")
        self.logger.hint(
            f"  3. Test manually: ssh -i {self.config.key_path_expanded} "
            f"-p {self.config.port} {self.config.connection_string}"
        )
        return failed

    def clean_old_backups(self) -> OperationResult:
        """Best-effort retention: failures become a warning, never a failure."""
        try:
            deleted = self.backups.clean_old_backups(self.config)
        except RetentionError as e:
            self.logger.warning(f"Could not clean old backups: {e.message}")
            return OperationResult.warning(ErrorKind.RETENTION, e.message, deleted=[])
        return OperationResult.success(deleted=deleted)

    def create_backup(self) -> OperationResult:
        """Snapshot the live site, then apply retention."""
        self.logger.step("Creating backup on remote server")
        try:
            backup_name = self.backups.snapshot(self.config)
        except BackupError as e:
            return self._fail(e)

        cleanup = self.clean_old_backups()
        return OperationResult.success(
            f"Backup created: {backup_name}",
            backup=backup_name,
            deleted=cleanup.data.get("deleted", []),
        )

    def list_backups(self) -> OperationResult:
        """Backups newest first, in data['backups']."""
        try:
            backups = self.backups.list_backups(self.config)
        except BackupError as e:
            return self._fail(e)
        return OperationResult.success(backups=backups)

    def deploy_files(self, dry_run: bool = False) -> OperationResult:
        """rsync the local source onto the remote site, deleting remote-only files."""
        self.logger.step("Simulating deployment (dry-run)" if dry_run else "Deploying files")
        result = self.transport.sync(
            str(self.config.local_path),
            self.config.remote_path,
            self.config.exclude_patterns,
            dry_run=dry_run,
        )
        if result.is_failure:
            return self._fail(
                SyncError(
                    f"rsync failed with exit code {result.returncode}",
                    context=result.error_output or None,
                )
            )

        message = "Dry-run complete" if dry_run else "Files synchronized"
        self.logger.success(message)
        return OperationResult.success(message, output=result.stdout)

    def rollback(self, backup_name: Optional[str] = None) -> OperationResult:
        """
        Restore the newest backup, or the named one.

        The live site is only touched once the target backup has been found
        in the remote listing.
        """
        if not self.config.is_configured:
            return self._fail(ConfigurationError(ERROR_NOT_CONFIGURED), hint=HINT_CONFIGURE)

        self.logger.step("Rolling back to previous version")
        try:
            try:
                backups = self.backups.list_backups(self.config)
            except BackupError as e:
                raise RollbackError(e.message, context=e.context)

            target = select_rollback_target(backups, backup_name)
            self.logger.log(f"Rolling back to: {target}")
            self.backups.restore(self.config, target)
        except RollbackError as e:
            return self._fail(e)

        self.logger.success(f"Rollback successful: {target}")
        return OperationResult.success(f"Rolled back to {target}", backup=target)

    def deploy(
        self, dry_run: bool = False, confirm: Optional[ConfirmCallback] = None
    ) -> OperationResult:
        """
        Full deploy: checks, connection test, confirmation, backup, sync.

        Args:
            dry_run: Simulate the sync; no backup is taken
            confirm: Asked before a real deploy when confirmation is required;
                None means no one can be asked, which counts as consent

        Returns:
            SUCCESS, FAILURE (with error_kind) or CANCELLED
        """
        checked = self.check_configuration()
        if checked.is_failure:
            return checked

        self.logger.log(f"Target: {self.config.target}")
        self.logger.log(f"Source: {self.config.local_path}")

        connected = self.test_connection()
        if connected.is_failure:
            return connected

        if self.config.require_confirmation and not dry_run and confirm is not None:
            if not confirm(CONFIRM_QUESTION):
                self.logger.warning("Deployment cancelled")
                return OperationResult.cancelled("Deployment cancelled")

        if dry_run:
            return self.deploy_files(dry_run=True)

        backup = self.create_backup()
        if backup.is_failure:
            self.logger.hint(HINT_ROLLBACK)
            return backup

        synced = self.deploy_files(dry_run=False)
        if synced.is_failure:
            self.logger.hint(HINT_ROLLBACK)
            return synced

        return OperationResult.success(
            "Deployment complete",
            backup=backup.data["backup"],
            deleted=backup.data.get("deleted", []),
        )
