"""
sitedeploy Exception Hierarchy

Every exception carries the ErrorKind that the deployment manager reports
back in its OperationResult.
"""

from typing import Optional

from sitedeploy.constants import ERROR_BACKUP_NOT_FOUND
from sitedeploy.models.results import ErrorKind


class SiteDeployError(Exception):
    """Base exception for all sitedeploy errors."""

    kind = ErrorKind.UNKNOWN

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message

    def details(self) -> dict:
        """Structured extras carried into an OperationResult."""
        return {}


class ConfigurationError(SiteDeployError):
    """Raised when configuration is invalid, missing or the local source is absent."""

    kind = ErrorKind.CONFIG


class ConnectivityError(SiteDeployError):
    """Raised when the remote host cannot be reached."""

    kind = ErrorKind.CONNECTIVITY


class BackupError(SiteDeployError):
    """Raised when the pre-deploy backup cannot be created."""

    kind = ErrorKind.BACKUP


class RetentionError(SiteDeployError):
    """Raised when old backups cannot be listed or removed."""

    kind = ErrorKind.RETENTION


class SyncError(SiteDeployError):
    """Raised when rsync exits non-zero."""

    kind = ErrorKind.SYNC


class RollbackError(SiteDeployError):
    """Raised when a rollback cannot be performed."""

    kind = ErrorKind.ROLLBACK


class BackupNotFoundError(RollbackError):
    """Raised when a named backup is not in the remote listing."""

    def __init__(self, backup_name: str, available_backups: list[str]):
        self.backup_name = backup_name
        self.available_backups = available_backups
        message = ERROR_BACKUP_NOT_FOUND.format(name=backup_name)
        context = f"Available backups: {', '.join(available_backups)}"
        super().__init__(message, context)

    def details(self) -> dict:
        return {"available_backups": list(self.available_backups)}
