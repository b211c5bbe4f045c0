"""
sitedeploy Services Layer

Configuration, remote transport, backups and the deployment manager.
"""

from .config_service import ConfigService
from .transport import RemoteTransport, SSHTransport
from .backup_service import BackupService
from .deploy_service import DeploymentManager

__all__ = [
    "ConfigService",
    "RemoteTransport",
    "SSHTransport",
    "BackupService",
    "DeploymentManager",
]
