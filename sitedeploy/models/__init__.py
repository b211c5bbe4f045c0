"""
sitedeploy Domain Models

Dataclass-based models for configuration and operation results.
"""

from .results import (
    ResultStatus,
    ErrorKind,
    RemoteResult,
    OperationResult,
)
from .config import DeploymentConfig

__all__ = [
    # Results
    "ResultStatus",
    "ErrorKind",
    "RemoteResult",
    "OperationResult",
    # Config
    "DeploymentConfig",
]
