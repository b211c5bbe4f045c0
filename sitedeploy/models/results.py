"""
Result Models

Dataclass models for remote command outputs and operation outcomes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ResultStatus(Enum):
    """Status of an operation result."""

    SUCCESS = "success"
    FAILURE = "failure"
    WARNING = "warning"
    CANCELLED = "cancelled"


class ErrorKind(Enum):
    """Which stage of a deploy or rollback failed."""

    CONFIG = "config"
    CONNECTIVITY = "connectivity"
    BACKUP = "backup"
    RETENTION = "retention"
    SYNC = "sync"
    ROLLBACK = "rollback"
    UNKNOWN = "unknown"


@dataclass
class RemoteResult:
    """Result of a command run against the remote host (ssh or rsync)."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    command: str = ""
    duration_seconds: float = 0.0

    @property
    def is_success(self) -> bool:
        """Check if the command succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if the command failed."""
        return self.returncode != 0

    @property
    def error_output(self) -> str:
        """stderr, falling back to stdout when stderr is empty."""
        return (self.stderr or self.stdout).strip()

    @property
    def lines(self) -> list[str]:
        """Non-empty stdout lines, in order."""
        return [line.strip() for line in self.stdout.splitlines() if line.strip()]

    def __repr__(self) -> str:
        return f"RemoteResult(returncode={self.returncode}, duration={self.duration_seconds:.2f}s)"


@dataclass
class OperationResult:
    """Outcome of a deployment manager operation."""

    status: ResultStatus
    message: str = ""
    error_kind: Optional[ErrorKind] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, message: str = "", **data) -> "OperationResult":
        return cls(ResultStatus.SUCCESS, message, data=data)

    @classmethod
    def warning(cls, kind: ErrorKind, message: str, **data) -> "OperationResult":
        return cls(ResultStatus.WARNING, message, error_kind=kind, data=data)

    @classmethod
    def cancelled(cls, message: str = "") -> "OperationResult":
        return cls(ResultStatus.CANCELLED, message)

    @classmethod
    def from_error(cls, error: Exception) -> "OperationResult":
        """Build a failure result from a sitedeploy exception."""
        kind = getattr(error, "kind", ErrorKind.UNKNOWN)
        message = getattr(error, "message", str(error))
        context = getattr(error, "context", None)
        data = {"context": context} if context else {}
        if hasattr(error, "details"):
            data.update(error.details())
        return cls(ResultStatus.FAILURE, message, error_kind=kind, data=data)

    @property
    def is_success(self) -> bool:
        """Warnings count as success: the operation completed."""
        return self.status in (ResultStatus.SUCCESS, ResultStatus.WARNING)

    @property
    def is_failure(self) -> bool:
        return self.status == ResultStatus.FAILURE

    @property
    def is_cancelled(self) -> bool:
        return self.status == ResultStatus.CANCELLED

    @property
    def exit_code(self) -> int:
        """Process exit code for this outcome."""
        return 0 if self.is_success else 1

    def __repr__(self) -> str:
        kind = self.error_kind.value if self.error_kind else "-"
        return f"OperationResult(status={self.status.value}, kind={kind})"
