"""
Result Models

Dataclass models for lifecycle operation results and engine executions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from wpdind.models.instance import Instance


class ResultStatus(Enum):
    """Outcome of a lifecycle operation."""

    APPLIED = "applied"
    PARTIAL = "partial"
    ROLLED_BACK = "rolled_back"
    REJECTED = "rejected"


@dataclass
class LifecycleResult:
    """Result of a lifecycle operation (create, start, stop, remove, clone).

    REJECTED means nothing was touched; ROLLED_BACK means the operation
    failed but its side effects were cleaned up; PARTIAL means side effects
    were left behind and `cleanup_hint` says how to reconcile them.
    """

    status: ResultStatus
    message: str
    instance: Optional[Instance] = None
    cleanup_hint: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.status == ResultStatus.APPLIED

    @property
    def exit_code(self) -> int:
        return 0 if self.is_success else 1

    @classmethod
    def applied(cls, message: str, **kwargs) -> "LifecycleResult":
        return cls(ResultStatus.APPLIED, message, **kwargs)

    @classmethod
    def rejected(cls, message: str, **kwargs) -> "LifecycleResult":
        return cls(ResultStatus.REJECTED, message, **kwargs)

    @classmethod
    def partial(cls, message: str, cleanup_hint: Optional[str] = None, **kwargs) -> "LifecycleResult":
        return cls(ResultStatus.PARTIAL, message, cleanup_hint=cleanup_hint, **kwargs)

    @classmethod
    def rolled_back(cls, message: str, **kwargs) -> "LifecycleResult":
        return cls(ResultStatus.ROLLED_BACK, message, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "status": self.status.value,
            "message": self.message,
        }
        if self.instance:
            data["instance"] = self.instance.to_dict()
        if self.cleanup_hint:
            data["cleanupHint"] = self.cleanup_hint
        if self.warnings:
            data["warnings"] = list(self.warnings)
        if self.data:
            data.update(self.data)
        return data

    def __repr__(self) -> str:
        return f"LifecycleResult(status={self.status.value}, message={self.message!r})"


@dataclass
class ExecutionResult:
    """Result of a command execution (docker, docker compose)."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    command: str = ""

    @property
    def is_success(self) -> bool:
        """Check if execution succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if execution failed."""
        return self.returncode != 0

    @property
    def output(self) -> str:
        """Get combined output (stdout + stderr)."""
        return f"{self.stdout}\n{self.stderr}".strip()

    def __repr__(self) -> str:
        return f"ExecutionResult(returncode={self.returncode}, command='{self.command[:50]}...')"
