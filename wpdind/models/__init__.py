"""
wp-dind Domain Models

Clean dataclass-based models for type-safe data handling.
"""

from .instance import (
    Credentials,
    Instance,
    InstanceRecord,
    InstanceStatus,
    NetworkAssignment,
    StackSpec,
)
from .results import (
    ExecutionResult,
    LifecycleResult,
    ResultStatus,
)
from .workspace import Workspace

__all__ = [
    # Instances
    "Credentials",
    "Instance",
    "InstanceRecord",
    "InstanceStatus",
    "NetworkAssignment",
    "StackSpec",
    # Results
    "ExecutionResult",
    "LifecycleResult",
    "ResultStatus",
    # Workspace
    "Workspace",
]
