"""
Workspace Model

The workspace document is the source of truth for every instance and
survives DinD host container restarts.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from wpdind.constants import (
    FIRST_NETWORK_ORDINAL,
    WORKSPACE_TYPE_MULTI_INSTANCE,
    WORKSPACE_TYPE_WORKSPACE,
)
from wpdind.models.instance import InstanceRecord, StackSpec

# Keys owned by the Workspace dataclass; anything else is carried in `extra`
_KNOWN_KEYS = {
    "workspaceName",
    "workspaceType",
    "workspaceStack",
    "initializedAt",
    "instances",
    "stack",
    "imageVersions",
    "revision",
    "nextNetworkOrdinal",
}


@dataclass
class Workspace:
    """In-memory form of the workspace JSON document."""

    workspace_name: Optional[str] = None
    workspace_type: str = WORKSPACE_TYPE_MULTI_INSTANCE
    workspace_stack: Optional[StackSpec] = None
    initialized_at: Optional[str] = None
    instances: Dict[str, InstanceRecord] = field(default_factory=dict)
    stack: Optional[Dict[str, Any]] = None
    image_versions: Dict[str, str] = field(default_factory=dict)
    revision: int = 0
    next_network_ordinal: int = FIRST_NETWORK_ORDINAL
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_workspace_mode(self) -> bool:
        return self.workspace_type == WORKSPACE_TYPE_WORKSPACE

    @property
    def is_initialized(self) -> bool:
        return self.initialized_at is not None or self.workspace_name is not None

    def get_instance(self, name: str) -> Optional[InstanceRecord]:
        return self.instances.get(name)

    def assigned_ports(self) -> list[int]:
        return [record.port for record in self.instances.values() if record.port]

    def assigned_ordinals(self) -> list[int]:
        return [
            record.network.ordinal
            for record in self.instances.values()
            if record.network is not None
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize, keeping unknown keys from the loaded document."""
        data: Dict[str, Any] = dict(self.extra)
        if self.workspace_name is not None:
            data["workspaceName"] = self.workspace_name
        data["workspaceType"] = self.workspace_type
        if self.workspace_stack is not None:
            data["workspaceStack"] = self.workspace_stack.to_dict()
        if self.initialized_at is not None:
            data["initializedAt"] = self.initialized_at
        data["instances"] = {
            name: record.to_dict() for name, record in self.instances.items()
        }
        data["stack"] = self.stack
        if self.image_versions:
            data["imageVersions"] = dict(self.image_versions)
        data["revision"] = self.revision
        data["nextNetworkOrdinal"] = self.next_network_ordinal
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Workspace":
        instances = {
            name: InstanceRecord.from_dict(name, record or {})
            for name, record in (data.get("instances") or {}).items()
        }
        return cls(
            workspace_name=data.get("workspaceName"),
            workspace_type=data.get("workspaceType") or WORKSPACE_TYPE_MULTI_INSTANCE,
            workspace_stack=StackSpec.from_dict(data.get("workspaceStack")),
            initialized_at=data.get("initializedAt"),
            instances=instances,
            stack=data.get("stack"),
            image_versions=dict(data.get("imageVersions") or {}),
            revision=int(data.get("revision", 0)),
            next_network_ordinal=int(
                data.get("nextNetworkOrdinal", FIRST_NETWORK_ORDINAL)
            ),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )

    def __repr__(self) -> str:
        return (
            f"Workspace(name={self.workspace_name}, type={self.workspace_type}, "
            f"instances={len(self.instances)}, revision={self.revision})"
        )
