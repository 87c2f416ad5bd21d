"""
Instance Models

Dataclass models for WordPress instances and their persisted records.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class InstanceStatus(Enum):
    """Last-known status of an instance.

    CREATING, CLONING and REMOVING are transient markers written while an
    operation is in flight; finding one later means it was interrupted.
    """

    CREATING = "creating"
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"
    CLONING = "cloning"
    REMOVING = "removing"

    @property
    def is_transient(self) -> bool:
        return self in (
            InstanceStatus.CREATING,
            InstanceStatus.CLONING,
            InstanceStatus.REMOVING,
        )

    @classmethod
    def parse(cls, value: Optional[str]) -> "InstanceStatus":
        try:
            return cls(value or "created")
        except ValueError:
            return cls.CREATED


@dataclass
class StackSpec:
    """Web server + PHP + MySQL choice (versions in major.minor form)."""

    webserver: str
    php_version: str
    mysql_version: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "webserver": self.webserver,
            "phpVersion": self.php_version,
            "mysqlVersion": self.mysql_version,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["StackSpec"]:
        if not data:
            return None
        return cls(
            webserver=data.get("webserver", "nginx"),
            php_version=str(data.get("phpVersion", "8.3")),
            mysql_version=str(data.get("mysqlVersion", "8.0")),
        )

    def __str__(self) -> str:
        return f"{self.webserver}, PHP {self.php_version}, MySQL {self.mysql_version}"


@dataclass
class NetworkAssignment:
    """Per-instance private bridge network."""

    name: str
    subnet: str
    ordinal: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "subnet": self.subnet, "ordinal": self.ordinal}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["NetworkAssignment"]:
        if not data or not data.get("name"):
            return None
        return cls(
            name=data["name"],
            subnet=data.get("subnet", ""),
            ordinal=int(data.get("ordinal", 0)),
        )


@dataclass
class Credentials:
    """Database credentials generated once per instance."""

    db_name: str
    db_user: str
    db_password: str
    db_root_password: str


@dataclass
class InstanceRecord:
    """Instance entry as stored in the workspace document."""

    name: str
    port: int
    stack: StackSpec
    created_at: str
    status: InstanceStatus = InstanceStatus.CREATING
    network: Optional[NetworkAssignment] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "port": self.port,
            "stack": self.stack.to_dict(),
            "createdAt": self.created_at,
            "status": self.status.value,
        }
        if self.network:
            data["network"] = self.network.to_dict()
        return data

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "InstanceRecord":
        return cls(
            name=name,
            port=int(data.get("port", 0)),
            stack=StackSpec.from_dict(data.get("stack")) or StackSpec("nginx", "8.3", "8.0"),
            created_at=data.get("createdAt", ""),
            status=InstanceStatus.parse(data.get("status")),
            network=NetworkAssignment.from_dict(data.get("network")),
        )

    def __repr__(self) -> str:
        return f"InstanceRecord(name={self.name}, port={self.port}, status={self.status.value})"


@dataclass
class Instance:
    """Full instance view: persisted record, metadata file and live state."""

    name: str
    port: Optional[int]
    stack: StackSpec
    network: Optional[NetworkAssignment]
    credentials: Optional[Credentials]
    created_at: str
    status: InstanceStatus
    running: bool = False

    @property
    def live_status(self) -> str:
        """Status derived at query time; transient markers take precedence."""
        if self.status.is_transient:
            return self.status.value
        return "running" if self.running else "stopped"

    def container_names(self) -> list[str]:
        return [
            f"{self.name}-mysql",
            f"{self.name}-php",
            f"{self.name}-{self.stack.webserver}",
        ]

    def to_dict(self, include_secrets: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "port": self.port,
            "stack": self.stack.to_dict(),
            "network": self.network.to_dict() if self.network else None,
            "createdAt": self.created_at,
            "status": self.live_status,
        }
        if include_secrets and self.credentials:
            data["credentials"] = {
                "database": self.credentials.db_name,
                "user": self.credentials.db_user,
                "password": self.credentials.db_password,
                "rootPassword": self.credentials.db_root_password,
            }
        return data
