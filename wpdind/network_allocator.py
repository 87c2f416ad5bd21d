"""Network allocation for multi-instance workspaces

Each instance gets a private bridge network `wp-network-N` with subnet
`172.20.N.0/24`. N comes from a monotonically increasing counter stored in
the workspace document, so removing an instance never causes a live
instance's network to be handed out again.

Every instance service is also attached to the fixed shared network
`wp-shared` (172.21.0.0/16), where the platform services live.
"""

import ipaddress
from typing import Dict, Iterable, List, Optional

from wpdind.constants import (
    FIRST_NETWORK_ORDINAL,
    INSTANCE_SUBNET_TEMPLATE,
    MAX_NETWORK_ORDINAL,
    NETWORK_PREFIX,
    SHARED_NETWORK_NAME,
    SHARED_NETWORK_SUBNET,
)
from wpdind.exceptions import NetworkExhaustedError, ResourceConflictError
from wpdind.models.instance import NetworkAssignment
from wpdind.models.workspace import Workspace


def next_network(ordinal: int) -> NetworkAssignment:
    """
    Build the network name and subnet for an ordinal.

    Args:
        ordinal: Instance network ordinal (1..255)

    Returns:
        NetworkAssignment (e.g. wp-network-3, 172.20.3.0/24)

    Raises:
        NetworkExhaustedError: If ordinal is outside the usable range
    """
    if ordinal < FIRST_NETWORK_ORDINAL or ordinal > MAX_NETWORK_ORDINAL:
        raise NetworkExhaustedError(
            f"No more instance networks available (ordinal {ordinal})",
            context=f"Instance subnets are limited to 172.20.{FIRST_NETWORK_ORDINAL}-"
            f"{MAX_NETWORK_ORDINAL}.0/24",
        )
    return NetworkAssignment(
        name=f"{NETWORK_PREFIX}-{ordinal}",
        subnet=INSTANCE_SUBNET_TEMPLATE.format(ordinal=ordinal),
        ordinal=ordinal,
    )


class NetworkAllocator:
    """Allocate instance networks and manage the shared network."""

    def __init__(self, docker):
        """
        Args:
            docker: DockerService (or any object with list_networks /
                create_network / network_exists)
        """
        self.docker = docker

    def reserve_ordinal(self, workspace: Workspace, known_ordinals: Iterable[int] = ()) -> int:
        """
        Take the next ordinal from the workspace counter.

        Must be called inside a WorkspaceStore transaction; the counter is
        advanced in `workspace` and persisted when the transaction saves.

        Args:
            workspace: Loaded workspace document
            known_ordinals: Ordinals recorded outside the document, such as
                instance metadata files from documents without a counter
        """
        ordinal = max(
            [workspace.next_network_ordinal, FIRST_NETWORK_ORDINAL]
            + [o + 1 for o in workspace.assigned_ordinals()]
            + [o + 1 for o in known_ordinals]
        )
        next_network(ordinal)  # range check
        workspace.next_network_ordinal = ordinal + 1
        return ordinal

    def check_available(
        self,
        assignment: NetworkAssignment,
        existing: Optional[Dict[str, List[str]]] = None,
    ) -> None:
        """
        Verify no engine network already owns the name or subnet.

        Args:
            assignment: Proposed network
            existing: Engine networks as {name: [subnets]} (queried if None)

        Raises:
            ResourceConflictError: On a name or subnet collision
        """
        if existing is None:
            existing = self.docker.list_networks()

        if assignment.name in existing:
            raise ResourceConflictError(
                f"Network '{assignment.name}' already exists",
                context="Remove the stale network with: docker network rm "
                f"{assignment.name}",
            )

        proposed = ipaddress.ip_network(assignment.subnet)
        for name, subnets in existing.items():
            for subnet in subnets:
                if _overlaps(proposed, subnet):
                    raise ResourceConflictError(
                        f"Subnet {assignment.subnet} overlaps network '{name}' ({subnet})"
                    )

    def ensure_shared_network(self) -> bool:
        """
        Create the shared network if missing.

        Returns:
            True if it was created by this call, False if it already existed
        """
        if self.docker.network_exists(SHARED_NETWORK_NAME):
            return False
        self.docker.create_network(SHARED_NETWORK_NAME, SHARED_NETWORK_SUBNET)
        return True


def _overlaps(proposed: ipaddress.IPv4Network, subnet: str) -> bool:
    try:
        other = ipaddress.ip_network(subnet, strict=False)
    except ValueError:
        return False
    if other.version != proposed.version:
        return False
    return proposed.overlaps(other)
