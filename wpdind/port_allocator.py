"""Host port allocation for multi-instance workspaces

Ports are handed out append-only: a new instance always gets a port above
every port currently assigned, so a removed instance's port is only reused
when it was the highest one.
"""

from typing import Iterable

from wpdind.constants import DEFAULT_INSTANCE_PORT_START


def next_port(
    existing_ports: Iterable[int], range_start: int = DEFAULT_INSTANCE_PORT_START
) -> int:
    """
    Compute the next host port for a new instance.

    Args:
        existing_ports: Ports assigned to any instance in the workspace
        range_start: Lowest port ever handed out

    Returns:
        Smallest port >= range_start that is greater than every existing port
    """
    next_value = range_start
    for port in existing_ports:
        if port is None:
            continue
        if port >= next_value:
            next_value = port + 1
    return next_value
