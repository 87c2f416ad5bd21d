"""
wp-dind Services Layer

Instance lifecycle, cloning, workspace mode and engine access.
"""

from .clone_service import CloneService
from .compose_renderer import ComposeRenderer
from .docker_service import DockerService
from .instance_service import InstanceService
from .workspace_service import WorkspaceService
from .workspace_store import WorkspaceStore

__all__ = [
    "CloneService",
    "ComposeRenderer",
    "DockerService",
    "InstanceService",
    "WorkspaceService",
    "WorkspaceStore",
]
