"""
Workspace Service

Workspace document initialization and single-site ("workspace") mode, where
the DinD host runs exactly one implicit WordPress stack on port 8000.
"""

import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from wpdind.config import Settings
from wpdind.constants import (
    DIND_IMAGE_VERSION,
    IMAGE_VERSIONS,
    INSTANCE_NAME_PATTERN,
    MYSQL_IMAGE_VERSIONS,
    PHP_IMAGE_VERSIONS,
    SHARED_SERVICES,
    WEBSERVERS,
    WORKSPACE_DB_ROOT_PASSWORD,
    WORKSPACE_MYSQL_READY_ATTEMPTS,
    WORKSPACE_MYSQL_READY_DELAY,
    WORKSPACE_PORT,
    WORKSPACE_TYPE_MULTI_INSTANCE,
    WORKSPACE_TYPE_WORKSPACE,
    WORKSPACE_TYPES,
)
from wpdind.exceptions import EngineError, ValidationError
from wpdind.logger import OperationLogger
from wpdind.models.instance import StackSpec
from wpdind.models.results import LifecycleResult
from wpdind.models.workspace import Workspace
from wpdind.network_allocator import NetworkAllocator
from wpdind.services.compose_renderer import WORKSPACE_PROJECT, ComposeRenderer
from wpdind.services.workspace_store import WorkspaceStore
from wpdind.versions import code_to_dotted, normalize_code, resolve_stack

WORKSPACE_CONTAINER_PREFIX = "workspace-"


class WorkspaceService:
    """Initialize the workspace document and drive single-site mode."""

    def __init__(
        self,
        settings: Settings,
        docker,
        store: Optional[WorkspaceStore] = None,
        logger: Optional[OperationLogger] = None,
    ):
        self.settings = settings
        self.docker = docker
        self.store = store or WorkspaceStore(settings.workspace_config, settings.lock_timeout)
        self.logger = logger
        self.renderer = ComposeRenderer(settings)
        self.networks = NetworkAllocator(docker)

    @property
    def nginx_config_path(self):
        return self.settings.workspace_compose_file.with_name("workspace-nginx.conf")

    # ------------------------------------------------------------------
    # init
    # ------------------------------------------------------------------

    def init_workspace(
        self,
        workspace_name: str,
        workspace_type: str = WORKSPACE_TYPE_MULTI_INSTANCE,
        webserver: Optional[str] = None,
        php_version: Optional[str] = None,
        mysql_version: Optional[str] = None,
    ) -> LifecycleResult:
        """
        Write the workspace document.

        The type is fixed at init time; an already initialized document is
        never overwritten.
        """
        try:
            if not workspace_name or not re.match(INSTANCE_NAME_PATTERN, workspace_name):
                raise ValidationError(
                    f"Invalid workspace name '{workspace_name}'",
                    context="Use only letters, numbers, hyphens and underscores",
                )
            if workspace_type not in WORKSPACE_TYPES:
                raise ValidationError(
                    f"Invalid workspace type '{workspace_type}'",
                    context=f"Choose one of: {', '.join(WORKSPACE_TYPES)}",
                )

            warnings = []
            workspace_stack = None
            if workspace_type == WORKSPACE_TYPE_WORKSPACE:
                stack = resolve_stack(
                    mysql_version or self.settings.default_mysql_version,
                    php_version or self.settings.default_php_version,
                    webserver or self.settings.default_webserver,
                )
                warnings = list(stack.substitutions)
                workspace_stack = StackSpec(
                    stack.webserver, stack.php_version, stack.mysql_version
                )

            with self.store.transaction("init") as workspace:
                if workspace.is_initialized:
                    raise ValidationError(
                        f"Workspace '{workspace.workspace_name}' is already initialized",
                        context=f"Configuration: {self.store.config_path}",
                    )
                if workspace.instances and workspace_type == WORKSPACE_TYPE_WORKSPACE:
                    raise ValidationError(
                        "Cannot switch to single-site mode while instances exist"
                    )
                self._populate(workspace, workspace_name, workspace_type, workspace_stack)
        except ValidationError as e:
            if self.logger:
                self.logger.log_error(e.message, context=e.context)
            return LifecycleResult.rejected(e.format_message())

        if self.logger:
            for message in warnings:
                self.logger.warning(message)
            self.logger.success(f"Workspace '{workspace_name}' initialized ({workspace_type})")
        return LifecycleResult.applied(
            f"Workspace '{workspace_name}' initialized",
            warnings=warnings,
            data={"workspace": workspace.to_dict()},
        )

    def _populate(
        self,
        workspace: Workspace,
        workspace_name: str,
        workspace_type: str,
        workspace_stack: Optional[StackSpec],
    ) -> None:
        workspace.workspace_name = workspace_name
        workspace.workspace_type = workspace_type
        workspace.workspace_stack = workspace_stack
        workspace.initialized_at = (
            datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        )
        workspace.stack = {
            "dindImage": f"{self.settings.image_repository}:dind-{DIND_IMAGE_VERSION}",
            "phpVersions": [code_to_dotted(code) for code in PHP_IMAGE_VERSIONS],
            "mysqlVersions": [code_to_dotted(code) for code in MYSQL_IMAGE_VERSIONS],
            "webservers": list(WEBSERVERS),
            "services": dict(SHARED_SERVICES),
        }
        workspace.image_versions = dict(IMAGE_VERSIONS)

    # ------------------------------------------------------------------
    # Single-site mode
    # ------------------------------------------------------------------

    def _mode(self, workspace: Workspace) -> str:
        if self.store.exists():
            return workspace.workspace_type
        return self.settings.workspace_type or WORKSPACE_TYPE_MULTI_INSTANCE

    def _stack(self, workspace: Workspace) -> StackSpec:
        return workspace.workspace_stack or StackSpec(
            self.settings.default_webserver,
            code_to_dotted(normalize_code(self.settings.default_php_version)),
            code_to_dotted(normalize_code(self.settings.default_mysql_version)),
        )

    def start(self) -> LifecycleResult:
        """
        Start the single-site stack.

        A no-op success when the workspace is not in single-site mode, so the
        DinD entrypoint can call it unconditionally.
        """
        workspace = self.store.load()
        if self._mode(workspace) != WORKSPACE_TYPE_WORKSPACE:
            return LifecycleResult.applied("Not in workspace mode, skipping workspace startup")

        spec = self._stack(workspace)
        try:
            stack = resolve_stack(spec.mysql_version, spec.php_version, spec.webserver)
        except ValidationError as e:
            return LifecycleResult.rejected(e.format_message())
        if self.logger:
            for message in stack.substitutions:
                self.logger.warning(message)

        compose_file = self.settings.workspace_compose_file
        try:
            if self.logger:
                self.logger.step("Preparing workspace stack")
            if self.networks.ensure_shared_network() and self.logger:
                self.logger.success("Created shared network")

            if stack.webserver == "nginx":
                self.nginx_config_path.parent.mkdir(parents=True, exist_ok=True)
                self.nginx_config_path.write_text(
                    self.renderer.render_webserver_config("nginx", php_host="workspace-php")
                )
            descriptor = self.renderer.render_workspace_compose(stack, self.nginx_config_path)
            self.renderer.write_compose(compose_file, descriptor)

            if self.logger:
                self.logger.step("Starting workspace containers")
            self.docker.compose_up(compose_file, WORKSPACE_PROJECT)
        except (EngineError, OSError) as e:
            message = getattr(e, "message", str(e))
            if self.logger:
                self.logger.log_error(message, context=getattr(e, "context", None))
            return LifecycleResult.partial(
                f"Failed to start workspace: {message}",
                cleanup_hint="wp-dind workspace:stop",
            )

        if self.logger:
            self.logger.step("Waiting for MySQL")
        if not self.docker.wait_for_mysql(
            "workspace-mysql",
            WORKSPACE_DB_ROOT_PASSWORD,
            WORKSPACE_MYSQL_READY_ATTEMPTS,
            WORKSPACE_MYSQL_READY_DELAY,
        ):
            return LifecycleResult.partial(
                f"MySQL failed to start within "
                f"{WORKSPACE_MYSQL_READY_ATTEMPTS * WORKSPACE_MYSQL_READY_DELAY} seconds",
                cleanup_hint="docker logs workspace-mysql",
            )

        return LifecycleResult.applied(
            "Workspace started",
            data={
                "url": f"http://localhost:{WORKSPACE_PORT}",
                "stack": StackSpec(
                    stack.webserver, stack.php_version, stack.mysql_version
                ).to_dict(),
            },
        )

    def stop(self) -> LifecycleResult:
        """Tear down the single-site stack (no-op if it was never rendered)."""
        compose_file = self.settings.workspace_compose_file
        if not compose_file.exists():
            return LifecycleResult.applied("No workspace compose file found")

        try:
            self.docker.compose_down(compose_file, WORKSPACE_PROJECT)
        except EngineError as e:
            if self.logger:
                self.logger.log_error(e.message, context=e.context)
            return LifecycleResult.partial(
                f"Failed to stop workspace: {e.stderr or e.message}",
                cleanup_hint=f"docker compose -f {compose_file} down",
            )
        return LifecycleResult.applied("Workspace stopped")

    def status(self) -> Dict[str, Any]:
        """Mode, stack and running workspace containers."""
        workspace = self.store.load()
        mode = self._mode(workspace)
        if mode != WORKSPACE_TYPE_WORKSPACE:
            return {"mode": mode, "enabled": False}

        containers = {
            name: details
            for name, details in self.docker.running_containers().items()
            if name.startswith(WORKSPACE_CONTAINER_PREFIX)
        }
        return {
            "mode": mode,
            "enabled": True,
            "workspaceName": workspace.workspace_name,
            "stack": self._stack(workspace).to_dict(),
            "status": "running" if containers else "stopped",
            "containers": containers,
        }
