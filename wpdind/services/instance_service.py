"""
Instance Service

Lifecycle of multi-instance WordPress stacks: create, start, stop, remove,
plus the list / info / logs queries.
"""

import re
import shutil
import socket
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from wpdind.config import Settings
from wpdind.constants import (
    COMPOSE_FILE_NAME,
    CONTAINER_HTTP_PORT,
    INSTANCE_NAME_PATTERN,
    MYSQL_DATA_DIR,
    WEBSERVERS,
    WORDPRESS_DATA_DIR,
)
from wpdind.exceptions import (
    EngineError,
    InstanceExistsError,
    InstanceNotFoundError,
    ResourceConflictError,
    StateError,
    ValidationError,
    WpDindError,
)
from wpdind.instance_info import (
    has_instance_info,
    network_ordinal,
    read_instance_info,
    write_instance_info,
)
from wpdind.logger import OperationLogger
from wpdind.models.instance import (
    Credentials,
    Instance,
    InstanceRecord,
    InstanceStatus,
    NetworkAssignment,
    StackSpec,
)
from wpdind.models.results import LifecycleResult
from wpdind.network_allocator import NetworkAllocator, next_network
from wpdind.passwords import generate_password
from wpdind.port_allocator import next_port
from wpdind.services.compose_renderer import ComposeRenderer
from wpdind.services.workspace_store import WorkspaceStore
from wpdind.versions import ResolvedStack, resolve_stack

LOG_SERVICES = ["mysql", "php", "web", *WEBSERVERS]


def validate_instance_name(name: Optional[str]) -> str:
    """
    Check an instance name against ^[A-Za-z0-9_-]+$.

    Raises:
        ValidationError: On an empty or malformed name
    """
    if not name or not re.match(INSTANCE_NAME_PATTERN, name):
        raise ValidationError(
            f"Invalid instance name '{name}'",
            context="Use only letters, numbers, hyphens and underscores",
        )
    return name


def _now() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


class InstanceService:
    """
    Instance registry and lifecycle manager.

    Mutations of the workspace document happen inside short locked
    transactions; engine and filesystem work happens outside the lock.
    """

    def __init__(
        self,
        settings: Settings,
        docker,
        store: Optional[WorkspaceStore] = None,
        logger: Optional[OperationLogger] = None,
    ):
        """
        Initialize instance service.

        Args:
            settings: Manager settings
            docker: DockerService (or a fake with the same interface)
            store: Workspace store (built from settings when None)
            logger: Optional operation logger
        """
        self.settings = settings
        self.docker = docker
        self.store = store or WorkspaceStore(settings.workspace_config, settings.lock_timeout)
        self.logger = logger
        self.renderer = ComposeRenderer(settings)
        self.networks = NetworkAllocator(docker)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def instance_dir(self, name: str) -> Path:
        return self.settings.instance_dir(name)

    def compose_file(self, name: str) -> Path:
        return self.instance_dir(name) / COMPOSE_FILE_NAME

    def exists_on_disk(self, name: str) -> bool:
        return self.instance_dir(name).exists()

    def instance_names(self) -> List[str]:
        """Names of instance directories that carry a metadata file."""
        root = self.settings.instances_dir
        if not root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in root.iterdir()
            if entry.is_dir() and not entry.name.startswith(".") and has_instance_info(entry)
        )

    def require_instance(self, name: str) -> Instance:
        """
        Load an instance from its metadata file.

        Raises:
            ValidationError: On a malformed name
            InstanceNotFoundError: If the directory or metadata file is missing
        """
        validate_instance_name(name)
        instance_dir = self.instance_dir(name)
        if not instance_dir.is_dir() or not has_instance_info(instance_dir):
            raise InstanceNotFoundError(name, available=self.instance_names())
        return read_instance_info(
            instance_dir,
            default_db_name=self.settings.default_db_name,
            default_db_user=self.settings.default_db_user,
        )

    # ------------------------------------------------------------------
    # create
    # ------------------------------------------------------------------

    def create(
        self,
        name: str,
        mysql_version: Optional[str] = None,
        php_version: Optional[str] = None,
        webserver: Optional[str] = None,
    ) -> LifecycleResult:
        """
        Create a new instance (directories, configs, compose file, metadata).

        Port and network ordinal are reserved under the workspace lock before
        any side effect. Containers are not started.

        Returns:
            LifecycleResult: applied, rejected, rolled_back or partial
        """
        try:
            validate_instance_name(name)
            stack = resolve_stack(
                mysql_version or self.settings.default_mysql_version,
                php_version or self.settings.default_php_version,
                webserver or self.settings.default_webserver,
            )
            if self.exists_on_disk(name):
                raise InstanceExistsError(name)
            record = self._reserve(name, stack)
        except (ValidationError, ResourceConflictError) as e:
            if self.logger:
                self.logger.log_error(e.message, context=e.context)
            return LifecycleResult.rejected(e.format_message())

        warnings = list(stack.substitutions)
        if self.logger:
            for message in warnings:
                self.logger.warning(message)
            self.logger.success(
                f"Reserved port {record.port} and network {record.network.name}"
            )

        instance = Instance(
            name=name,
            port=record.port,
            stack=record.stack,
            network=record.network,
            credentials=Credentials(
                db_name=self.settings.default_db_name,
                db_user=self.settings.default_db_user,
                db_password=generate_password(),
                db_root_password=generate_password(),
            ),
            created_at=record.created_at,
            status=InstanceStatus.CREATING,
        )

        created_network = created_dir = False
        try:
            self._create_networks(record.network)
            created_network = True
            self.instance_dir(name).mkdir(parents=True)
            created_dir = True
            self._write_instance_files(instance, stack)
            self.set_status(name, InstanceStatus.CREATED, require=True)
        except (WpDindError, OSError) as e:
            message = getattr(e, "message", str(e))
            if self.logger:
                self.logger.log_error(
                    f"Create failed: {message}", context=getattr(e, "context", None)
                )
            failures = self._rollback_create(
                name, record.network, created_network, created_dir
            )
            if failures:
                return LifecycleResult.partial(
                    f"Create of '{name}' failed and cleanup was incomplete: {message}",
                    cleanup_hint=f"wp-dind remove {name} --force",
                    warnings=warnings + failures,
                )
            return LifecycleResult.rolled_back(
                f"Create of '{name}' failed and was rolled back: {message}",
                warnings=warnings,
            )

        instance.status = InstanceStatus.CREATED
        if self.logger:
            self.logger.success(f"Instance '{name}' created")
        return LifecycleResult.applied(
            f"Instance '{name}' created on port {instance.port}",
            instance=instance,
            warnings=warnings,
        )

    def _reserve(self, name: str, stack: ResolvedStack) -> InstanceRecord:
        with self.store.transaction(f"create {name}") as workspace:
            if workspace.is_workspace_mode:
                raise ValidationError(
                    f"Workspace '{workspace.workspace_name}' runs in single-site mode",
                    context="Instances are only available in multi-instance workspaces",
                )
            if name in workspace.instances or self.exists_on_disk(name):
                raise InstanceExistsError(name)

            port = next_port(workspace.assigned_ports(), self.settings.port_start)
            ordinal = self.networks.reserve_ordinal(
                workspace,
                [network_ordinal(self.instance_dir(n)) for n in self.instance_names()],
            )
            record = InstanceRecord(
                name=name,
                port=port,
                stack=StackSpec(stack.webserver, stack.php_version, stack.mysql_version),
                created_at=_now(),
                status=InstanceStatus.CREATING,
                network=next_network(ordinal),
            )
            workspace.instances[name] = record
        return record

    def _create_networks(self, network: NetworkAssignment) -> None:
        if self.logger:
            self.logger.step("Creating networks")
        self.networks.check_available(network)
        if self.networks.ensure_shared_network() and self.logger:
            self.logger.success("Created shared network")
        self.docker.create_network(network.name, network.subnet)
        if self.logger:
            self.logger.success(f"Network {network.name} ({network.subnet})")

    def _write_instance_files(self, instance: Instance, stack: ResolvedStack) -> None:
        """Directories, log links, seeded configs, compose file and metadata."""
        if self.logger:
            self.logger.step("Creating instance files")
        name = instance.name
        instance_dir = self.instance_dir(name)
        (instance_dir / WORDPRESS_DATA_DIR).mkdir(parents=True)
        (instance_dir / MYSQL_DATA_DIR).mkdir(parents=True)

        php_dir = f"php-{stack.php_version}"
        mysql_dir = f"mysql-{stack.mysql_version}"
        webserver_dir = f"{stack.webserver}-{stack.webserver_version}"

        logs_root = self.settings.instance_logs_dir(name)
        (instance_dir / "logs").mkdir()
        for component_dir in (php_dir, mysql_dir, webserver_dir):
            (instance_dir / "config" / component_dir).mkdir(parents=True, exist_ok=True)
            (logs_root / component_dir).mkdir(parents=True, exist_ok=True)
            (instance_dir / "logs" / component_dir).symlink_to(logs_root / component_dir)

        self._seed_configs(instance_dir / "config" / php_dir, "php", "*.ini")
        self._seed_configs(instance_dir / "config" / mysql_dir, "mysql", "*.cnf")
        (instance_dir / "config" / webserver_dir / "wordpress.conf").write_text(
            self.renderer.render_webserver_config(stack.webserver, php_host="php")
        )

        descriptor = self.renderer.render_instance_compose(
            name, stack, instance.port, instance.network, instance.credentials
        )
        self.renderer.write_compose(instance_dir / COMPOSE_FILE_NAME, descriptor)
        write_instance_info(instance_dir, instance)

        if self.logger:
            self.logger.success(f"Instance directory {instance_dir}")

    def _seed_configs(self, target_dir: Path, component: str, pattern: str) -> None:
        source_dir = self.settings.templates_dir / component
        for template in sorted(source_dir.glob(pattern)):
            shutil.copy2(template, target_dir / template.name)

    def _rollback_create(
        self,
        name: str,
        network: NetworkAssignment,
        created_network: bool,
        created_dir: bool,
    ) -> List[str]:
        """Best-effort undo of a failed create; returns the steps that failed."""
        if self.logger:
            self.logger.step("Rolling back")
        failures: List[str] = []

        if created_dir:
            for path in (self.instance_dir(name), self.settings.instance_logs_dir(name)):
                if path.exists():
                    try:
                        shutil.rmtree(path)
                    except OSError as e:
                        failures.append(f"Could not delete {path}: {e}")

        if created_network:
            try:
                self.docker.remove_network(network.name)
            except EngineError as e:
                failures.append(f"Could not remove network {network.name}: {e.message}")

        try:
            with self.store.transaction(f"rollback {name}") as workspace:
                workspace.instances.pop(name, None)
        except WpDindError as e:
            failures.append(f"Could not release reservation for '{name}': {e.message}")

        if self.logger:
            for failure in failures:
                self.logger.warning(failure)
        return failures

    # ------------------------------------------------------------------
    # start / stop
    # ------------------------------------------------------------------

    def start(self, name: str) -> LifecycleResult:
        """Bring the instance's containers up (idempotent)."""
        try:
            instance = self.require_instance(name)
        except ValidationError as e:
            return LifecycleResult.rejected(e.format_message())

        if self.logger:
            self.logger.step(f"Starting {name}")
        try:
            self.docker.compose_up(self.compose_file(name), name)
        except EngineError as e:
            if self.logger:
                self.logger.log_error(e.message, context=e.context)
            return LifecycleResult.partial(
                f"Failed to start '{name}': {e.stderr or e.message}",
                cleanup_hint=f"wp-dind logs {name}",
            )

        self.set_status(name, InstanceStatus.RUNNING)
        instance.status = InstanceStatus.RUNNING
        instance.running = True

        warnings: List[str] = []
        data: Dict[str, Any] = {}
        webserver_container = f"{name}-{instance.stack.webserver}"
        published = self.docker.container_port(webserver_container, CONTAINER_HTTP_PORT)
        if published is None:
            warnings.append(f"Could not read the published port of {webserver_container}")
            if self.logger:
                self.logger.warning(warnings[-1])
        else:
            data["url"] = f"http://localhost:{published}"

        return LifecycleResult.applied(
            f"Instance '{name}' started", instance=instance, warnings=warnings, data=data
        )

    def stop(self, name: str) -> LifecycleResult:
        """Stop the instance's containers (idempotent)."""
        try:
            instance = self.require_instance(name)
        except ValidationError as e:
            return LifecycleResult.rejected(e.format_message())

        if self.logger:
            self.logger.step(f"Stopping {name}")
        try:
            self.docker.compose_stop(self.compose_file(name), name)
        except EngineError as e:
            if self.logger:
                self.logger.log_error(e.message, context=e.context)
            return LifecycleResult.partial(
                f"Failed to stop '{name}': {e.stderr or e.message}",
                cleanup_hint=f"wp-dind logs {name}",
            )

        self.set_status(name, InstanceStatus.STOPPED)
        instance.status = InstanceStatus.STOPPED
        return LifecycleResult.applied(f"Instance '{name}' stopped", instance=instance)

    def set_status(self, name: str, status: InstanceStatus, require: bool = False) -> None:
        with self.store.transaction(f"{status.value} {name}") as workspace:
            record = workspace.get_instance(name)
            if record is None:
                if require:
                    raise StateError(f"Instance record '{name}' disappeared from the workspace")
                return
            record.status = status

    # ------------------------------------------------------------------
    # remove
    # ------------------------------------------------------------------

    def remove(self, name: str) -> LifecycleResult:
        """
        Tear down and delete an instance.

        Works for instances that exist only in the workspace document
        (interrupted create) or only on disk.
        """
        try:
            validate_instance_name(name)
        except ValidationError as e:
            return LifecycleResult.rejected(e.format_message())

        record = self.store.load().get_instance(name)
        instance_dir = self.instance_dir(name)
        if record is None and not instance_dir.exists():
            error = InstanceNotFoundError(name, available=self.instance_names())
            return LifecycleResult.rejected(error.format_message())

        if record is not None:
            self.set_status(name, InstanceStatus.REMOVING)

        info = read_instance_info(instance_dir) if has_instance_info(instance_dir) else None
        known = record or info
        network = known.network if known else None
        webserver = known.stack.webserver if known else None

        warnings: List[str] = []
        hints: List[str] = []

        compose_file = self.compose_file(name)
        if compose_file.exists():
            if self.logger:
                self.logger.step(f"Stopping and removing containers of {name}")
            try:
                self.docker.compose_down(compose_file, name, volumes=True)
            except EngineError as e:
                warnings.append(f"Container teardown failed: {e.stderr or e.message}")
                containers = [f"{name}-mysql", f"{name}-php"]
                if webserver:
                    containers.append(f"{name}-{webserver}")
                hints.append(f"docker rm -f {' '.join(containers)}")

        if network is not None:
            try:
                if self.docker.remove_network(network.name) and self.logger:
                    self.logger.success(f"Removed network {network.name}")
            except EngineError as e:
                warnings.append(f"Network removal failed: {e.stderr or e.message}")
                hints.append(f"docker network rm {network.name}")

        if self.logger:
            self.logger.step("Deleting instance files")
        for path in (instance_dir, self.settings.instance_logs_dir(name)):
            if path.exists():
                try:
                    shutil.rmtree(path)
                except OSError as e:
                    warnings.append(f"Could not delete {path}: {e}")
                    hints.append(f"rm -rf {path}")

        with self.store.transaction(f"remove {name}") as workspace:
            workspace.instances.pop(name, None)

        if self.logger:
            for message in warnings:
                self.logger.warning(message)

        if warnings:
            return LifecycleResult.partial(
                f"Instance '{name}' removed with leftovers",
                cleanup_hint="; ".join(hints),
                warnings=warnings,
            )
        return LifecycleResult.applied(f"Instance '{name}' removed")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_instances(self) -> List[Instance]:
        """
        All instances: metadata files on disk merged with document records.

        Running state is derived from exact container names, never from the
        stored status.
        """
        workspace = self.store.load()
        running = self.docker.running_containers()

        instances: Dict[str, Instance] = {}
        for name in self.instance_names():
            instance = read_instance_info(
                self.instance_dir(name),
                default_db_name=self.settings.default_db_name,
                default_db_user=self.settings.default_db_user,
            )
            record = workspace.get_instance(name)
            if record is not None:
                instance.status = record.status
                instance.network = instance.network or record.network
            instances[name] = instance

        for name, record in workspace.instances.items():
            if name not in instances:
                instances[name] = Instance(
                    name=name,
                    port=record.port,
                    stack=record.stack,
                    network=record.network,
                    credentials=None,
                    created_at=record.created_at,
                    status=record.status,
                )

        for instance in instances.values():
            instance.running = any(c in running for c in instance.container_names())

        return [instances[name] for name in sorted(instances)]

    def info(self, name: str) -> Dict[str, Any]:
        """
        Full description of an instance.

        Raises:
            InstanceNotFoundError: If the instance does not exist
        """
        instance = self.require_instance(name)
        record = self.store.load().get_instance(name)
        if record is not None:
            instance.status = record.status

        running = self.docker.running_containers()
        containers = {
            container: running[container]
            for container in instance.container_names()
            if container in running
        }
        instance.running = bool(containers)

        instance_dir = self.instance_dir(name)
        data = instance.to_dict(include_secrets=True)
        data["directories"] = {
            "instance": str(instance_dir),
            "wordpress": str(instance_dir / WORDPRESS_DATA_DIR),
            "mysql": str(instance_dir / MYSQL_DATA_DIR),
            "config": str(instance_dir / "config"),
            "logs": str(self.settings.instance_logs_dir(name)),
        }
        data["containers"] = containers
        data["urls"] = []
        if instance.running and instance.port:
            host_ip = _host_ip()
            if host_ip:
                data["urls"].append(f"http://{host_ip}:{instance.port}")
            data["urls"].append(f"http://localhost:{instance.port}")
        return data

    def logs(
        self,
        name: str,
        service: Optional[str] = None,
        follow: bool = False,
        tail: Optional[int] = None,
    ) -> int:
        """
        Stream compose logs for an instance.

        Raises:
            InstanceNotFoundError: If the instance does not exist
            ValidationError: On an unknown service
        """
        instance = self.require_instance(name)
        compose_service = self._resolve_log_service(instance, service)
        return self.docker.compose_logs(
            self.compose_file(name), name, service=compose_service, follow=follow, tail=tail
        )

    @staticmethod
    def _resolve_log_service(instance: Instance, service: Optional[str]) -> Optional[str]:
        if not service:
            return None
        if service not in LOG_SERVICES:
            raise ValidationError(
                f"Unknown service '{service}'",
                context=f"Choose one of: {', '.join(LOG_SERVICES)}",
            )
        if service == "web":
            return instance.stack.webserver
        if service in WEBSERVERS and service != instance.stack.webserver:
            raise ValidationError(
                f"Instance '{instance.name}' runs {instance.stack.webserver}, not {service}"
            )
        return service


def _host_ip() -> Optional[str]:
    try:
        return socket.gethostbyname(socket.gethostname())
    except OSError:
        return None
