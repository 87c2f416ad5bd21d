"""
Shared test fixtures for wp-dind.

- Settings rooted in tmp_path
- FakeDocker: in-memory container engine with the DockerService interface
- Service fixtures wired to the fake engine
"""

from pathlib import Path
from typing import Dict, List, Optional

import pytest
import yaml

from wpdind.config import Settings
from wpdind.exceptions import EngineError
from wpdind.services.clone_service import CloneService
from wpdind.services.instance_service import InstanceService
from wpdind.services.workspace_service import WorkspaceService
from wpdind.services.workspace_store import WorkspaceStore


class FakeDocker:
    """
    In-memory engine.

    Compose calls read the rendered compose file, so container names and
    published ports come from what the manager actually wrote.

    Failure injection: `fail_on["compose_up"] = "boom"` makes the next
    matching call raise EngineError with that stderr.
    """

    def __init__(self):
        self.networks: Dict[str, List[str]] = {}
        self.running: Dict[str, Dict[str, str]] = {}
        self.published: Dict[str, int] = {}
        self.databases: Dict[str, List[str]] = {}
        self.calls: List[tuple] = []
        self.fail_on: Dict[str, str] = {}
        self.mysql_ready = True

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        if method in self.fail_on:
            stderr = self.fail_on[method]
            raise EngineError(f"{method} failed", command=method, stderr=stderr)

    def called(self, method: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == method]

    # Networks

    def network_exists(self, name: str) -> bool:
        return name in self.networks

    def list_networks(self) -> Dict[str, List[str]]:
        return {name: list(subnets) for name, subnets in self.networks.items()}

    def create_network(self, name: str, subnet: str) -> None:
        self._record("create_network", name, subnet)
        self.networks[name] = [subnet]

    def remove_network(self, name: str) -> bool:
        self._record("remove_network", name)
        return self.networks.pop(name, None) is not None

    # Compose

    @staticmethod
    def _services(compose_file: Path) -> Dict[str, dict]:
        with open(compose_file) as f:
            return yaml.safe_load(f)["services"]

    def compose_up(self, compose_file: Path, project: str, services: Optional[List[str]] = None):
        self._record("compose_up", Path(compose_file), project, services)
        for key, service in self._services(compose_file).items():
            if services and key not in services:
                continue
            container = service["container_name"]
            self.running[container] = {"status": "Up 1 second", "ports": ""}
            for mapping in service.get("ports", []):
                host_port = int(str(mapping).split(":")[0])
                self.published[container] = host_port
                self.running[container]["ports"] = f"0.0.0.0:{mapping}->80/tcp"

    def _stop_all(self, compose_file: Path) -> None:
        for service in self._services(compose_file).values():
            self.running.pop(service["container_name"], None)

    def compose_stop(self, compose_file: Path, project: str):
        self._record("compose_stop", Path(compose_file), project)
        self._stop_all(compose_file)

    def compose_down(self, compose_file: Path, project: str, volumes: bool = False):
        self._record("compose_down", Path(compose_file), project, volumes)
        self._stop_all(compose_file)

    def compose_logs(self, compose_file, project, service=None, follow=False, tail=None) -> int:
        self._record("compose_logs", Path(compose_file), project, service, follow, tail)
        return 0

    # Containers

    def running_containers(self) -> Dict[str, Dict[str, str]]:
        return {name: dict(details) for name, details in self.running.items()}

    def container_port(self, container: str, container_port: int = 80) -> Optional[int]:
        if container not in self.running:
            return None
        return self.published.get(container)

    # MySQL

    def wait_for_mysql(self, container, root_password, attempts, delay) -> bool:
        self.calls.append(("wait_for_mysql", container, root_password, attempts, delay))
        return self.mysql_ready

    def copy_database(
        self,
        source_container,
        source_root_password,
        target_container,
        target_root_password,
        source_database,
        target_database,
    ) -> None:
        self._record(
            "copy_database",
            source_container,
            source_root_password,
            target_container,
            target_root_password,
            source_database,
            target_database,
        )
        self.databases[target_container] = list(self.databases.get(source_container, []))


@pytest.fixture
def docker():
    return FakeDocker()


@pytest.fixture
def settings(tmp_path):
    """Settings with every path inside tmp_path."""
    return Settings(
        instances_dir=tmp_path / "instances",
        host_config_dir=tmp_path / "host-config",
        host_logs_dir=tmp_path / "host-logs",
        workspace_dir=tmp_path / "workspace",
        workspace_compose_file=tmp_path / "run" / "workspace-compose.yml",
        lock_timeout=1.0,
    )


@pytest.fixture
def store(settings):
    return WorkspaceStore(settings.workspace_config, settings.lock_timeout)


@pytest.fixture
def instance_service(settings, docker, store):
    return InstanceService(settings, docker, store=store)


@pytest.fixture
def clone_service(instance_service):
    return CloneService(instance_service)


@pytest.fixture
def workspace_service(settings, docker, store):
    return WorkspaceService(settings, docker, store=store)
