"""Docker service for engine and compose operations."""

import os
import shlex
import subprocess
import time
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional

from wpdind.exceptions import EngineError
from wpdind.logger import OperationLogger, run_with_progress
from wpdind.models.results import ExecutionResult


class DockerService:
    """
    Synchronous wrapper over `docker` and `docker compose`.

    Every engine interaction of the manager goes through this class, so
    tests can substitute a fake with the same methods.
    """

    def __init__(
        self,
        compose_command: Optional[List[str]] = None,
        logger: Optional[OperationLogger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize Docker service.

        Args:
            compose_command: Compose invocation in argv form
                (default ["docker", "compose"])
            logger: Operation logger receiving commands and their output
            sleep: Sleep function used by readiness polling
        """
        self.compose_command = compose_command or ["docker", "compose"]
        self.logger = logger
        self.sleep = sleep

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _run(
        self,
        args: List[str],
        description: Optional[str] = None,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ExecutionResult:
        command = shlex.join(args)
        try:
            if self.logger and description:
                returncode, stdout, stderr = run_with_progress(
                    self.logger, args, description, cwd=cwd
                )
                return ExecutionResult(returncode, stdout, stderr, command)

            if self.logger:
                self.logger.log_command(command)
            result = subprocess.run(args, cwd=cwd, env=env, capture_output=True, text=True)
        except FileNotFoundError:
            raise EngineError(f"Command not found: {args[0]}", command=command)

        if self.logger:
            self.logger.log_output(result.stdout, "stdout")
            self.logger.log_output(result.stderr, "stderr")
        return ExecutionResult(result.returncode, result.stdout, result.stderr, command)

    def _check(self, result: ExecutionResult, message: str) -> ExecutionResult:
        if result.is_failure:
            raise EngineError(message, command=result.command, stderr=result.stderr)
        return result

    def _compose(self, compose_file: Path, project: str, *args: str) -> List[str]:
        return [
            *self.compose_command,
            "-f",
            str(compose_file),
            "-p",
            project,
            *args,
        ]

    # ------------------------------------------------------------------
    # Networks
    # ------------------------------------------------------------------

    def network_exists(self, name: str) -> bool:
        result = self._run(["docker", "network", "inspect", name])
        return result.is_success

    def list_networks(self) -> Dict[str, List[str]]:
        """
        List engine networks with their subnets.

        Returns:
            {network_name: [subnet, ...]}
        """
        result = self._check(
            self._run(["docker", "network", "ls", "--format", "{{.Name}}"]),
            "Failed to list networks",
        )
        names = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if not names:
            return {}

        inspect = self._check(
            self._run(
                [
                    "docker",
                    "network",
                    "inspect",
                    "--format",
                    "{{.Name}}{{range .IPAM.Config}} {{.Subnet}}{{end}}",
                    *names,
                ]
            ),
            "Failed to inspect networks",
        )

        networks: Dict[str, List[str]] = {name: [] for name in names}
        for line in inspect.stdout.splitlines():
            parts = line.split()
            if parts:
                networks[parts[0]] = parts[1:]
        return networks

    def create_network(self, name: str, subnet: str) -> None:
        self._check(
            self._run(
                ["docker", "network", "create", "--driver", "bridge", "--subnet", subnet, name]
            ),
            f"Failed to create network {name}",
        )

    def remove_network(self, name: str) -> bool:
        """
        Remove a network.

        Returns:
            True if removed, False if it did not exist
        """
        if not self.network_exists(name):
            return False
        self._check(
            self._run(["docker", "network", "rm", name]),
            f"Failed to remove network {name}",
        )
        return True

    # ------------------------------------------------------------------
    # Compose
    # ------------------------------------------------------------------

    def compose_up(
        self, compose_file: Path, project: str, services: Optional[List[str]] = None
    ) -> ExecutionResult:
        args = self._compose(compose_file, project, "up", "-d", *(services or []))
        return self._check(
            self._run(args, description="Starting containers", cwd=Path(compose_file).parent),
            f"Failed to start {project}",
        )

    def compose_stop(self, compose_file: Path, project: str) -> ExecutionResult:
        args = self._compose(compose_file, project, "stop")
        return self._check(
            self._run(args, description="Stopping containers", cwd=Path(compose_file).parent),
            f"Failed to stop {project}",
        )

    def compose_down(
        self, compose_file: Path, project: str, volumes: bool = False
    ) -> ExecutionResult:
        args = self._compose(compose_file, project, "down", *(["-v"] if volumes else []))
        return self._check(
            self._run(args, description="Removing containers", cwd=Path(compose_file).parent),
            f"Failed to tear down {project}",
        )

    def compose_logs(
        self,
        compose_file: Path,
        project: str,
        service: Optional[str] = None,
        follow: bool = False,
        tail: Optional[int] = None,
    ) -> int:
        """
        Stream compose logs to the terminal.

        Returns:
            Exit code of the compose process
        """
        args = self._compose(compose_file, project, "logs")
        if follow:
            args.append("-f")
        if tail is not None:
            args.extend(["--tail", str(tail)])
        if service:
            args.append(service)

        if self.logger:
            self.logger.log_command(shlex.join(args))
        try:
            return subprocess.run(args, cwd=Path(compose_file).parent).returncode
        except FileNotFoundError:
            raise EngineError(f"Command not found: {args[0]}", command=shlex.join(args))

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------

    def running_containers(self) -> Dict[str, Dict[str, str]]:
        """
        Running containers keyed by exact name.

        Returns:
            {name: {"status": ..., "ports": ...}}
        """
        result = self._check(
            self._run(["docker", "ps", "--format", "{{.Names}}\t{{.Status}}\t{{.Ports}}"]),
            "Failed to list containers",
        )
        containers: Dict[str, Dict[str, str]] = {}
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            parts = line.split("\t")
            parts += [""] * (3 - len(parts))
            containers[parts[0]] = {"status": parts[1], "ports": parts[2]}
        return containers

    def container_port(self, container: str, container_port: int = 80) -> Optional[int]:
        """Published host port of a container port, or None."""
        result = self._run(["docker", "port", container, str(container_port)])
        if result.is_failure:
            return None
        for line in result.stdout.splitlines():
            _, _, port = line.strip().rpartition(":")
            if port.isdigit():
                return int(port)
        return None

    # ------------------------------------------------------------------
    # MySQL
    # ------------------------------------------------------------------

    @staticmethod
    def _mysql_env(root_password: str) -> Dict[str, str]:
        # `docker exec -e MYSQL_PWD` forwards the value from this environment
        return {**os.environ, "MYSQL_PWD": root_password}

    def mysql_ping(self, container: str, root_password: str) -> bool:
        result = self._run(
            [
                "docker",
                "exec",
                "-e",
                "MYSQL_PWD",
                container,
                "mysqladmin",
                "ping",
                "-h",
                "localhost",
                "-u",
                "root",
                "--silent",
            ],
            env=self._mysql_env(root_password),
        )
        return result.is_success

    def wait_for_mysql(
        self, container: str, root_password: str, attempts: int, delay: float
    ) -> bool:
        """
        Poll `mysqladmin ping` until MySQL answers.

        Returns:
            True when ready, False after `attempts` failed polls
        """
        for attempt in range(1, attempts + 1):
            if self.mysql_ping(container, root_password):
                return True
            if self.logger:
                self.logger.log(f"{container} not ready (attempt {attempt}/{attempts})", "DEBUG")
            if attempt < attempts:
                self.sleep(delay)
        return False

    def copy_database(
        self,
        source_container: str,
        source_root_password: str,
        target_container: str,
        target_root_password: str,
        source_database: str,
        target_database: str,
    ) -> None:
        """
        Pipe a mysqldump of the source database into the target MySQL container.

        Raises:
            EngineError: If either side exits non-zero
        """
        dump_args = [
            "docker",
            "exec",
            "-e",
            "MYSQL_PWD",
            source_container,
            "mysqldump",
            "-u",
            "root",
            source_database,
        ]
        load_args = [
            "docker",
            "exec",
            "-i",
            "-e",
            "MYSQL_PWD",
            target_container,
            "mysql",
            "-u",
            "root",
            target_database,
        ]
        command = f"{shlex.join(dump_args)} | {shlex.join(load_args)}"
        if self.logger:
            self.logger.log_command(command)

        try:
            dump = subprocess.Popen(
                dump_args,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=self._mysql_env(source_root_password),
            )
            load = subprocess.run(
                load_args,
                stdin=dump.stdout,
                capture_output=True,
                text=True,
                env=self._mysql_env(target_root_password),
            )
            if dump.stdout:
                dump.stdout.close()
            dump_stderr = dump.stderr.read().decode() if dump.stderr else ""
            dump.wait()
        except FileNotFoundError:
            raise EngineError("Command not found: docker", command="docker exec")

        if self.logger:
            self.logger.log_output(dump_stderr, "stderr")
            self.logger.log_output(load.stderr, "stderr")

        if dump.returncode != 0:
            raise EngineError(
                f"Database dump from {source_container} failed",
                command="mysqldump",
                stderr=dump_stderr,
            )
        if load.returncode != 0:
            raise EngineError(
                f"Database import into {target_container} failed",
                command="mysql",
                stderr=load.stderr,
            )
