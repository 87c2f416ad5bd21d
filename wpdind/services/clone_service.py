"""
Clone Service

Creates a new instance from an existing one. The target always gets its own
port, network and credentials; the strategy decides what it shares with or
copies from the source.
"""

import shutil
from pathlib import Path
from typing import Optional

from wpdind.constants import (
    CLONE_STRATEGY_ALIASES,
    DEFAULT_CLONE_STRATEGY,
    MYSQL_READY_ATTEMPTS,
    MYSQL_READY_DELAY,
    WORDPRESS_DATA_DIR,
)
from wpdind.exceptions import EngineError, InstanceExistsError, ValidationError, WpDindError
from wpdind.models.instance import Instance, InstanceStatus
from wpdind.models.results import LifecycleResult
from wpdind.services.instance_service import InstanceService, validate_instance_name

SHARED_REFERENCE = "shared-reference"
FULL_COPY = "full-copy"


def resolve_strategy(strategy: Optional[str]) -> str:
    """
    Map a strategy name or alias (symlink, copy-all, copy-files) to its
    canonical name.

    Raises:
        ValidationError: On an unknown strategy
    """
    canonical = CLONE_STRATEGY_ALIASES.get((strategy or DEFAULT_CLONE_STRATEGY).strip())
    if canonical is None:
        raise ValidationError(
            f"Invalid clone strategy '{strategy}'",
            context="Use: shared-reference (symlink), full-copy (copy-all) "
            "or files-only-copy (copy-files)",
        )
    return canonical


class CloneService:
    """Clone instances using one of three strategies."""

    def __init__(self, instances: InstanceService):
        self.instances = instances
        self.docker = instances.docker
        self.logger = instances.logger

    def clone(
        self, source: str, target: str, strategy: str = DEFAULT_CLONE_STRATEGY
    ) -> LifecycleResult:
        """
        Clone `source` into a new instance `target`.

        Returns:
            LifecycleResult; a failure after the target was created leaves
            it marked `cloning` and returns `partial`
        """
        try:
            canonical = resolve_strategy(strategy)
            validate_instance_name(target)
            source_instance = self.instances.require_instance(source)
            workspace = self.instances.store.load()
            if self.instances.exists_on_disk(target) or target in workspace.instances:
                raise InstanceExistsError(target)
        except ValidationError as e:
            if self.logger:
                self.logger.log_error(e.message, context=e.context)
            return LifecycleResult.rejected(e.format_message())

        stack = source_instance.stack
        if self.logger:
            self.logger.step(f"Creating target instance {target}")
        created = self.instances.create(
            target, stack.mysql_version, stack.php_version, stack.webserver
        )
        if not created.is_success:
            return created

        try:
            self.instances.set_status(target, InstanceStatus.CLONING, require=True)
            target_instance = self.instances.require_instance(target)

            self.docker.compose_stop(self.instances.compose_file(target), target)
            self._apply_strategy(canonical, source_instance, target_instance)

            if self.logger:
                self.logger.step(f"Starting {target}")
            self.docker.compose_up(self.instances.compose_file(target), target)
            self.instances.set_status(target, InstanceStatus.RUNNING, require=True)
        except (WpDindError, OSError) as e:
            message = getattr(e, "message", str(e))
            if self.logger:
                self.logger.log_error(
                    f"Clone failed: {message}", context=getattr(e, "context", None)
                )
            return LifecycleResult.partial(
                f"Clone of '{source}' into '{target}' failed: {message}",
                cleanup_hint=f"wp-dind remove {target} --force",
                warnings=list(created.warnings),
                data={"strategy": canonical, "source": source},
            )

        target_instance.status = InstanceStatus.RUNNING
        target_instance.running = True
        return LifecycleResult.applied(
            f"Instance '{source}' cloned to '{target}' ({canonical})",
            instance=target_instance,
            warnings=list(created.warnings),
            data={"strategy": canonical, "source": source},
        )

    def _wordpress_dir(self, name: str) -> Path:
        return self.instances.instance_dir(name) / WORDPRESS_DATA_DIR

    def _apply_strategy(self, strategy: str, source: Instance, target: Instance) -> None:
        # A shared-reference source points elsewhere; follow it
        source_files = self._wordpress_dir(source.name).resolve()
        target_files = self._wordpress_dir(target.name)

        if self.logger:
            self.logger.step(f"Applying {strategy} strategy")

        _remove_path(target_files)

        if strategy == SHARED_REFERENCE:
            target_files.symlink_to(source_files, target_is_directory=True)
            if self.logger:
                self.logger.success(f"WordPress files shared with {source.name}")
            return

        shutil.copytree(source_files, target_files, symlinks=True)
        if self.logger:
            self.logger.success("WordPress files copied")

        if strategy == FULL_COPY:
            self._copy_database(source, target)

    def _copy_database(self, source: Instance, target: Instance) -> None:
        if self.logger:
            self.logger.step("Copying database")

        self.docker.compose_up(self.instances.compose_file(source.name), source.name, ["mysql"])
        self.docker.compose_up(self.instances.compose_file(target.name), target.name, ["mysql"])

        for instance in (source, target):
            container = f"{instance.name}-mysql"
            if not self.docker.wait_for_mysql(
                container,
                instance.credentials.db_root_password,
                MYSQL_READY_ATTEMPTS,
                MYSQL_READY_DELAY,
            ):
                raise EngineError(
                    f"MySQL in {container} did not become ready",
                    command="mysqladmin ping",
                )

        self.docker.copy_database(
            f"{source.name}-mysql",
            source.credentials.db_root_password,
            f"{target.name}-mysql",
            target.credentials.db_root_password,
            source.credentials.db_name,
            target.credentials.db_name,
        )
        if self.logger:
            self.logger.success("Database copied")


def _remove_path(path: Path) -> None:
    if path.is_symlink():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)
