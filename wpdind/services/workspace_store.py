"""
Workspace Config Store

Read-modify-write access to the workspace JSON document.
"""

import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from wpdind.exceptions import ConcurrentModificationError, StateError
from wpdind.file_lock import acquire_file_lock
from wpdind.models.workspace import Workspace


class WorkspaceStore:
    """
    Persistence for the Workspace document.

    Responsibilities:
    - Load the document (default workspace on first run)
    - Atomic full-file writes (temp file + rename)
    - Revision check so stale writers are rejected
    - Locked transactions for mutating operations
    """

    def __init__(self, config_path: Path, lock_timeout: float = 10.0):
        """
        Initialize workspace store.

        Args:
            config_path: Path to the workspace JSON document
            lock_timeout: Seconds to wait for the advisory lock
        """
        self.config_path = Path(config_path)
        self.lock_path = self.config_path.with_name(self.config_path.name + ".lock")
        self.lock_timeout = lock_timeout

    def exists(self) -> bool:
        return self.config_path.exists()

    def _read_raw(self) -> Optional[Dict[str, Any]]:
        if not self.config_path.exists():
            return None
        try:
            with open(self.config_path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StateError(
                f"Workspace configuration is not valid JSON: {self.config_path}",
                context=str(e),
            )
        except OSError as e:
            raise StateError(
                f"Could not read workspace configuration: {self.config_path}",
                context=str(e),
            )
        if not isinstance(data, dict):
            raise StateError(
                f"Workspace configuration must be a JSON object: {self.config_path}"
            )
        return data

    def load(self) -> Workspace:
        """Load the workspace document (default-initialized when missing)."""
        data = self._read_raw()
        if data is None:
            return Workspace()
        return Workspace.from_dict(data)

    def save(self, workspace: Workspace) -> None:
        """
        Overwrite the document with `workspace`.

        The write is skipped when nothing but the revision would change, so
        saving an unmodified workspace leaves the file untouched.

        Raises:
            ConcurrentModificationError: If the document changed on disk
                since `workspace` was loaded
        """
        current = self._read_raw()
        current_revision = int(current.get("revision", 0)) if current else 0

        if current_revision != workspace.revision:
            raise ConcurrentModificationError(workspace.revision, current_revision)

        new_data = workspace.to_dict()
        if current is not None and _without_revision(current) == _without_revision(new_data):
            return

        workspace.revision = current_revision + 1
        new_data["revision"] = workspace.revision
        self._write_atomic(new_data)

    def _write_atomic(self, data: Dict[str, Any]) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.config_path.name}.", suffix=".tmp", dir=self.config_path.parent
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.config_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    @contextmanager
    def transaction(self, operation: str = "workspace update") -> Iterator[Workspace]:
        """
        Locked load → mutate → save.

        The document is saved only when the block exits without an
        exception; on error the file is left exactly as it was.

        Args:
            operation: Description used in lock timeout messages

        Yields:
            Workspace to mutate in place
        """
        with acquire_file_lock(self.lock_path, timeout=self.lock_timeout, operation=operation):
            workspace = self.load()
            yield workspace
            self.save(workspace)


def _without_revision(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k != "revision"}
