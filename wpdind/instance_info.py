"""
Instance metadata file

Every instance directory holds a flat `.instance-info` file with one
KEY=VALUE per line. It is the per-instance source of truth for credentials
and is what `list` enumerates.
"""

from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values

from wpdind.constants import INSTANCE_INFO_FILE
from wpdind.exceptions import StateError
from wpdind.models.instance import (
    Credentials,
    Instance,
    InstanceStatus,
    NetworkAssignment,
    StackSpec,
)
from wpdind.versions import code_to_dotted, normalize_code

# Key order in the written file
INFO_KEYS = [
    "NAME",
    "MYSQL_VERSION",
    "PHP_VERSION",
    "WEBSERVER",
    "NETWORK",
    "SUBNET",
    "PORT",
    "CREATED",
    "DB_NAME",
    "DB_USER",
    "DB_PASSWORD",
    "DB_ROOT_PASSWORD",
]


def info_path(instance_dir: Path) -> Path:
    return Path(instance_dir) / INSTANCE_INFO_FILE


def has_instance_info(instance_dir: Path) -> bool:
    return info_path(instance_dir).is_file()


def write_instance_info(instance_dir: Path, instance: Instance) -> Path:
    """
    Write the metadata file for an instance.

    Versions are written as short codes ("80", "83").

    Returns:
        Path of the written file
    """
    credentials = instance.credentials
    network = instance.network
    values: Dict[str, str] = {
        "NAME": instance.name,
        "MYSQL_VERSION": normalize_code(instance.stack.mysql_version),
        "PHP_VERSION": normalize_code(instance.stack.php_version),
        "WEBSERVER": instance.stack.webserver,
        "NETWORK": network.name if network else "",
        "SUBNET": network.subnet if network else "",
        "PORT": str(instance.port) if instance.port else "",
        "CREATED": instance.created_at,
        "DB_NAME": credentials.db_name if credentials else "",
        "DB_USER": credentials.db_user if credentials else "",
        "DB_PASSWORD": credentials.db_password if credentials else "",
        "DB_ROOT_PASSWORD": credentials.db_root_password if credentials else "",
    }

    path = info_path(instance_dir)
    with open(path, "w") as f:
        for key in INFO_KEYS:
            f.write(f"{key}={values[key]}\n")
    return path


def read_raw_info(instance_dir: Path) -> Dict[str, str]:
    """Read the metadata file as a plain dict (missing values become "")."""
    path = info_path(instance_dir)
    if not path.is_file():
        raise StateError(f"Instance metadata not found: {path}")
    return {k: (v or "") for k, v in dotenv_values(path).items()}


def read_instance_info(
    instance_dir: Path,
    default_db_name: str = "wordpress",
    default_db_user: str = "wordpress",
) -> Instance:
    """
    Load an Instance from its metadata file.

    The returned instance has status CREATED and running=False; callers
    merge in the workspace record and live engine state.

    Raises:
        StateError: If the file is missing or has no NAME
    """
    raw = read_raw_info(instance_dir)
    name = raw.get("NAME") or Path(instance_dir).name
    if not name:
        raise StateError(f"Instance metadata has no NAME: {info_path(instance_dir)}")

    network: Optional[NetworkAssignment] = None
    if raw.get("NETWORK"):
        network = NetworkAssignment(
            name=raw["NETWORK"],
            subnet=raw.get("SUBNET", ""),
            ordinal=_ordinal_from_network(raw["NETWORK"]),
        )

    port_raw = raw.get("PORT", "")
    return Instance(
        name=name,
        port=int(port_raw) if port_raw.isdigit() else None,
        stack=StackSpec(
            webserver=raw.get("WEBSERVER") or "nginx",
            php_version=code_to_dotted(normalize_code(raw.get("PHP_VERSION")) or "83"),
            mysql_version=code_to_dotted(normalize_code(raw.get("MYSQL_VERSION")) or "80"),
        ),
        network=network,
        credentials=Credentials(
            db_name=raw.get("DB_NAME") or default_db_name,
            db_user=raw.get("DB_USER") or default_db_user,
            db_password=raw.get("DB_PASSWORD", ""),
            db_root_password=raw.get("DB_ROOT_PASSWORD", ""),
        ),
        created_at=raw.get("CREATED", ""),
        status=InstanceStatus.CREATED,
    )


def network_ordinal(instance_dir: Path) -> int:
    """Ordinal of the network recorded in the metadata file (0 if none)."""
    return _ordinal_from_network(read_raw_info(instance_dir).get("NETWORK", ""))


def _ordinal_from_network(network_name: str) -> int:
    suffix = network_name.rsplit("-", 1)[-1]
    return int(suffix) if suffix.isdigit() else 0
