"""
Manager settings

All paths and defaults come from environment variables (set on the DinD host
container from the workspace .env file) with documented fallbacks.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

from wpdind.constants import DEFAULT_IMAGE_REPOSITORY, DEFAULT_INSTANCE_PORT_START
from wpdind.exceptions import ConfigurationError

BUNDLED_TEMPLATES_DIR = Path(__file__).parent / "templates"


@dataclass
class Settings:
    """Resolved manager settings."""

    instances_dir: Path = Path("/wordpress-instances")
    workspace_config: Optional[Path] = None
    host_config_dir: Path = Path("/host-config")
    host_logs_dir: Path = Path("/host-logs")
    logs_dir: Optional[Path] = None
    templates_dir: Path = BUNDLED_TEMPLATES_DIR
    workspace_dir: Path = Path("/var/www/html")
    workspace_compose_file: Path = Path("/tmp/workspace-compose.yml")
    image_repository: str = DEFAULT_IMAGE_REPOSITORY
    compose_command: str = "docker compose"
    port_start: int = DEFAULT_INSTANCE_PORT_START
    lock_timeout: float = 10.0
    default_mysql_version: str = "80"
    default_php_version: str = "83"
    default_webserver: str = "nginx"
    default_db_name: str = "wordpress"
    default_db_user: str = "wordpress"
    workspace_type: Optional[str] = None

    def __post_init__(self):
        self.instances_dir = Path(self.instances_dir)
        if self.workspace_config is None:
            self.workspace_config = self.instances_dir / ".workspace-config.json"
        if self.logs_dir is None:
            self.logs_dir = self.instances_dir / ".manager-logs"

    @property
    def compose_args(self) -> list[str]:
        """Compose command split into argv form (e.g. ["docker", "compose"])."""
        return self.compose_command.split()

    def instance_dir(self, name: str) -> Path:
        return self.instances_dir / name

    def instance_logs_dir(self, name: str) -> Path:
        return self.host_logs_dir / name


def _int_setting(values: Mapping[str, str], key: str, default: int) -> int:
    raw = values.get(key)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"Invalid value for {key}: {raw!r}", context="Expected an integer"
        )


def _float_setting(values: Mapping[str, str], key: str, default: float) -> float:
    raw = values.get(key)
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(
            f"Invalid value for {key}: {raw!r}", context="Expected a number"
        )


def _path_setting(
    values: Mapping[str, str], key: str, default: Optional[Path]
) -> Optional[Path]:
    raw = values.get(key)
    if raw:
        return Path(raw)
    return default


def load_settings(
    environ: Optional[Mapping[str, str]] = None, env_file: Optional[Path] = None
) -> Settings:
    """
    Build settings from the environment.

    Args:
        environ: Environment mapping (defaults to os.environ)
        env_file: Optional dotenv file; process environment wins over it.
            Falls back to WP_DIND_ENV_FILE when not given.

    Returns:
        Settings instance
    """
    environ = dict(os.environ if environ is None else environ)

    env_file = env_file or _path_setting(environ, "WP_DIND_ENV_FILE", None)
    values: Dict[str, str] = {}
    if env_file:
        if not env_file.exists():
            raise ConfigurationError(f"Environment file not found: {env_file}")
        values.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    values.update(environ)

    instances_dir = _path_setting(values, "WP_DIND_INSTANCES_DIR", Path("/wordpress-instances"))

    return Settings(
        instances_dir=instances_dir,
        workspace_config=_path_setting(values, "WP_DIND_WORKSPACE_CONFIG", None),
        host_config_dir=_path_setting(values, "WP_DIND_HOST_CONFIG_DIR", Path("/host-config")),
        host_logs_dir=_path_setting(values, "WP_DIND_HOST_LOGS_DIR", Path("/host-logs")),
        logs_dir=_path_setting(values, "WP_DIND_LOGS_DIR", None),
        templates_dir=_path_setting(values, "WP_DIND_TEMPLATES_DIR", BUNDLED_TEMPLATES_DIR),
        workspace_dir=_path_setting(values, "WP_DIND_WORKSPACE_DIR", Path("/var/www/html")),
        workspace_compose_file=_path_setting(
            values, "WP_DIND_WORKSPACE_COMPOSE_FILE", Path("/tmp/workspace-compose.yml")
        ),
        image_repository=values.get("WP_DIND_IMAGE_REPOSITORY") or DEFAULT_IMAGE_REPOSITORY,
        compose_command=values.get("WP_DIND_COMPOSE_COMMAND") or "docker compose",
        port_start=_int_setting(values, "WP_DIND_PORT_START", DEFAULT_INSTANCE_PORT_START),
        lock_timeout=_float_setting(values, "WP_DIND_LOCK_TIMEOUT", 10.0),
        default_mysql_version=values.get("DEFAULT_MYSQL_VERSION") or "80",
        default_php_version=values.get("DEFAULT_PHP_VERSION") or "83",
        default_webserver=values.get("DEFAULT_WEBSERVER") or "nginx",
        default_db_name=values.get("DEFAULT_DB_NAME") or "wordpress",
        default_db_user=values.get("DEFAULT_DB_USER") or "wordpress",
        workspace_type=values.get("WORKSPACE_TYPE") or None,
    )
