"""
Compose Renderer

Builds docker compose descriptors for instances and for workspace mode,
and renders web-server configuration from Jinja2 templates.
"""

from pathlib import Path
from typing import Any, Dict

import yaml
from jinja2 import Template

from wpdind.config import Settings
from wpdind.constants import (
    CONTAINER_HTTP_PORT,
    MYSQL_PORT,
    PHP_FPM_PORT,
    SHARED_NETWORK_NAME,
    WORKSPACE_DB_NAME,
    WORKSPACE_DB_PASSWORD,
    WORKSPACE_DB_ROOT_PASSWORD,
    WORKSPACE_DB_USER,
    WORKSPACE_PORT,
)
from wpdind.exceptions import ConfigurationError
from wpdind.models.instance import Credentials, NetworkAssignment
from wpdind.versions import ResolvedStack

WORKSPACE_PROJECT = "workspace"


class ComposeRenderer:
    """Render compose files and web-server configs."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def image(self, component: str, version: str) -> str:
        """Image reference, e.g. airoman/wp-dind:php-8.3.14"""
        return f"{self.settings.image_repository}:{component}-{version}"

    # ------------------------------------------------------------------
    # Instance
    # ------------------------------------------------------------------

    def render_instance_compose(
        self,
        name: str,
        stack: ResolvedStack,
        port: int,
        network: NetworkAssignment,
        credentials: Credentials,
    ) -> Dict[str, Any]:
        """
        Build the compose descriptor for one instance.

        Services are keyed `mysql`, `php` and the web server name; container
        names are `<name>-<service>`. Every service joins both the instance
        network and the shared network, which are external to the file.
        """
        logs = self.settings.instance_logs_dir(name)
        host_config = self.settings.host_config_dir
        webserver = stack.webserver
        webserver_dir = f"{webserver}-{stack.webserver_version}"
        networks = [network.name, SHARED_NETWORK_NAME]

        services: Dict[str, Any] = {
            "mysql": {
                "image": self.image("mysql", stack.mysql_image_version),
                "container_name": f"{name}-mysql",
                "environment": {
                    "MYSQL_ROOT_PASSWORD": credentials.db_root_password,
                    "MYSQL_DATABASE": credentials.db_name,
                    "MYSQL_USER": credentials.db_user,
                    "MYSQL_PASSWORD": credentials.db_password,
                },
                "volumes": [
                    "./data/mysql:/var/lib/mysql",
                    f"{logs}/mysql-{stack.mysql_version}:/var/log/mysql",
                    f"{host_config}/mysql/{stack.mysql_code}/my.cnf:/etc/mysql/conf.d/host.cnf:ro",
                    f"./config/mysql-{stack.mysql_version}/custom.cnf:/etc/mysql/conf.d/custom.cnf:ro",
                ],
                "networks": list(networks),
                "restart": "unless-stopped",
            },
            "php": {
                "image": self.image("php", stack.php_image_version),
                "container_name": f"{name}-php",
                "depends_on": ["mysql"],
                "environment": {
                    "WORDPRESS_DB_HOST": f"mysql:{MYSQL_PORT}",
                    "WORDPRESS_DB_USER": credentials.db_user,
                    "WORDPRESS_DB_PASSWORD": credentials.db_password,
                    "WORDPRESS_DB_NAME": credentials.db_name,
                },
                "volumes": [
                    "./data/wordpress:/var/www/html",
                    f"{host_config}/php/{stack.php_code}:/host-php-config:ro",
                    f"./config/php-{stack.php_version}/custom.ini:/usr/local/etc/php/conf.d/zzz-custom.ini:ro",
                    f"{logs}/php-{stack.php_version}:/var/log/php",
                ],
                "networks": list(networks),
                "restart": "unless-stopped",
            },
            webserver: {
                "image": self.image(webserver, stack.webserver_version),
                "container_name": f"{name}-{webserver}",
                "depends_on": ["php"],
                "ports": [f"{port}:{CONTAINER_HTTP_PORT}"],
                "volumes": [
                    "./data/wordpress:/var/www/html:ro",
                    f"./config/{webserver_dir}/wordpress.conf:/etc/{webserver}/conf.d/wordpress.conf:ro",
                    f"{logs}/{webserver_dir}:/var/log/{webserver}",
                ],
                "networks": list(networks),
                "restart": "unless-stopped",
            },
        }

        return {
            "services": services,
            "networks": {
                network.name: {"external": True},
                SHARED_NETWORK_NAME: {"external": True},
            },
        }

    # ------------------------------------------------------------------
    # Workspace mode
    # ------------------------------------------------------------------

    def render_workspace_compose(
        self, stack: ResolvedStack, nginx_config_path: Path
    ) -> Dict[str, Any]:
        """
        Build the single-site compose descriptor.

        Fixed port 8000, fixed development credentials, shared network only,
        MySQL data in a named volume.
        """
        workspace_dir = str(self.settings.workspace_dir)
        webserver = stack.webserver

        webserver_service: Dict[str, Any] = {
            "image": self.image(webserver, stack.webserver_version),
            "container_name": f"workspace-{webserver}",
            "ports": [f"{WORKSPACE_PORT}:{CONTAINER_HTTP_PORT}"],
            "volumes": [f"{workspace_dir}:/var/www/html"],
            "networks": [SHARED_NETWORK_NAME],
            "depends_on": ["workspace-php"],
            "restart": "unless-stopped",
        }
        if webserver == "nginx":
            webserver_service["volumes"].append(
                f"{nginx_config_path}:/etc/nginx/conf.d/default.conf:ro"
            )
        else:
            webserver_service["environment"] = [
                "PHP_FPM_HOST=workspace-php",
                f"PHP_FPM_PORT={PHP_FPM_PORT}",
            ]

        services: Dict[str, Any] = {
            "workspace-mysql": {
                "image": self.image("mysql", stack.mysql_image_version),
                "container_name": "workspace-mysql",
                "environment": {
                    "MYSQL_ROOT_PASSWORD": WORKSPACE_DB_ROOT_PASSWORD,
                    "MYSQL_DATABASE": WORKSPACE_DB_NAME,
                    "MYSQL_USER": WORKSPACE_DB_USER,
                    "MYSQL_PASSWORD": WORKSPACE_DB_PASSWORD,
                },
                "volumes": ["workspace-mysql-data:/var/lib/mysql"],
                "networks": [SHARED_NETWORK_NAME],
                "restart": "unless-stopped",
                "healthcheck": {
                    "test": [
                        "CMD",
                        "mysqladmin",
                        "ping",
                        "-h",
                        "localhost",
                        "-u",
                        "root",
                        f"-p{WORKSPACE_DB_ROOT_PASSWORD}",
                    ],
                    "interval": "10s",
                    "timeout": "5s",
                    "retries": 5,
                },
            },
            "workspace-php": {
                "image": self.image("php", stack.php_image_version),
                "container_name": "workspace-php",
                "volumes": [f"{workspace_dir}:/var/www/html"],
                "environment": ["PUID=${PUID:-1000}", "PGID=${PGID:-1000}"],
                "networks": [SHARED_NETWORK_NAME],
                "depends_on": ["workspace-mysql"],
                "restart": "unless-stopped",
            },
            f"workspace-{webserver}": webserver_service,
        }

        return {
            "services": services,
            "networks": {SHARED_NETWORK_NAME: {"external": True}},
            "volumes": {"workspace-mysql-data": {"driver": "local"}},
        }

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def render_webserver_config(self, webserver: str, php_host: str) -> str:
        """Render wordpress.conf for nginx or apache."""
        template_path = self.settings.templates_dir / webserver / "wordpress.conf.j2"
        if not template_path.exists():
            raise ConfigurationError(f"Web server template not found: {template_path}")
        template_content = template_path.read_text(encoding="utf-8")
        return Template(template_content).render(
            php_host=php_host,
            php_port=PHP_FPM_PORT,
            document_root="/var/www/html",
        )

    @staticmethod
    def write_compose(path: Path, descriptor: Dict[str, Any]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(descriptor, f, default_flow_style=False, sort_keys=False)
        return path
