"""
wp-dind Constants

Centralized constants for the version table, network layout, and defaults.
"""

# Image repository (overridable with WP_DIND_IMAGE_REPOSITORY)
DEFAULT_IMAGE_REPOSITORY = "airoman/wp-dind"
DIND_IMAGE_VERSION = "27.0.3"

# Version codes -> pinned image versions
PHP_IMAGE_VERSIONS = {
    "74": "7.4.33",
    "80": "8.0.30",
    "81": "8.1.31",
    "82": "8.2.26",
    "83": "8.3.14",
}
MYSQL_IMAGE_VERSIONS = {
    "56": "5.6.51",
    "57": "5.7.44",
    "80": "8.0.40",
}
WEBSERVER_IMAGE_VERSIONS = {
    "nginx": "1.27.3",
    "apache": "2.4.62",
}

# Newest supported version, used when a code is not in the table
LATEST_PHP_CODE = "83"
LATEST_MYSQL_CODE = "80"

WEBSERVERS = ["nginx", "apache"]

# Full version table written to the workspace document by `init`
IMAGE_VERSIONS = {
    "dind": DIND_IMAGE_VERSION,
    **{f"php{code}": version for code, version in PHP_IMAGE_VERSIONS.items()},
    **{f"mysql{code}": version for code, version in MYSQL_IMAGE_VERSIONS.items()},
    **WEBSERVER_IMAGE_VERSIONS,
    "redis": "7.4.1",
    "redisCommander": "0.8.1",
    "phpmyadmin": "5.2.3",
    "mailcatcher": "0.10.0",
}

# Workspace types
WORKSPACE_TYPE_WORKSPACE = "workspace"
WORKSPACE_TYPE_MULTI_INSTANCE = "multi-instance"
WORKSPACE_TYPES = [WORKSPACE_TYPE_WORKSPACE, WORKSPACE_TYPE_MULTI_INSTANCE]

# Default Port Configuration
DEFAULT_INSTANCE_PORT_START = 8001
WORKSPACE_PORT = 8000
CONTAINER_HTTP_PORT = 80
MYSQL_PORT = 3306
PHP_FPM_PORT = 9000

# Default Network Configuration
NETWORK_PREFIX = "wp-network"
INSTANCE_SUBNET_TEMPLATE = "172.20.{ordinal}.0/24"
FIRST_NETWORK_ORDINAL = 1
MAX_NETWORK_ORDINAL = 255
SHARED_NETWORK_NAME = "wp-shared"
SHARED_NETWORK_SUBNET = "172.21.0.0/16"

# Shared platform services reachable on the shared network
SHARED_SERVICES = {
    "phpmyadmin": True,
    "mailcatcher": True,
    "redis": True,
    "redisCommander": True,
}

# Instance naming
INSTANCE_NAME_PATTERN = r"^[A-Za-z0-9_-]+$"
INSTANCE_INFO_FILE = ".instance-info"
COMPOSE_FILE_NAME = "docker-compose.yml"
WORDPRESS_DATA_DIR = "data/wordpress"
MYSQL_DATA_DIR = "data/mysql"

# Credentials
PASSWORD_LENGTH = 25

# Workspace-mode fixed credentials (single-site development stack)
WORKSPACE_DB_NAME = "wordpress"
WORKSPACE_DB_USER = "wordpress"
WORKSPACE_DB_PASSWORD = "wordpress"
WORKSPACE_DB_ROOT_PASSWORD = "rootpassword"

# MySQL readiness polling
MYSQL_READY_ATTEMPTS = 30
MYSQL_READY_DELAY = 2
WORKSPACE_MYSQL_READY_ATTEMPTS = 60
WORKSPACE_MYSQL_READY_DELAY = 1

# Log Configuration
LOG_DATE_FORMAT = "%Y-%m-%d"
LOG_TIME_FORMAT = "%H-%M-%S"

# Clone strategies (canonical name -> accepted aliases)
CLONE_STRATEGY_ALIASES = {
    "shared-reference": "shared-reference",
    "symlink": "shared-reference",
    "full-copy": "full-copy",
    "copy-all": "full-copy",
    "files-only-copy": "files-only-copy",
    "copy-files": "files-only-copy",
}
DEFAULT_CLONE_STRATEGY = "shared-reference"
