"""Version code resolution for instance stacks

Version codes are accepted either in short form ("83") or dotted form
("8.3"). Unknown codes resolve to the newest supported version; every such
substitution is reported back to the caller so it can be logged.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from wpdind.constants import (
    LATEST_MYSQL_CODE,
    LATEST_PHP_CODE,
    MYSQL_IMAGE_VERSIONS,
    PHP_IMAGE_VERSIONS,
    WEBSERVER_IMAGE_VERSIONS,
    WEBSERVERS,
)
from wpdind.exceptions import ValidationError


def normalize_code(version: Optional[str]) -> str:
    """Turn "8.3" / "83" / " 8.3 " into the short code "83"."""
    return (version or "").strip().replace(".", "")


def code_to_dotted(code: str) -> str:
    """Turn "83" into "8.3"."""
    return f"{code[0]}.{code[1:]}" if len(code) >= 2 else code


@dataclass
class ResolvedStack:
    """Stack choice mapped onto concrete image versions."""

    webserver: str
    php_code: str
    mysql_code: str
    substitutions: List[str] = field(default_factory=list)

    @property
    def php_version(self) -> str:
        """major.minor, used for directory names and the workspace document."""
        return code_to_dotted(self.php_code)

    @property
    def mysql_version(self) -> str:
        return code_to_dotted(self.mysql_code)

    @property
    def php_image_version(self) -> str:
        return PHP_IMAGE_VERSIONS[self.php_code]

    @property
    def mysql_image_version(self) -> str:
        return MYSQL_IMAGE_VERSIONS[self.mysql_code]

    @property
    def webserver_version(self) -> str:
        return WEBSERVER_IMAGE_VERSIONS[self.webserver]


def validate_webserver(webserver: Optional[str]) -> str:
    """
    Validate the web server choice.

    Raises:
        ValidationError: If the value is not nginx or apache
    """
    value = (webserver or "").strip().lower()
    if value not in WEBSERVERS:
        raise ValidationError(
            f"Invalid webserver '{webserver}'. Must be 'nginx' or 'apache'"
        )
    return value


def resolve_stack(mysql_version: str, php_version: str, webserver: str) -> ResolvedStack:
    """
    Resolve version codes into a ResolvedStack.

    Args:
        mysql_version: MySQL code ("56", "57", "80" or dotted)
        php_version: PHP code ("74" .. "83" or dotted)
        webserver: nginx or apache

    Returns:
        ResolvedStack; `substitutions` lists any fallback that was applied

    Raises:
        ValidationError: If the web server is invalid
    """
    webserver = validate_webserver(webserver)
    substitutions: List[str] = []

    mysql_code = normalize_code(mysql_version)
    if mysql_code not in MYSQL_IMAGE_VERSIONS:
        substitutions.append(
            f"Unknown MySQL version '{mysql_version}', using "
            f"{code_to_dotted(LATEST_MYSQL_CODE)}"
        )
        mysql_code = LATEST_MYSQL_CODE

    php_code = normalize_code(php_version)
    if php_code not in PHP_IMAGE_VERSIONS:
        substitutions.append(
            f"Unknown PHP version '{php_version}', using "
            f"{code_to_dotted(LATEST_PHP_CODE)}"
        )
        php_code = LATEST_PHP_CODE

    return ResolvedStack(
        webserver=webserver,
        php_code=php_code,
        mysql_code=mysql_code,
        substitutions=substitutions,
    )
