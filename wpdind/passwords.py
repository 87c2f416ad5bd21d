"""Database password generation."""

import secrets
import string

from wpdind.constants import PASSWORD_LENGTH


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    """Generate a random alphanumeric password (safe inside compose YAML and shell args)."""
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))
