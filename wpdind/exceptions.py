"""
wp-dind Exception Hierarchy

Clean exception hierarchy for consistent error handling across the manager.
"""

from typing import Optional


class WpDindError(Exception):
    """Base exception for all wp-dind errors."""

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class ConfigurationError(WpDindError):
    """Raised when configuration is invalid or missing."""

    pass


class ValidationError(WpDindError):
    """Raised when user input fails validation (no side effects applied)."""

    pass


class StateError(WpDindError):
    """Raised when the workspace document cannot be read or written."""

    pass


class ConcurrentModificationError(StateError):
    """Raised when the workspace document changed since it was loaded."""

    def __init__(self, expected_revision: int, actual_revision: int):
        self.expected_revision = expected_revision
        self.actual_revision = actual_revision
        message = "Workspace configuration was modified by another invocation"
        context = f"Expected revision {expected_revision}, found {actual_revision}"
        super().__init__(message, context)


class ResourceConflictError(WpDindError):
    """Raised when a network or port is already owned by someone else."""

    pass


class NetworkExhaustedError(ResourceConflictError):
    """Raised when no instance network ordinal is left."""

    pass


class EngineError(WpDindError):
    """Raised when a docker / docker compose invocation fails."""

    def __init__(self, message: str, command: str = "", stderr: str = ""):
        self.command = command
        self.stderr = stderr.strip()
        context = self.stderr or (f"Command: {command}" if command else None)
        super().__init__(message, context)


class InstanceNotFoundError(ValidationError):
    """Raised when an instance does not exist."""

    def __init__(self, instance_name: str, available: Optional[list[str]] = None):
        self.instance_name = instance_name
        self.available = available or []
        message = f"Instance '{instance_name}' does not exist"
        context = None
        if self.available:
            context = f"Available instances: {', '.join(self.available)}"
        super().__init__(message, context)


class InstanceExistsError(ValidationError):
    """Raised when an instance name is already taken."""

    def __init__(self, instance_name: str):
        self.instance_name = instance_name
        super().__init__(f"Instance '{instance_name}' already exists")
