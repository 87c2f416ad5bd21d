"""
wp-dind Base Command Classes

Abstract base classes for consistent command structure.
"""

from .base_command import BaseCommand
from .instance_command import InstanceCommand

__all__ = [
    "BaseCommand",
    "InstanceCommand",
]
