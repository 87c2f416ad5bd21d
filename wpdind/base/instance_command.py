"""
Instance Command Base Class

Base class for commands that operate on WordPress instances.
Provides lazy service initialization.
"""

from typing import Optional

from wpdind.config import Settings
from wpdind.services.clone_service import CloneService
from wpdind.services.instance_service import InstanceService

from .base_command import BaseCommand


class InstanceCommand(BaseCommand):
    """
    Base class for instance commands.

    Services are built on first use so they pick up the logger created in
    `execute`.
    """

    def __init__(
        self,
        instance_name: Optional[str] = None,
        verbose: bool = False,
        json_output: bool = False,
        settings: Optional[Settings] = None,
    ):
        super().__init__(verbose=verbose, json_output=json_output, settings=settings)
        self.instance_name = instance_name
        self._instance_service: Optional[InstanceService] = None
        self._clone_service: Optional[CloneService] = None

    def ensure_instance_service(self) -> InstanceService:
        if self._instance_service is None:
            self._instance_service = InstanceService(
                self.settings,
                self.create_docker(),
                store=self.create_store(),
                logger=self.logger,
            )
        return self._instance_service

    def ensure_clone_service(self) -> CloneService:
        if self._clone_service is None:
            self._clone_service = CloneService(self.ensure_instance_service())
        return self._clone_service
