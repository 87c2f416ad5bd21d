"""
Logs Command - Stream docker compose logs of an instance
"""

from typing import Optional

import click

from wpdind.base import InstanceCommand
from wpdind.services.instance_service import LOG_SERVICES


class LogsCommand(InstanceCommand):
    """Stream container logs (output is not captured)."""

    def __init__(
        self,
        instance_name: str,
        service: Optional[str] = None,
        follow: bool = False,
        tail: Optional[int] = None,
    ):
        super().__init__(instance_name)
        self.service = service
        self.follow = follow
        self.tail = tail

    def execute(self) -> None:
        returncode = self.ensure_instance_service().logs(
            self.instance_name, service=self.service, follow=self.follow, tail=self.tail
        )
        if returncode != 0:
            raise SystemExit(returncode)


@click.command("logs")
@click.argument("name")
@click.argument("service", required=False, type=click.Choice(LOG_SERVICES))
@click.option("-f", "--follow", is_flag=True, help="Stream logs in real-time")
@click.option("-n", "--tail", type=int, help="Number of lines to show from the end")
def logs(name, service, follow, tail):
    """
    View instance logs

    SERVICE is mysql, php, nginx, apache or web (the instance's web server).

    Examples:
        wp-dind logs shop

        wp-dind logs shop web -f --tail 100
    """
    cmd = LogsCommand(name, service=service, follow=follow, tail=tail)
    cmd.run()
