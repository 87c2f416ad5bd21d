"""
Start / Stop Commands

Bring an instance's containers up or stop them.
"""

import click

from wpdind.base import InstanceCommand


class StartCommand(InstanceCommand):
    """Start an instance."""

    def execute(self) -> None:
        self.show_header(title="Start Instance", instance=self.instance_name)
        self.init_logger(self.instance_name, "start")

        result = self.ensure_instance_service().start(self.instance_name)
        url = result.data.get("url")
        if url and not self.json_output:
            self.console.print(f"  [dim]URL:[/dim] [cyan]{url}[/cyan]")
        self.report(result)


class StopCommand(InstanceCommand):
    """Stop an instance."""

    def execute(self) -> None:
        self.show_header(title="Stop Instance", instance=self.instance_name)
        self.init_logger(self.instance_name, "stop")
        self.report(self.ensure_instance_service().stop(self.instance_name))


@click.command()
@click.argument("name")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def start(name, verbose, json_output):
    """
    Start an instance

    Example:
        wp-dind start shop
    """
    cmd = StartCommand(name, verbose=verbose, json_output=json_output)
    cmd.run()


@click.command()
@click.argument("name")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def stop(name, verbose, json_output):
    """
    Stop an instance (containers and data are kept)

    Example:
        wp-dind stop shop
    """
    cmd = StopCommand(name, verbose=verbose, json_output=json_output)
    cmd.run()
