"""
Create Command

Create a new isolated WordPress instance.
"""

from dataclasses import dataclass
from typing import Optional

import click

from wpdind.base import InstanceCommand
from wpdind.models.instance import Instance


@dataclass
class CreateOptions:
    """Options for create command."""

    mysql_version: Optional[str] = None
    php_version: Optional[str] = None
    webserver: Optional[str] = None


class CreateCommand(InstanceCommand):
    """Reserve a port and network, then render and persist a new instance."""

    def __init__(
        self,
        instance_name: str,
        options: CreateOptions,
        verbose: bool = False,
        json_output: bool = False,
    ):
        super().__init__(instance_name, verbose=verbose, json_output=json_output)
        self.options = options

    def execute(self) -> None:
        opts = self.options
        self.show_header(
            title="Create Instance",
            instance=self.instance_name,
            details={
                "MySQL": opts.mysql_version or self.settings.default_mysql_version,
                "PHP": opts.php_version or self.settings.default_php_version,
                "Web server": opts.webserver or self.settings.default_webserver,
            },
        )
        self.init_logger(self.instance_name, "create")

        result = self.ensure_instance_service().create(
            self.instance_name,
            mysql_version=opts.mysql_version,
            php_version=opts.php_version,
            webserver=opts.webserver,
        )
        if result.is_success and result.instance and not self.json_output:
            self._print_summary(result.instance)
        self.report(result)

    def _print_summary(self, instance: Instance) -> None:
        self.console.print()
        self.console.print(f"  [dim]Stack:[/dim]    {instance.stack}")
        self.console.print(f"  [dim]Port:[/dim]     {instance.port}")
        if instance.network:
            self.console.print(
                f"  [dim]Network:[/dim]  {instance.network.name} ({instance.network.subnet})"
            )
        self.console.print()
        self.console.print(f"  [dim]Start it with:[/dim] [cyan]wp-dind start {instance.name}[/cyan]")
        self.console.print()


@click.command()
@click.argument("name")
@click.argument("mysql_version", required=False)
@click.argument("php_version", required=False)
@click.argument("webserver", required=False)
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def create(name, mysql_version, php_version, webserver, verbose, json_output):
    """
    Create a new WordPress instance

    Versions are codes: MySQL 56, 57, 80 and PHP 74, 80, 81, 82, 83.
    Web server is nginx or apache.

    Examples:
        wp-dind create shop

        wp-dind create legacy 57 74 apache
    """
    options = CreateOptions(
        mysql_version=mysql_version, php_version=php_version, webserver=webserver
    )
    cmd = CreateCommand(name, options, verbose=verbose, json_output=json_output)
    cmd.run()
