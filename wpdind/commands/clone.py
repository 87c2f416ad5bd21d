"""
Clone Command

Create a new instance from an existing one.
"""

from dataclasses import dataclass

import click

from wpdind.base import InstanceCommand
from wpdind.constants import DEFAULT_CLONE_STRATEGY


@dataclass
class CloneOptions:
    """Options for clone command."""

    target: str
    strategy: str = DEFAULT_CLONE_STRATEGY


class CloneCommand(InstanceCommand):
    """Clone an instance into a new one with its own port, network and credentials."""

    def __init__(
        self,
        instance_name: str,
        options: CloneOptions,
        verbose: bool = False,
        json_output: bool = False,
    ):
        super().__init__(instance_name, verbose=verbose, json_output=json_output)
        self.options = options

    def execute(self) -> None:
        opts = self.options
        self.show_header(
            title="Clone Instance",
            instance=self.instance_name,
            details={"Target": opts.target, "Strategy": opts.strategy},
        )
        self.init_logger(opts.target, "clone")

        result = self.ensure_clone_service().clone(
            self.instance_name, opts.target, opts.strategy
        )
        if result.is_success and result.instance and not self.json_output:
            self.console.print(
                f"  [dim]URL:[/dim] [cyan]http://localhost:{result.instance.port}[/cyan]"
            )
        self.report(result)


@click.command()
@click.argument("source")
@click.argument("target")
@click.argument("strategy", required=False, default=DEFAULT_CLONE_STRATEGY)
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def clone(source, target, strategy, verbose, json_output):
    """
    Clone an instance

    Strategies:
        shared-reference (symlink)   share WordPress files, fresh database
        full-copy (copy-all)         copy files and database
        files-only-copy (copy-files) copy files, fresh database

    Examples:
        wp-dind clone shop shop-staging

        wp-dind clone shop shop-copy full-copy
    """
    options = CloneOptions(target=target, strategy=strategy)
    cmd = CloneCommand(source, options, verbose=verbose, json_output=json_output)
    cmd.run()
