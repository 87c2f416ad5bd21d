"""
Remove Command

Tear down an instance and delete its files.
"""

from dataclasses import dataclass

import click

from wpdind.base import InstanceCommand


@dataclass
class RemoveOptions:
    """Options for remove command."""

    force: bool = False


class RemoveCommand(InstanceCommand):
    """
    Remove an instance.

    Without --force the user must type "yes"; a non-interactive stdin
    without --force is refused.
    """

    def __init__(
        self,
        instance_name: str,
        options: RemoveOptions,
        verbose: bool = False,
        json_output: bool = False,
    ):
        super().__init__(instance_name, verbose=verbose, json_output=json_output)
        self.options = options

    def execute(self) -> None:
        self.show_header(
            title="Remove Instance",
            subtitle="Containers, volumes, network and files will be deleted",
            instance=self.instance_name,
        )

        if not self.options.force:
            if not self.stdin_is_interactive():
                self.exit_with_error(
                    "Refusing to remove without confirmation; use --force in non-interactive mode"
                )
            if not self.confirm_phrase(
                f"[bold red]Remove instance '{self.instance_name}' and all its data?[/bold red]"
            ):
                self.print_warning("Removal cancelled")
                return

        self.init_logger(self.instance_name, "remove")
        self.report(self.ensure_instance_service().remove(self.instance_name))


@click.command()
@click.argument("name")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def remove(name, force, verbose, json_output):
    """
    Remove an instance and all its data

    Warning: the database and WordPress files are deleted.

    Examples:
        wp-dind remove shop

        wp-dind remove shop --force
    """
    cmd = RemoveCommand(name, RemoveOptions(force=force), verbose=verbose, json_output=json_output)
    cmd.run()
