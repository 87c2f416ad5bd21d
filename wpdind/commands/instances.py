"""
Instance Query Commands

List instances and show details of one instance.
"""

import click
from rich.table import Table

from wpdind.base import InstanceCommand

STATUS_STYLES = {
    "running": "green",
    "stopped": "dim",
    "creating": "yellow",
    "cloning": "yellow",
    "removing": "red",
}


class ListCommand(InstanceCommand):
    """List all instances with their live status."""

    def execute(self) -> None:
        instances = self.ensure_instance_service().list_instances()

        if self.json_output:
            self.output_json(
                {
                    "instances": [instance.to_dict() for instance in instances],
                    "total": len(instances),
                }
            )
            return

        self.show_header(title="Instances", subtitle=str(self.settings.instances_dir))

        if not instances:
            self.console.print("[yellow]No instances found[/yellow]")
            self.print_dim("Create one with: wp-dind create <name>")
            return

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Web server", style="white")
        table.add_column("PHP", style="white", justify="center")
        table.add_column("MySQL", style="white", justify="center")
        table.add_column("Port", style="yellow", justify="center")
        table.add_column("Network", style="magenta")
        table.add_column("Status")

        for instance in instances:
            status = instance.live_status
            style = STATUS_STYLES.get(status, "white")
            table.add_row(
                instance.name,
                instance.stack.webserver,
                instance.stack.php_version,
                instance.stack.mysql_version,
                str(instance.port) if instance.port else "-",
                instance.network.name if instance.network else "-",
                f"[{style}]{status}[/{style}]",
            )

        self.console.print(table)
        self.console.print(f"\n[dim]{len(instances)} instance(s)[/dim]\n")


class InfoCommand(InstanceCommand):
    """Show stack, credentials, directories and URLs of an instance."""

    def execute(self) -> None:
        info = self.ensure_instance_service().info(self.instance_name)

        if self.json_output:
            self.output_json(info)
            return

        self.show_header(title="Instance Info", instance=self.instance_name)

        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Key", style="dim")
        table.add_column("Value")

        stack = info["stack"]
        network = info.get("network") or {}
        status = info["status"]
        style = STATUS_STYLES.get(status, "white")
        table.add_row("Status", f"[{style}]{status}[/{style}]")
        table.add_row("Web server", stack["webserver"])
        table.add_row("PHP", stack["phpVersion"])
        table.add_row("MySQL", stack["mysqlVersion"])
        table.add_row("Port", str(info.get("port") or "-"))
        table.add_row("Network", network.get("name", "-"))
        table.add_row("Subnet", network.get("subnet", "-"))
        table.add_row("Created", info.get("createdAt") or "-")

        credentials = info.get("credentials")
        if credentials:
            table.add_row("", "")
            table.add_row("Database", credentials["database"])
            table.add_row("DB user", credentials["user"])
            table.add_row("DB password", credentials["password"])
            table.add_row("DB root password", credentials["rootPassword"])

        table.add_row("", "")
        for key, path in info["directories"].items():
            table.add_row(f"{key.capitalize()} dir", path)

        self.console.print(table)

        if info["containers"]:
            containers = Table(show_header=True, header_style="bold cyan")
            containers.add_column("Container", style="cyan")
            containers.add_column("Status", style="green")
            containers.add_column("Ports", style="yellow")
            for name, details in info["containers"].items():
                containers.add_row(name, details.get("status", ""), details.get("ports", ""))
            self.console.print()
            self.console.print(containers)

        if info["urls"]:
            self.console.print()
            for url in info["urls"]:
                self.console.print(f"  [dim]URL:[/dim] [cyan]{url}[/cyan]")
        self.console.print()


@click.command("list")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def list_instances(json_output):
    """
    List all instances

    Running state comes from the container engine, not from stored status.
    """
    cmd = ListCommand(json_output=json_output)
    cmd.run()


@click.command()
@click.argument("name")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def info(name, json_output):
    """
    Show instance details, credentials and URLs

    Example:
        wp-dind info shop
    """
    cmd = InfoCommand(name, json_output=json_output)
    cmd.run()
