"""
Workspace Commands

Single-site ("workspace") mode: start, stop and inspect the implicit stack.
"""

import click
from rich.table import Table

from wpdind.base import BaseCommand
from wpdind.services.workspace_service import WorkspaceService


class WorkspaceCommand(BaseCommand):
    """Base for workspace:* commands."""

    def workspace_service(self) -> WorkspaceService:
        return WorkspaceService(
            self.settings, self.create_docker(), store=self.create_store(), logger=self.logger
        )


class WorkspaceStartCommand(WorkspaceCommand):
    def execute(self) -> None:
        self.show_header(title="Workspace Start", subtitle="Single-site stack")
        self.init_logger("workspace", "start")

        result = self.workspace_service().start()
        url = result.data.get("url")
        if url and not self.json_output:
            self.console.print(f"  [dim]URL:[/dim] [cyan]{url}[/cyan]")
        self.report(result)


class WorkspaceStopCommand(WorkspaceCommand):
    def execute(self) -> None:
        self.show_header(title="Workspace Stop", subtitle="Single-site stack")
        self.init_logger("workspace", "stop")
        self.report(self.workspace_service().stop())


class WorkspaceStatusCommand(WorkspaceCommand):
    def execute(self) -> None:
        status = self.workspace_service().status()

        if self.json_output:
            self.output_json(status)
            return

        self.show_header(title="Workspace Status")
        if not status["enabled"]:
            self.console.print(f"[dim]Mode:[/dim] {status['mode']}")
            self.print_dim("Workspace mode is not enabled")
            return

        stack = status["stack"]
        self.console.print(f"[dim]Workspace:[/dim] {status.get('workspaceName') or '-'}")
        self.console.print(
            f"[dim]Stack:[/dim]     {stack['webserver']}, PHP {stack['phpVersion']}, "
            f"MySQL {stack['mysqlVersion']}"
        )
        style = "green" if status["status"] == "running" else "dim"
        self.console.print(f"[dim]Status:[/dim]    [{style}]{status['status']}[/{style}]")

        if status["containers"]:
            table = Table(show_header=True, header_style="bold cyan")
            table.add_column("Container", style="cyan")
            table.add_column("Status", style="green")
            table.add_column("Ports", style="yellow")
            for name, details in status["containers"].items():
                table.add_row(name, details.get("status", ""), details.get("ports", ""))
            self.console.print()
            self.console.print(table)
        self.console.print()


@click.command("workspace:start")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def workspace_start(verbose, json_output):
    """
    Start the single-site stack (no-op outside workspace mode)
    """
    cmd = WorkspaceStartCommand(verbose=verbose, json_output=json_output)
    cmd.run()


@click.command("workspace:stop")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def workspace_stop(verbose, json_output):
    """
    Stop and remove the single-site stack
    """
    cmd = WorkspaceStopCommand(verbose=verbose, json_output=json_output)
    cmd.run()


@click.command("workspace:status")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def workspace_status(json_output):
    """
    Show workspace mode, stack and running containers
    """
    cmd = WorkspaceStatusCommand(json_output=json_output)
    cmd.run()
