"""
Init Command

Initialize the workspace document on the DinD host.
"""

from dataclasses import dataclass
from typing import Optional

import click

from wpdind.base import BaseCommand
from wpdind.constants import WEBSERVERS, WORKSPACE_TYPE_MULTI_INSTANCE, WORKSPACE_TYPES
from wpdind.services.workspace_service import WorkspaceService


@dataclass
class InitOptions:
    """Options for init command."""

    workspace_name: str
    workspace_type: str = WORKSPACE_TYPE_MULTI_INSTANCE
    webserver: Optional[str] = None
    php_version: Optional[str] = None
    mysql_version: Optional[str] = None


class InitCommand(BaseCommand):
    """Write the workspace document (name, type, stack and image table)."""

    def __init__(self, options: InitOptions, verbose: bool = False, json_output: bool = False):
        super().__init__(verbose=verbose, json_output=json_output)
        self.options = options

    def execute(self) -> None:
        opts = self.options
        self.show_header(
            title="Initialize Workspace",
            subtitle=f"{opts.workspace_type} mode",
            details={"Workspace": opts.workspace_name},
        )
        logger = self.init_logger("workspace", "init")
        if logger:
            logger.step(f"Initializing workspace {opts.workspace_name}")

        service = WorkspaceService(
            self.settings, self.create_docker(), store=self.create_store(), logger=logger
        )
        result = service.init_workspace(
            opts.workspace_name,
            opts.workspace_type,
            webserver=opts.webserver,
            php_version=opts.php_version,
            mysql_version=opts.mysql_version,
        )
        if result.is_success and not self.json_output:
            self.print_dim(f"Configuration: {self.settings.workspace_config}")
        self.report(result)


@click.command()
@click.argument("workspace_name")
@click.option(
    "--type",
    "workspace_type",
    type=click.Choice(WORKSPACE_TYPES),
    default=WORKSPACE_TYPE_MULTI_INSTANCE,
    show_default=True,
    help="Workspace mode (fixed after init)",
)
@click.option("--webserver", type=click.Choice(WEBSERVERS), help="Web server for single-site mode")
@click.option("--php", "php_version", help="PHP version code for single-site mode (e.g. 83)")
@click.option("--mysql", "mysql_version", help="MySQL version code for single-site mode (e.g. 80)")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def init(workspace_name, workspace_type, webserver, php_version, mysql_version, verbose, json_output):
    """
    Initialize the workspace

    Examples:
        wp-dind init my-workspace

        wp-dind init blog --type workspace --webserver apache --php 82
    """
    options = InitOptions(
        workspace_name=workspace_name,
        workspace_type=workspace_type,
        webserver=webserver,
        php_version=php_version,
        mysql_version=mysql_version,
    )
    cmd = InitCommand(options, verbose=verbose, json_output=json_output)
    cmd.run()
