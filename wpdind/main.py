#!/usr/bin/env python3
"""wp-dind - Main entry point"""

# Set environment BEFORE any imports so rich/rich-click detect colors correctly
import os
import sys

if "NO_COLOR" in os.environ:
    del os.environ["NO_COLOR"]

os.environ["FORCE_COLOR"] = "1"
os.environ["TERM"] = "xterm-256color"
os.environ["COLORTERM"] = "truecolor"

import functools

from rich.console import Console

import rich_click as click

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.USE_MARKDOWN = False
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.MAX_WIDTH = 100
click.rich_click.COLOR_SYSTEM = "truecolor"

click.rich_click.STYLE_COMMAND = "bold cyan"
click.rich_click.STYLE_OPTION = "bold magenta"
click.rich_click.STYLE_SWITCH = "bold green"
click.rich_click.STYLE_ARGUMENT = "bold yellow"
click.rich_click.STYLE_HEADER_TEXT = "bold cyan"
click.rich_click.STYLE_USAGE = "bold yellow"
click.rich_click.STYLE_USAGE_COMMAND = "bold cyan"
click.rich_click.STYLE_HELPTEXT_FIRST_LINE = "bold white"
click.rich_click.STYLE_HELPTEXT = ""
click.rich_click.STYLE_OPTION_HELP = ""
click.rich_click.STYLE_METAVAR = "bold yellow"
click.rich_click.STYLE_METAVAR_APPEND = "dim yellow"
click.rich_click.STYLE_METAVAR_SEPARATOR = "dim"
click.rich_click.STYLE_REQUIRED_SHORT = "bold red"
click.rich_click.STYLE_REQUIRED_LONG = "bold red"
click.rich_click.STYLE_OPTION_DEFAULT = "dim cyan"
click.rich_click.STYLE_EPILOG_TEXT = "dim"
click.rich_click.STYLE_FOOTER_TEXT = "dim"
click.rich_click.STYLE_OPTIONS_PANEL_BORDER = "cyan"
click.rich_click.STYLE_COMMANDS_PANEL_BORDER = "cyan"
click.rich_click.ALIGN_OPTIONS_PANEL = "left"
click.rich_click.ALIGN_ERRORS_PANEL = "left"
click.rich_click.ERRORS_EPILOGUE = ""

from wpdind import __version__
from wpdind.commands import clone, create, init, instances, logs, remove, start, workspace
from wpdind.exceptions import WpDindError

console = Console()

BANNER = """
[bold color(214)]wp-dind[/bold color(214)] [dim]›[/dim] [bold white]Isolated WordPress instances inside Docker-in-Docker[/bold white]
"""


def handle_cli_errors(func):
    """Decorator to handle CLI errors gracefully."""
    from click.exceptions import ClickException, MissingParameter, UsageError

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except MissingParameter as e:
            console.print(f"\n[bold red]✗ Error:[/bold red] {e.format_message()}\n")
            if e.ctx and e.ctx.command:
                console.print(
                    f"[dim]Run[/dim] [cyan]wp-dind {e.ctx.command.name} --help[/cyan] "
                    f"[dim]for usage information[/dim]\n"
                )
            sys.exit(1)
        except UsageError as e:
            console.print(f"\n[bold red]✗ Error:[/bold red] {e.format_message()}\n")
            if e.ctx and e.ctx.command:
                console.print(
                    f"[dim]Run[/dim] [cyan]wp-dind {e.ctx.command.name} --help[/cyan] "
                    f"[dim]for usage information[/dim]\n"
                )
            sys.exit(1)
        except ClickException as e:
            e.show()
            sys.exit(e.exit_code)
        except WpDindError as e:
            console.print(f"\n[bold red]✗ {e.message}[/bold red]")
            if e.context:
                console.print(f"  [color(208)]{e.context}[/color(208)]")
            console.print()
            sys.exit(1)
        except KeyboardInterrupt:
            console.print("\n\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            sys.exit(130)
        except Exception as e:
            console.print(f"\n[bold red]✗ Unexpected error:[/bold red] {e}\n")

            if os.environ.get("DEBUG") or os.environ.get("VERBOSE"):
                import traceback

                console.print("[dim]Traceback:[/dim]")
                traceback.print_exc()
            sys.exit(1)

    return wrapper


@click.group(cls=click.RichGroup, invoke_without_command=True)
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """
    wp-dind - Run many isolated WordPress instances on one Docker-in-Docker host.

    \b
    Quick Start:
      wp-dind init my-workspace       # Initialize the workspace
      wp-dind create shop 80 83 nginx # Create an instance
      wp-dind start shop              # Start it
      wp-dind info shop               # Credentials and URLs

    \b
    Instances:
      wp-dind list                    # All instances with live status
      wp-dind clone shop shop-dev     # Clone (shared-reference by default)
      wp-dind logs shop web -f        # Follow web server logs
      wp-dind stop shop               # Stop containers
      wp-dind remove shop             # Delete everything

    \b
    Single-site mode:
      wp-dind init blog --type workspace
      wp-dind workspace:start
      wp-dind workspace:status
    """
    if ctx.invoked_subcommand is None:
        console.print(BANNER)
        console.print("[yellow]Run 'wp-dind --help' for usage[/yellow]\n")


cli.add_command(init.init)
cli.add_command(create.create)
cli.add_command(start.start)
cli.add_command(start.stop)
cli.add_command(remove.remove)
cli.add_command(clone.clone)
cli.add_command(instances.list_instances)
cli.add_command(instances.info)
cli.add_command(logs.logs)
cli.add_command(workspace.workspace_start)
cli.add_command(workspace.workspace_stop)
cli.add_command(workspace.workspace_status)


@handle_cli_errors
def main():
    """Main entry point with error handling."""
    cli()


if __name__ == "__main__":
    main()
