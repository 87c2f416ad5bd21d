"""
wp-dind - UI Components
Standardized command headers
"""

from rich.console import Console

BRAND = "wp-dind"


def show_header(
    title: str,
    subtitle: str = None,
    instance: str = None,
    details: dict = None,
    console: Console = None,
):
    """
    Display a standardized wp-dind command header.

    Args:
        title: Main title (e.g., "Create Instance")
        subtitle: Optional subtitle line
        instance: Instance name (if applicable)
        details: Additional key-value pairs to display
        console: Rich Console instance (creates new if None)

    Example:
        show_header(
            title="Create Instance",
            instance="mysite",
            details={"Stack": "nginx, PHP 8.3, MySQL 8.0"}
        )
    """
    if console is None:
        console = Console()

    prefix = f" [bold color(214)]{BRAND}[/bold color(214)] [dim]›[/dim]"

    console.print(f"{prefix} [bold white]{title}[/bold white]")

    if subtitle:
        console.print(f"{prefix} [dim]{subtitle}[/dim]")

    if instance:
        console.print(f"{prefix} Instance: [cyan]{instance}[/cyan]")

    if details:
        for key, value in details.items():
            console.print(f"{prefix} {key}: [cyan]{value}[/cyan]")

    console.print()
