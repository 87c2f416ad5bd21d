"""
Base Command Class

Abstract base for all wp-dind commands.
Provides common functionality and structure.
"""

import json
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from rich.console import Console

from wpdind.config import Settings, load_settings
from wpdind.exceptions import WpDindError
from wpdind.logger import OperationLogger
from wpdind.models.results import LifecycleResult, ResultStatus
from wpdind.services.docker_service import DockerService
from wpdind.services.workspace_store import WorkspaceStore
from wpdind.ui_components import show_header


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Settings and logger initialization
    - Header display
    - Error handling
    - Lifecycle result reporting
    - JSON output support
    """

    def __init__(
        self,
        verbose: bool = False,
        json_output: bool = False,
        settings: Optional[Settings] = None,
    ):
        self.verbose = verbose
        self.json_output = json_output
        self.console = Console()
        self.settings = settings or load_settings()
        self.logger: Optional[OperationLogger] = None

    def init_logger(self, instance_name: str, command_name: str) -> Optional[OperationLogger]:
        """
        Initialize command logger (skip in JSON mode).

        Args:
            instance_name: Instance name (use "workspace" for workspace commands)
            command_name: Command name

        Returns:
            OperationLogger instance or None if JSON mode
        """
        if self.json_output:
            return None
        self.logger = OperationLogger(
            instance_name, command_name, self.settings.logs_dir, verbose=self.verbose
        )
        return self.logger

    def create_docker(self) -> DockerService:
        return DockerService(self.settings.compose_args, logger=self.logger)

    def create_store(self) -> WorkspaceStore:
        return WorkspaceStore(self.settings.workspace_config, self.settings.lock_timeout)

    def output_json(self, data: Dict[str, Any], exit_code: int = 0) -> None:
        """
        Output data as JSON.

        Args:
            data: Data to output as JSON
            exit_code: Exit code (non-zero raises SystemExit)
        """
        print(json.dumps(data, indent=2))
        if exit_code != 0:
            raise SystemExit(exit_code)

    def output_json_error(
        self, error: str, details: Optional[Dict[str, Any]] = None, exit_code: int = 1
    ) -> None:
        error_data: Dict[str, Any] = {"error": error}
        if details:
            error_data["details"] = details
        self.output_json(error_data, exit_code=exit_code)

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        instance: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skip in JSON or verbose mode)."""
        if not self.verbose and not self.json_output:
            show_header(
                title=title,
                subtitle=subtitle,
                instance=instance,
                details=details,
                console=self.console,
            )

    def print_success(self, message: str) -> None:
        """Print success message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[green]✓ {message}[/green]")

    def print_error(self, message: str) -> None:
        """Print error message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[red]✗ {message}[/red]")

    def print_warning(self, message: str) -> None:
        """Print warning message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[yellow]⚠ {message}[/yellow]")

    def print_dim(self, message: str) -> None:
        """Print dim message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[dim]{message}[/dim]")

    def stdin_is_interactive(self) -> bool:
        return sys.stdin.isatty()

    def confirm_phrase(self, question: str, phrase: str = "yes") -> bool:
        """
        Ask the user to type an exact confirmation phrase.

        Args:
            question: Question to ask
            phrase: Answer that counts as confirmation

        Returns:
            True if the answer matches `phrase`
        """
        self.console.print(
            f"{question} [dim](type[/dim] [bold bright_white]{phrase}[/bold bright_white] "
            f"[dim]to confirm)[/dim]: ",
            end="",
        )
        return input().strip() == phrase

    def exit_with_error(self, message: str, code: int = 1) -> None:
        """
        Print error and exit.

        Args:
            message: Error message
            code: Exit code
        """
        if self.json_output:
            self.output_json_error(message, exit_code=code)
        self.print_error(message)
        raise SystemExit(code)

    def report(self, result: LifecycleResult) -> None:
        """
        Print a lifecycle result and exit non-zero unless it was applied.

        Args:
            result: Result returned by a service operation
        """
        if self.logger and not result.is_success:
            self.logger.has_errors = True

        if self.json_output:
            self.output_json(result.to_dict(), exit_code=result.exit_code)
            return

        for warning in result.warnings:
            self.print_warning(warning)

        if result.status == ResultStatus.APPLIED:
            self.print_success(result.message)
        elif result.status == ResultStatus.REJECTED:
            self.print_error(result.message)
        elif result.status == ResultStatus.ROLLED_BACK:
            self.print_error(result.message)
            self.print_dim("All changes were rolled back")
        else:
            self.print_error(result.message)
            if result.cleanup_hint:
                self.console.print(f"[dim]To clean up, run:[/dim] [cyan]{result.cleanup_hint}[/cyan]")

        if self.logger:
            self.console.print(f"\n[dim]Logs saved to:[/dim] {self.logger.log_path}\n")

        if not result.is_success:
            raise SystemExit(result.exit_code)

    @abstractmethod
    def execute(self, **kwargs) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses.
        """
        pass

    def run(self, **kwargs) -> None:
        """
        Run command with error handling.

        Args:
            **kwargs: Command arguments
        """
        try:
            self.execute(**kwargs)
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            if self.logger:
                self.logger.log_error("Operation cancelled by user")
                self.console.print(f"\n[dim]Logs saved to:[/dim] {self.logger.log_path}\n")
            raise SystemExit(130)
        except SystemExit:
            raise
        except WpDindError as e:
            if self.json_output:
                self.output_json_error(e.message, details={"context": e.context} if e.context else None)
            self.console.print(f"\n[bold red]✗ {e.message}[/bold red]")
            if e.context:
                self.console.print(f"  [color(208)]{e.context}[/color(208)]")
            if self.logger:
                self.logger.log_error(e.message, context=e.context)
                self.console.print(f"\n[dim]Logs saved to:[/dim] {self.logger.log_path}\n")
            raise SystemExit(1)
        except PermissionError as e:
            self.console.print(f"\n[bold red]✗ Permission denied:[/bold red] {e}\n")
            self.console.print("[dim]Try running with appropriate permissions[/dim]\n")
            if self.logger:
                self.logger.log_error(f"Permission error: {e}")
                self.console.print(f"[dim]Logs saved to:[/dim] {self.logger.log_path}\n")
            raise SystemExit(1)
        except Exception as e:
            error_type = type(e).__name__
            self.console.print(f"\n[bold red]✗ {error_type}:[/bold red] {e}\n")
            if self.logger:
                self.logger.log_error(f"{error_type}: {e}")
                self.console.print(f"[dim]Logs saved to:[/dim] {self.logger.log_path}\n")
            raise SystemExit(1)
        finally:
            if self.logger:
                self.logger.close()
