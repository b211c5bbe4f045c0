"""
Base Command Class

Abstract base for all sitedeploy CLI commands.
Provides common functionality and structure.
"""

from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console

from sitedeploy.exceptions import SiteDeployError
from sitedeploy.logger import DeployLogger
from sitedeploy.models.config import DeploymentConfig
from sitedeploy.models.results import OperationResult
from sitedeploy.services.config_service import ConfigService
from sitedeploy.services.deploy_service import DeploymentManager
from sitedeploy.services.transport import RemoteTransport, SSHTransport
from sitedeploy.ui_components import show_header
from sitedeploy.utils import get_logs_dir, get_project_root


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Config loading
    - Logger initialization
    - Header display
    - Transport and manager wiring
    - Error to exit code mapping
    """

    def __init__(self, root: Optional[str] = None, verbose: bool = False):
        self.verbose = verbose
        self.console = Console()
        self.project_root = get_project_root(root)
        self.config_service = ConfigService(self.project_root)
        self.logger: Optional[DeployLogger] = None

    def init_logger(self, command_name: str) -> DeployLogger:
        """
        Initialize command logger.

        Args:
            command_name: Command name, used in the log file name

        Returns:
            DeployLogger instance
        """
        self.logger = DeployLogger(
            command_name,
            get_logs_dir(self.project_root),
            verbose=self.verbose,
            console=self.console,
        )
        return self.logger

    def load_config(self) -> DeploymentConfig:
        config = self.config_service.load()
        for key in self.config_service.unknown_keys:
            self.print_warning(f"Ignoring unknown key in {self.config_service.config_path.name}: {key}")
        return config

    def get_transport(self, config: DeploymentConfig) -> RemoteTransport:
        return SSHTransport(config, self.logger)

    def get_manager(self, config: DeploymentConfig) -> DeploymentManager:
        return DeploymentManager(config, self.get_transport(config), self.logger)

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skipped in verbose mode)."""
        if not self.verbose:
            show_header(
                title=title,
                subtitle=subtitle,
                details=details,
                console=self.console,
            )

    def print_success(self, message: str) -> None:
        self.console.print(f"[green]✓ {message}[/green]")

    def print_error(self, message: str) -> None:
        self.console.print(f"[red]✗ {message}[/red]")

    def print_warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠ {message}[/yellow]")

    def print_dim(self, message: str) -> None:
        self.console.print(f"[dim]{message}[/dim]")

    def confirm(self, question: str, default: bool = False) -> bool:
        """
        Ask for user confirmation.

        Args:
            question: Question to ask
            default: Default answer

        Returns:
            True if confirmed
        """
        default_str = "y" if default else "n"
        self.console.print(
            f"\n[yellow]⚠[/yellow]  {question} [bold bright_white]\\[y/n][/bold bright_white] [dim]({default_str})[/dim]: ",
            end="",
        )
        try:
            answer = input().strip().lower()
        except EOFError:
            answer = ""

        if not answer:
            return default

        return answer in ["y", "yes"]

    def show_log_location(self) -> None:
        if self.logger and self.logger.log_path and not self.verbose:
            self.console.print(f"\n[dim]Logs saved to:[/dim] {self.logger.log_path}\n")

    @abstractmethod
    def execute(self) -> Optional[OperationResult]:
        """
        Execute command logic.

        Must be implemented by subclasses. A returned result that is not a
        success ends the process with exit code 1.
        """
        pass

    def _abort(self, headline: str, log_message: str, context: Optional[str] = None) -> None:
        self.console.print(f"\n[bold red]✗ {headline}[/bold red]")
        if context:
            self.console.print(f"  [color(208)]{context}[/color(208)]")
        if self.logger:
            self.logger.log(log_message, "ERROR")
        self.show_log_location()
        raise SystemExit(1)

    def run(self) -> None:
        """
        Run execute() and turn its outcome into a process exit.

        0 on success, 1 on a failed or cancelled result or a known error,
        130 on Ctrl-C.
        """
        try:
            result = self.execute()
            if result is not None and not result.is_success:
                raise SystemExit(result.exit_code)
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            self.show_log_location()
            raise SystemExit(130)
        except SystemExit:
            raise
        except SiteDeployError as e:
            self._abort(e.message, e.format_message(), context=e.context)
        except PermissionError as e:
            self._abort(f"Permission denied: {e}", f"Permission error: {e}")
        except ValueError as e:
            self._abort(f"Invalid value: {e}", f"Value error: {e}")
        finally:
            if self.logger:
                self.logger.close()
