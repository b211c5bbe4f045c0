"""sitedeploy - Interactive configuration"""

from dataclasses import replace
from typing import Optional

import click
from rich.prompt import IntPrompt, Prompt

from sitedeploy.base import BaseCommand
from sitedeploy.models.results import OperationResult


class ConfigureCommand(BaseCommand):
    """Prompt for connection settings, test them and save deploy-config.json."""

    def execute(self) -> OperationResult:
        """Execute configure command."""
        current = self.load_config()

        self.show_header(
            title="Deployment Configuration Setup",
            details={"Config file": str(self.config_service.config_path)},
        )

        host_default = {"default": current.host} if current.host else {}
        config = replace(
            current,
            host=Prompt.ask("Server IP or hostname", console=self.console, **host_default).strip(),
            user=Prompt.ask("SSH user", default=current.user, console=self.console),
            port=IntPrompt.ask("SSH port", default=current.port, console=self.console),
            key_path=Prompt.ask("SSH key path", default=current.key_path, console=self.console),
            remote_path=Prompt.ask("Remote site path", default=current.remote_path, console=self.console).rstrip("/"),
            backup_path=Prompt.ask("Remote backup path", default=current.backup_path, console=self.console).rstrip("/"),
        )

        self.console.print()
        self.init_logger("configure")
        connected = self.get_manager(config).test_connection()

        # Saved either way so the user can fix one field without retyping the rest
        config_path = self.config_service.save(config)
        self.logger.log(f"Configuration saved to: {config_path}")

        if connected.is_success:
            self.print_success(f"Configuration saved to: {config_path}")
            self.console.print("\n[color(248)]Configuration complete and tested.[/color(248)]")
        else:
            self.print_warning(f"Configuration saved to {config_path} but the connection test failed")
            self.print_dim("Please verify your settings and try again.")

        return OperationResult.success(str(config_path), connected=connected.is_success)


@click.command(name="configure")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.pass_obj
def configure(obj, verbose):
    """
    Interactively configure the deployment target

    \b
    Prompts for host, user, port, key and remote paths, tests the SSH
    connection and writes deploy-config.json.
    """
    obj = obj or {}
    ConfigureCommand(obj.get("root"), verbose=verbose or obj.get("verbose", False)).run()
