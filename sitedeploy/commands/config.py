"""sitedeploy - Show effective configuration"""

import click
from rich.table import Table

from sitedeploy.base import BaseCommand


class ConfigShowCommand(BaseCommand):
    """Print the merged configuration and where it came from."""

    def execute(self) -> None:
        config = self.load_config()
        config_path = self.config_service.config_path

        self.show_header(
            title="Configuration",
            details={
                "Config file": f"{config_path} ({'found' if config_path.exists() else 'not found'})",
            },
        )

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Key", style="white")
        table.add_column("Value", style="cyan")
        for key, value in config.to_dict().items():
            if isinstance(value, list):
                value = ", ".join(value)
            table.add_row(key, str(value) if value != "" else "[dim](not set)[/dim]")
        table.add_row("local_path", f"{config.local_path} [dim](derived)[/dim]")

        self.console.print(table)


@click.command(name="config:show")
@click.pass_obj
def config_show(obj):
    """
    Show the effective deployment configuration

    \b
    Values come from built-in defaults, then DEPLOY_* environment variables
    (and .env), then deploy-config.json.
    """
    obj = obj or {}
    ConfigShowCommand(obj.get("root")).run()
