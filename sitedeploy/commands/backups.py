"""sitedeploy - Backup listing"""

import click
from rich.table import Table

from sitedeploy.base import BaseCommand
from sitedeploy.exceptions import ConfigurationError
from sitedeploy.constants import ERROR_NOT_CONFIGURED, HINT_CONFIGURE
from sitedeploy.models.results import OperationResult


class BackupsListCommand(BaseCommand):
    """List remote backups, newest first."""

    def execute(self) -> OperationResult:
        config = self.load_config()
        if not config.is_configured:
            raise ConfigurationError(ERROR_NOT_CONFIGURED, context=HINT_CONFIGURE)

        self.show_header(title="Backups", details={"Backup path": f"{config.connection_string}:{config.backup_path}"})

        self.init_logger("backups-list")
        result = self.get_manager(config).list_backups()
        if result.is_failure:
            return result

        backups = result.data["backups"]
        if not backups:
            self.print_dim("No backups yet. One is created before every deploy.")
            return result

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Backup", style="cyan")
        table.add_column("", style="green")
        for index, name in enumerate(backups, start=1):
            table.add_row(str(index), name, "latest" if index == 1 else "")

        self.console.print(table)
        self.print_dim(f"Keeping {config.max_backups} most recent")
        return result


@click.command(name="backups:list")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.pass_obj
def backups_list(obj, verbose):
    """
    List remote backups, newest first

    \b
    Examples:
      sitedeploy backups:list
    """
    obj = obj or {}
    BackupsListCommand(obj.get("root"), verbose=verbose or obj.get("verbose", False)).run()
