"""sitedeploy - Rollback command"""

from typing import Optional

import click

from sitedeploy.base import BaseCommand
from sitedeploy.models.results import OperationResult


class RollbackCommand(BaseCommand):
    """Replace the live remote site with a previous backup."""

    def __init__(
        self,
        root: Optional[str] = None,
        backup_name: Optional[str] = None,
        verbose: bool = False,
    ):
        super().__init__(root, verbose=verbose)
        self.backup_name = backup_name

    def execute(self) -> OperationResult:
        """Execute rollback command."""
        config = self.load_config()

        self.show_header(
            title="Rollback",
            details={
                "Target": config.target,
                "Backup": self.backup_name or "latest",
            },
        )

        self.init_logger("rollback")
        manager = self.get_manager(config)
        result = manager.rollback(self.backup_name)

        if result.is_failure:
            self.console.print()
            self.print_error("Rollback failed")
            self.show_log_location()
            return result

        self.console.print(f"\n[color(248)]Rolled back to[/color(248)] [cyan]{result.data['backup']}[/cyan]")
        self.show_log_location()
        return result


@click.command(name="rollback")
@click.argument("backup_name", required=False)
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.pass_obj
def rollback(obj, backup_name, verbose):
    """
    Restore the newest backup, or BACKUP_NAME

    \b
    Examples:
      sitedeploy rollback                                    # Newest backup
      sitedeploy rollback backup-2024-01-01T00-00-00-000Z    # Specific backup

    \b
    The backup is copied next to the live site and swapped in, so a failed
    copy leaves the live site as it was.
    """
    obj = obj or {}
    cmd = RollbackCommand(
        obj.get("root"),
        backup_name=backup_name,
        verbose=verbose or obj.get("verbose", False),
    )
    cmd.run()
