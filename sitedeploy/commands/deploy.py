"""sitedeploy - Deploy command"""

from typing import Optional

import click

from sitedeploy.base import BaseCommand
from sitedeploy.constants import ROLLBACK_COMMAND
from sitedeploy.models.results import OperationResult


class DeployCommand(BaseCommand):
    """Back up the remote site, then mirror public/ onto it."""

    def __init__(
        self,
        root: Optional[str] = None,
        dry_run: bool = False,
        assume_yes: bool = False,
        verbose: bool = False,
    ):
        super().__init__(root, verbose=verbose)
        self.dry_run = dry_run
        self.assume_yes = assume_yes

    def execute(self) -> OperationResult:
        """Execute deploy command."""
        config = self.load_config()

        self.show_header(
            title="Dry Run" if self.dry_run else "Deploy Site",
            subtitle="rsync --dry-run, no backup, no remote changes" if self.dry_run else None,
            details={
                "Target": config.target if config.is_configured else "not configured",
                "Source": str(config.local_path),
            },
        )

        logger = self.init_logger("deploy-dry-run" if self.dry_run else "deploy")
        manager = self.get_manager(config)

        confirm = None if self.assume_yes else self.confirm
        result = manager.deploy(dry_run=self.dry_run, confirm=confirm)

        if result.is_cancelled:
            self.console.print("\n[yellow]⏹️  Deployment cancelled[/yellow]")
            return result

        if result.is_failure:
            self.console.print()
            self.print_error("Deployment failed")
            self.show_log_location()
            return result

        if self.dry_run:
            self.console.print("\n[color(248)]Dry run complete. No remote files were changed.[/color(248)]")
        else:
            self.console.print("\n[color(248)]Deployment complete.[/color(248)]")
            self.console.print(f"\n[white]Backup:[/white] {result.data['backup']}")
            self.console.print(f"[white]Site should be live at:[/white] http://{config.host}")
            self.console.print(f"[dim]If something went wrong: {ROLLBACK_COMMAND}[/dim]")

        logger.success(result.message or "Done")
        self.show_log_location()
        return result


@click.command(name="deploy")
@click.option("--dry-run", is_flag=True, help="Simulate the sync; no backup, no remote changes")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Skip confirmation")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.pass_obj
def deploy(obj, dry_run, assume_yes, verbose):
    """
    Deploy public/ to the configured server

    \b
    Examples:
      sitedeploy deploy              # Backup, then sync
      sitedeploy deploy --dry-run    # Show what rsync would change
      sitedeploy deploy -y           # No confirmation prompt

    \b
    Steps:
    - Test the SSH connection
    - Copy the live site to a timestamped backup
    - Delete backups beyond max_backups
    - rsync public/ to the server (remote-only files are deleted)
    """
    obj = obj or {}
    cmd = DeployCommand(
        obj.get("root"),
        dry_run=dry_run or obj.get("dry_run", False),
        assume_yes=assume_yes or obj.get("assume_yes", False),
        verbose=verbose or obj.get("verbose", False),
    )
    cmd.run()
