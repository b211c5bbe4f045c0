#!/usr/bin/env python3
"""sitedeploy - Main entry point"""

import functools
import os
import sys

from rich.console import Console

# Rich-Click: colored CLI help
import rich_click as click

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.USE_MARKDOWN = False
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.MAX_WIDTH = 100

# COMMANDS / OPTIONS
click.rich_click.STYLE_COMMAND = "bold cyan"
click.rich_click.STYLE_OPTION = "bold magenta"
click.rich_click.STYLE_SWITCH = "bold green"
click.rich_click.STYLE_ARGUMENT = "bold yellow"

# HEADERS
click.rich_click.STYLE_HEADER_TEXT = "bold cyan"
click.rich_click.STYLE_USAGE = "bold yellow"
click.rich_click.STYLE_USAGE_COMMAND = "bold cyan"

# METAVARS / DEFAULTS
click.rich_click.STYLE_METAVAR = "bold yellow"
click.rich_click.STYLE_OPTION_DEFAULT = "dim cyan"
click.rich_click.STYLE_EPILOG_TEXT = "dim"

# PANEL BORDERS
click.rich_click.STYLE_OPTIONS_PANEL_BORDER = "cyan"
click.rich_click.STYLE_COMMANDS_PANEL_BORDER = "cyan"

from sitedeploy import __version__
from sitedeploy.commands.backups import backups_list
from sitedeploy.commands.config import config_show
from sitedeploy.commands.configure import ConfigureCommand, configure
from sitedeploy.commands.deploy import DeployCommand, deploy
from sitedeploy.commands.rollback import RollbackCommand, rollback

console = Console()

# --rollback given without a backup name
LATEST_BACKUP = "__latest__"


def handle_cli_errors(func):
    """Decorator to handle CLI errors gracefully."""
    from click.exceptions import ClickException

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ClickException as e:
            e.show()
            sys.exit(e.exit_code)
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


@click.group(
    cls=click.RichGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--dry-run", is_flag=True, help="Simulate the deploy; no backup, no remote changes")
@click.option(
    "--rollback",
    "rollback_to",
    is_flag=False,
    flag_value=LATEST_BACKUP,
    default=None,
    metavar="[BACKUP_NAME]",
    help="Restore the newest backup, or the named one",
)
@click.option("--config", "configure_flag", is_flag=True, help="Configure deployment settings interactively")
@click.option(
    "--root",
    type=click.Path(file_okay=False),
    envvar="SITEDEPLOY_ROOT",
    help="Site project root (holds public/ and deploy-config.json; default: current directory)",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Skip the confirmation prompt")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, dry_run, rollback_to, configure_flag, root, assume_yes, verbose):
    """
    sitedeploy - Deploy a static site over rsync, with backups and rollback.

    \b
    Usage:
      sitedeploy                  # Deploy public/ (backup first)
      sitedeploy --dry-run        # Simulate deployment without changes
      sitedeploy --rollback       # Restore the newest backup
      sitedeploy --rollback NAME  # Restore a specific backup
      sitedeploy --config         # Configure deployment settings

    \b
    First time? Run: sitedeploy --config
    Or add to .env:
      DEPLOY_HOST=your-server-ip
      DEPLOY_USER=root
      DEPLOY_PORT=22
      DEPLOY_KEY_PATH=~/.ssh/id_rsa
      DEPLOY_REMOTE_PATH=/var/www/nomasdesinformacion
      DEPLOY_BACKUP_PATH=/var/www/nomasdesinformacion-backups
    """
    ctx.obj = {"root": root, "verbose": verbose, "assume_yes": assume_yes, "dry_run": dry_run}

    if ctx.invoked_subcommand is not None:
        if configure_flag or rollback_to is not None:
            raise click.UsageError(
                f"--config and --rollback cannot be combined with the '{ctx.invoked_subcommand}' command"
            )
        if dry_run and ctx.invoked_subcommand != "deploy":
            raise click.UsageError(f"--dry-run only applies to deploy, not '{ctx.invoked_subcommand}'")
        return

    if configure_flag:
        ConfigureCommand(root, verbose=verbose).run()
    elif rollback_to is not None:
        backup_name = None if rollback_to == LATEST_BACKUP else rollback_to
        RollbackCommand(root, backup_name=backup_name, verbose=verbose).run()
    else:
        DeployCommand(root, dry_run=dry_run, assume_yes=assume_yes, verbose=verbose).run()


cli.add_command(deploy)
cli.add_command(rollback)
cli.add_command(configure)
cli.add_command(backups_list)
cli.add_command(config_show)


@handle_cli_errors
def main():
    """Main entry point with error handling."""
    cli()


if __name__ == "__main__":
    main()
