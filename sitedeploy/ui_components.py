"""sitedeploy - command header shown at the top of every command"""

from typing import Optional

from rich.console import Console

HEADER_PREFIX = " [bold color(214)]sitedeploy[/bold color(214)] [dim]›[/dim]"


def show_header(
    title: str,
    subtitle: Optional[str] = None,
    details: Optional[dict] = None,
    console: Optional[Console] = None,
):
    """
    Print the command title, an optional subtitle and one line per detail.

    Example:
        show_header("Deploy Site", details={"Target": "root@example.com:/var/www/site"})
    """
    console = console or Console()

    console.print(f"{HEADER_PREFIX} [bold white]{title}[/bold white]")
    if subtitle:
        console.print(f"{HEADER_PREFIX} [dim]{subtitle}[/dim]")
    for key, value in (details or {}).items():
        console.print(f"{HEADER_PREFIX} {key}: [cyan]{value}[/cyan]")
    console.print()
