"""
Run logging for sitedeploy

Each deploy, rollback or configure run gets its own log file under
logs/<date>/<time>_<operation>.log. The file receives every step, command and
captured output line; the console only gets a short narrative unless
--verbose is on.
"""

import re
import shlex
import subprocess
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, TextIO

from rich.console import Console
from rich.live import Live
from rich.padding import Padding
from rich.spinner import Spinner
from rich.text import Text

from sitedeploy.constants import LOG_DATE_FORMAT, LOG_TIME_FORMAT

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")

RULE = "=" * 80
ERROR_RULE = "!" * 80

# Console style per level, used in verbose mode
LEVEL_STYLES = {
    "ERROR": "red",
    "WARNING": "yellow",
    "DEBUG": "dim",
}


class DeployLogger:
    """
    Per-run logger writing to a log file and a rich console.

    Services only call step/log/success/warning/hint/log_error/log_command/
    log_output, so anything with those methods can stand in for it.
    """

    def __init__(
        self,
        operation: str,
        logs_dir: Path,
        verbose: bool = False,
        console: Optional[Console] = None,
    ):
        """
        Args:
            operation: Run name used in the log file name (e.g. 'deploy')
            logs_dir: Root logs directory; a dated subdirectory is created
            verbose: Echo every log line and command output to the console
            console: Rich console to print to
        """
        self.operation = operation
        self.verbose = verbose
        self.console = console if console is not None else Console()
        self.has_errors = False
        self._in_step = False

        started = datetime.now()
        run_dir = Path(logs_dir) / started.strftime(LOG_DATE_FORMAT)
        run_dir.mkdir(parents=True, exist_ok=True)
        self.log_path: Path = run_dir / f"{started.strftime(LOG_TIME_FORMAT)}_{operation}.log"

        # Line buffered so `tail -f` follows along
        self.log_file: Optional[TextIO] = open(self.log_path, "a", buffering=1, encoding="utf-8")
        self._write(
            f"\n{RULE}\nsitedeploy Log\n{RULE}\n"
            f"Operation: {operation}\nStarted: {started.isoformat()}\n{RULE}\n\n"
        )

    def _write(self, text: str) -> None:
        if self.log_file:
            self.log_file.write(text)
            self.log_file.flush()

    def log(self, message: str, level: str = "INFO"):
        """Append a timestamped line to the log file."""
        self._write(f"[{datetime.now():%H:%M:%S}] [{level}] {message}\n")

        if self.verbose:
            style = LEVEL_STYLES.get(level)
            self.console.print(f"[{style}]{message}[/{style}]" if style else message)

    def log_command(self, command: str):
        self.log(f"Executing: {command}", "DEBUG")

    def log_output(self, output: str, stream: str = "stdout"):
        """Record captured command output, one prefixed line per output line."""
        if not output:
            return

        self._write("".join(f"  [{stream}] {line}\n" for line in ANSI_ESCAPE.sub("", output).splitlines()))

        if self.verbose:
            self.console.print(output, markup=False, highlight=False)

    def log_error(self, error: str, context: Optional[str] = None):
        """Record a failure; the run footer will read FAILED."""
        self.has_errors = True

        block = [ERROR_RULE, "ERROR OCCURRED", ERROR_RULE, error]
        if context:
            block += ["", f"Context: {context}"]
        self._write("\n" + "\n".join(block) + f"\n{ERROR_RULE}\n\n")

        if not self.verbose:
            self.console.print()
        self.console.print(f"[bold red]✗ {error}[/bold red]")
        if context:
            self.console.print(f"  [color(208)]{context}[/color(208)]")

    def step(self, step_name: str):
        if self._in_step and not self.verbose:
            self.console.print()
        self._in_step = True

        self.log(f"Step: {step_name}")
        if not self.verbose:
            self.console.print(f"[color(214)]▶[/color(214)] [white]{step_name}[/white]")

    def success(self, message: str):
        self.log(message)
        if not self.verbose:
            self.console.print(f"  [dim]✓ {message}[/dim]")

    def warning(self, message: str):
        self.log(message, "WARNING")
        if not self.verbose:
            self.console.print(f"  [yellow]⚠[/yellow] [dim]{message}[/dim]")

    def hint(self, message: str):
        """Suggest a next action. Visible in both console modes."""
        self.log(message)
        if not self.verbose:
            self.console.print(f"  [dim]{message}[/dim]")

    def close(self):
        if not self.log_file:
            return
        status = "FAILED" if self.has_errors else "SUCCESS"
        self._write(f"\n{RULE}\nCompleted: {datetime.now().isoformat()}\nStatus: {status}\n{RULE}\n")
        self.log_file.close()
        self.log_file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, _exc_tb):
        if exc_type is not None and exc_type not in (SystemExit, KeyboardInterrupt):
            self.log_error(str(exc_val) or "Operation failed", context=exc_type.__name__)
        self.close()
        return False


def _stream_command(logger: DeployLogger, args: Sequence[str]) -> tuple[int, str, str]:
    # stdout is echoed line by line, stderr is read once the process exits
    process = subprocess.Popen(
        list(args),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        bufsize=1,
    )

    stdout_lines = []
    for line in process.stdout:
        stdout_lines.append(line.rstrip())
        logger.log_output(stdout_lines[-1], "stdout")

    process.wait()
    stderr = process.stderr.read()
    logger.log_output(stderr, "stderr")
    return process.returncode, "\n".join(stdout_lines), stderr


def _spin_command(logger: DeployLogger, args: Sequence[str], description: str) -> tuple[int, str, str]:
    spinner = Padding(Spinner("dots", text=f"[cyan]{description}...[/cyan]"), (0, 0, 0, 2))

    with Live(spinner, console=logger.console, refresh_per_second=10) as live:
        result = subprocess.run(list(args), capture_output=True, text=True)
        logger.log_output(result.stdout, "stdout")
        logger.log_output(result.stderr, "stderr")

        ok = result.returncode == 0
        outcome = Text("  ✓ " if ok else "  ✗ ", style="dim" if ok else "red")
        outcome.append(description, style="dim")
        live.update(outcome)

    return result.returncode, result.stdout, result.stderr


def run_with_progress(
    logger: DeployLogger, args: Sequence[str], description: str
) -> tuple[int, str, str, float]:
    """
    Run a local command (ssh, rsync) with a console progress indicator.

    In verbose mode the output is streamed instead of hidden behind a spinner.

    Returns:
        (return_code, stdout, stderr, duration_seconds)
    """
    logger.log_command(shlex.join(args))
    started = time.monotonic()

    if logger.verbose:
        returncode, stdout, stderr = _stream_command(logger, args)
    else:
        returncode, stdout, stderr = _spin_command(logger, args, description)

    return returncode, stdout, stderr, time.monotonic() - started
