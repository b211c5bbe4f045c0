"""Remote transport: the only way sitedeploy touches the remote host."""

import shlex
import subprocess
import time
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from sitedeploy.constants import (
    RSYNC_BASE_FLAGS,
    ROLLBACK_OLD_SUFFIX,
    ROLLBACK_TMP_SUFFIX,
)
from sitedeploy.logger import DeployLogger, run_with_progress
from sitedeploy.models.config import DeploymentConfig
from sitedeploy.models.results import RemoteResult

# Exit status of a shell that cannot find the command
COMMAND_NOT_FOUND = 127


class RemoteTransport(ABC):
    """
    Narrow interface over the remote host.

    Every method blocks until the underlying command exits and reports the
    outcome through a RemoteResult; failures are never raised.
    """

    @abstractmethod
    def run(self, command: str) -> RemoteResult:
        """Run a shell command on the remote host."""

    @abstractmethod
    def make_dirs(self, path: str) -> RemoteResult:
        """Create a remote directory and its parents (idempotent)."""

    @abstractmethod
    def copy_tree(self, src: str, dst: str) -> RemoteResult:
        """Recursively copy a remote directory."""

    @abstractmethod
    def remove_tree(self, path: str) -> RemoteResult:
        """Recursively delete a remote path."""

    @abstractmethod
    def list_entries(self, path: str) -> RemoteResult:
        """List entries of a remote directory, newest modification first."""

    @abstractmethod
    def restore_tree(self, src: str, dst: str) -> RemoteResult:
        """Replace dst with a copy of src without leaving dst missing if the copy fails."""

    @abstractmethod
    def sync(
        self,
        local_path: str,
        remote_path: str,
        exclude_patterns: Sequence[str],
        dry_run: bool = False,
    ) -> RemoteResult:
        """Mirror a local directory onto a remote directory."""


def build_ssh_args(config: DeploymentConfig) -> list[str]:
    """ssh invocation prefix (everything up to the remote command)."""
    return [
        "ssh",
        "-i",
        str(config.key_path_expanded),
        "-p",
        str(config.port),
        "-o",
        "BatchMode=yes",
        config.connection_string,
    ]


def build_rsync_args(
    config: DeploymentConfig,
    local_path: str,
    remote_path: str,
    exclude_patterns: Sequence[str],
    dry_run: bool = False,
) -> list[str]:
    """
    Build the rsync command that mirrors local_path onto remote_path.

    Trailing slashes make rsync copy directory contents rather than the
    directory itself; --delete removes remote files that no longer exist
    locally.
    """
    args = ["rsync", *RSYNC_BASE_FLAGS]
    if dry_run:
        args.append("--dry-run")
    for pattern in exclude_patterns:
        args.extend(["--exclude", pattern])
    remote_shell = f"ssh -i {shlex.quote(str(config.key_path_expanded))} -p {config.port} -o BatchMode=yes"
    args.extend(
        [
            "-e",
            remote_shell,
            f"{str(local_path).rstrip('/')}/",
            f"{config.connection_string}:{remote_path.rstrip('/')}/",
        ]
    )
    return args


def build_restore_command(src: str, dst: str) -> str:
    """
    Shell command that swaps a fresh copy of src into dst.

    The copy goes to a temporary sibling first, so a failing copy leaves the
    live tree untouched.
    """
    tmp = shlex.quote(f"{dst}{ROLLBACK_TMP_SUFFIX}")
    old = shlex.quote(f"{dst}{ROLLBACK_OLD_SUFFIX}")
    q_src = shlex.quote(src)
    q_dst = shlex.quote(dst)
    return (
        f"rm -rf {tmp} {old}"
        f" && cp -r {q_src} {tmp}"
        f" && if [ -e {q_dst} ]; then mv {q_dst} {old}; fi"
        f" && mv {tmp} {q_dst}"
        f" && rm -rf {old}"
    )


class SSHTransport(RemoteTransport):
    """RemoteTransport over ssh and rsync subprocesses."""

    def __init__(self, config: DeploymentConfig, logger: Optional[DeployLogger] = None):
        """
        Initialize SSH transport.

        Args:
            config: Deployment configuration (host, user, port, key)
            logger: Optional logger; every command and its output are recorded
        """
        self.config = config
        self.logger = logger

    def _execute(self, args: list[str], description: str = "") -> RemoteResult:
        command = shlex.join(args)
        start_time = time.time()

        try:
            if self.logger and description:
                returncode, stdout, stderr, duration = run_with_progress(
                    self.logger, args, description
                )
                return RemoteResult(returncode, stdout, stderr, command, duration)

            if self.logger:
                self.logger.log_command(command)
            result = subprocess.run(args, capture_output=True, text=True)
        except FileNotFoundError as e:
            return RemoteResult(
                returncode=COMMAND_NOT_FOUND,
                stderr=f"{args[0]} not found: {e}",
                command=command,
                duration_seconds=time.time() - start_time,
            )

        if self.logger:
            self.logger.log_output(result.stdout, "stdout")
            self.logger.log_output(result.stderr, "stderr")

        return RemoteResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            command=command,
            duration_seconds=time.time() - start_time,
        )

    def run(self, command: str) -> RemoteResult:
        return self._execute(build_ssh_args(self.config) + [command])

    def make_dirs(self, path: str) -> RemoteResult:
        return self.run(f"mkdir -p {shlex.quote(path)}")

    def copy_tree(self, src: str, dst: str) -> RemoteResult:
        return self._execute(
            build_ssh_args(self.config) + [f"cp -r {shlex.quote(src)} {shlex.quote(dst)}"],
            description="Copying remote site",
        )

    def remove_tree(self, path: str) -> RemoteResult:
        return self.run(f"rm -rf {shlex.quote(path)}")

    def list_entries(self, path: str) -> RemoteResult:
        # C locale keeps the "No such file or directory" message parseable
        return self.run(f"LC_ALL=C ls -1t {shlex.quote(path)}")

    def restore_tree(self, src: str, dst: str) -> RemoteResult:
        return self._execute(
            build_ssh_args(self.config) + [build_restore_command(src, dst)],
            description="Restoring backup",
        )

    def sync(
        self,
        local_path: str,
        remote_path: str,
        exclude_patterns: Sequence[str],
        dry_run: bool = False,
    ) -> RemoteResult:
        args = build_rsync_args(
            self.config, local_path, remote_path, exclude_patterns, dry_run
        )
        description = "Simulating rsync" if dry_run else "Syncing files"
        return self._execute(args, description=description)
