import io
import subprocess

import pytest
from rich.console import Console

from sitedeploy.logger import DeployLogger
from sitedeploy.services.transport import (
    COMMAND_NOT_FOUND,
    SSHTransport,
    build_restore_command,
    build_rsync_args,
    build_ssh_args,
)


@pytest.fixture
def config(make_config):
    return make_config(key_path="/keys/id_rsa", port=2222)


@pytest.fixture
def recorded(monkeypatch):
    calls = []
    responses = {}

    def fake_run(args, **kwargs):
        calls.append(args)
        returncode, stdout, stderr = responses.get("next", (0, "", ""))
        return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr=stderr)

    monkeypatch.setattr(subprocess, "run", fake_run)
    return calls, responses


SSH_PREFIX = ["ssh", "-i", "/keys/id_rsa", "-p", "2222", "-o", "BatchMode=yes", "deploy@example.com"]


def test_ssh_args(config):
    assert build_ssh_args(config) == SSH_PREFIX


def test_run_passes_remote_command(config, recorded):
    calls, _ = recorded
    result = SSHTransport(config).run('echo "Connection successful"')

    assert result.is_success
    assert calls == [SSH_PREFIX + ['echo "Connection successful"']]


def test_list_entries_parses_lines(config, recorded):
    calls, responses = recorded
    responses["next"] = (0, "backup-b\n\nbackup-a\n", "")

    result = SSHTransport(config).list_entries("/srv/site-backups")

    assert calls[0][-1] == "LC_ALL=C ls -1t /srv/site-backups"
    assert result.lines == ["backup-b", "backup-a"]


def test_remote_paths_are_quoted(config, recorded):
    calls, _ = recorded
    transport = SSHTransport(config)

    transport.make_dirs("/srv/my backups")
    transport.remove_tree("/srv/my backups/backup-x")

    assert calls[0][-1] == "mkdir -p '/srv/my backups'"
    assert calls[1][-1] == "rm -rf '/srv/my backups/backup-x'"


def test_failure_keeps_stderr(config, recorded):
    _, responses = recorded
    responses["next"] = (1, "", "cp: cannot stat '/srv/site'\n")

    result = SSHTransport(config).copy_tree("/srv/site", "/srv/site-backups/backup-x")

    assert result.is_failure
    assert result.error_output == "cp: cannot stat '/srv/site'"


def test_missing_binary_becomes_result(config, monkeypatch):
    def missing(args, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", args[0])

    monkeypatch.setattr(subprocess, "run", missing)

    result = SSHTransport(config).run("echo hi")

    assert result.returncode == COMMAND_NOT_FOUND
    assert "ssh not found" in result.stderr


def test_rsync_args(config):
    args = build_rsync_args(config, "/home/me/site/public", "/srv/site", ["*.log", ".git"])

    assert args == [
        "rsync",
        "-avz",
        "--delete",
        "--exclude",
        "*.log",
        "--exclude",
        ".git",
        "-e",
        "ssh -i /keys/id_rsa -p 2222 -o BatchMode=yes",
        "/home/me/site/public/",
        "deploy@example.com:/srv/site/",
    ]


def test_rsync_dry_run_flag(config):
    args = build_rsync_args(config, "/p/", "/srv/site/", [], dry_run=True)

    assert "--dry-run" in args
    assert args[-2:] == ["/p/", "deploy@example.com:/srv/site/"]


def test_restore_command_copies_before_swapping():
    command = build_restore_command("/srv/site-backups/backup-x", "/srv/site")

    copy_at = command.index("cp -r /srv/site-backups/backup-x /srv/site.rollback-tmp")
    move_live_at = command.index("mv /srv/site /srv/site.rollback-old")
    move_new_at = command.index("mv /srv/site.rollback-tmp /srv/site")
    assert copy_at < move_live_at < move_new_at
    assert command.endswith("rm -rf /srv/site.rollback-old")
    assert "rm -rf /srv/site " not in command


def test_sync_with_logger_records_command_and_output(config, recorded, tmp_path):
    calls, responses = recorded
    responses["next"] = (0, "sending incremental file list\nindex.html\n", "")
    output = io.StringIO()
    logger = DeployLogger("deploy", tmp_path / "logs", console=Console(file=output))

    result = SSHTransport(config, logger).sync(
        "/p", "/srv/site", ["*.log"], dry_run=False
    )
    logger.close()

    assert result.is_success
    assert calls[0][0] == "rsync"
    log_text = logger.log_path.read_text()
    assert "Executing: rsync -avz --delete --exclude '*.log'" in log_text
    assert "[stdout] index.html" in log_text
