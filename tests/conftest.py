import fnmatch
import os
import shutil
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from sitedeploy.constants import ENV_VARS, ROLLBACK_OLD_SUFFIX, ROLLBACK_TMP_SUFFIX
from sitedeploy.models.config import DeploymentConfig
from sitedeploy.models.results import RemoteResult
from sitedeploy.services.backup_service import BackupService
from sitedeploy.services.deploy_service import DeploymentManager
from sitedeploy.services.transport import RemoteTransport

REMOTE_PATH = "/srv/site"
BACKUP_PATH = "/srv/site-backups"

MUTATING_OPS = {"make_dirs", "copy_tree", "remove_tree", "restore_tree"}


class StubLogger:
    def __init__(self) -> None:
        self.events = []

    def _record(self, kind, message, **extra):
        self.events.append((kind, message, extra))

    def step(self, message):
        self._record("step", message)

    def log(self, message, level="INFO"):
        self._record("log", message, level=level)

    def success(self, message):
        self._record("success", message)

    def warning(self, message):
        self._record("warning", message)

    def hint(self, message):
        self._record("hint", message)

    def log_error(self, message, context=None):
        self._record("error", message, context=context)

    def log_command(self, command):
        self._record("command", command)

    def log_output(self, output, stream="stdout"):
        self._record("output", output, stream=stream)

    def messages(self, kind):
        return [message for k, message, _ in self.events if k == kind]


def _excluded(relative: Path, patterns) -> bool:
    return any(
        fnmatch.fnmatch(part, pattern) for part in relative.parts for pattern in patterns
    )


class FakeTransport(RemoteTransport):
    """
    RemoteTransport backed by a local directory standing in for the remote
    filesystem. Listings are ordered by an internal clock, newest first.
    """

    def __init__(self, remote_root: Path):
        self.remote_root = Path(remote_root)
        self.remote_root.mkdir(parents=True, exist_ok=True)
        self.calls = []
        self.failures = {}
        self.reachable = True
        self._clock = 0
        self._mtimes = {}

    def local(self, path: str) -> Path:
        return self.remote_root / path.lstrip("/")

    def ops(self):
        return [call[0] for call in self.calls]

    def _fail(self, op):
        if op in self.failures:
            return RemoteResult(1, stderr=self.failures[op], command=op)
        return None

    def _touch(self, path: Path):
        self._clock += 1
        self._mtimes[str(path)] = self._clock

    def run(self, command):
        self.calls.append(("run", command))
        if not self.reachable:
            return RemoteResult(255, stderr="ssh: connect to host example.com port 22: Connection refused")
        return self._fail("run") or RemoteResult(0, stdout="Connection successful\n", command=command)

    def make_dirs(self, path):
        self.calls.append(("make_dirs", path))
        failed = self._fail("make_dirs")
        if failed:
            return failed
        self.local(path).mkdir(parents=True, exist_ok=True)
        return RemoteResult(0)

    def copy_tree(self, src, dst):
        self.calls.append(("copy_tree", src, dst))
        failed = self._fail("copy_tree")
        if failed:
            return failed
        source = self.local(src)
        if not source.is_dir():
            return RemoteResult(1, stderr=f"cp: cannot stat '{src}': No such file or directory")
        shutil.copytree(source, self.local(dst))
        self._touch(self.local(dst))
        return RemoteResult(0)

    def remove_tree(self, path):
        self.calls.append(("remove_tree", path))
        failed = self._fail("remove_tree")
        if failed:
            return failed
        shutil.rmtree(self.local(path), ignore_errors=True)
        self._mtimes.pop(str(self.local(path)), None)
        return RemoteResult(0)

    def list_entries(self, path):
        self.calls.append(("list_entries", path))
        failed = self._fail("list_entries")
        if failed:
            return failed
        directory = self.local(path)
        if not directory.is_dir():
            return RemoteResult(
                2, stderr=f"ls: cannot access '{path}': No such file or directory"
            )
        entries = sorted(
            directory.iterdir(),
            key=lambda entry: (self._mtimes.get(str(entry), 0), entry.name),
            reverse=True,
        )
        return RemoteResult(0, stdout="".join(f"{entry.name}\n" for entry in entries))

    def restore_tree(self, src, dst):
        self.calls.append(("restore_tree", src, dst))
        source = self.local(src)
        live = self.local(dst)
        tmp = self.local(dst + ROLLBACK_TMP_SUFFIX)
        old = self.local(dst + ROLLBACK_OLD_SUFFIX)
        failed = self._fail("restore_tree")
        if failed or not source.is_dir():
            return failed or RemoteResult(1, stderr=f"cp: cannot stat '{src}'")
        shutil.copytree(source, tmp)
        if live.exists():
            live.rename(old)
        tmp.rename(live)
        shutil.rmtree(old, ignore_errors=True)
        return RemoteResult(0)

    def sync(self, local_path, remote_path, exclude_patterns, dry_run=False):
        self.calls.append(("sync", local_path, remote_path, tuple(exclude_patterns), dry_run))
        failed = self._fail("sync")
        if failed:
            return failed
        source = Path(local_path)
        target = self.local(remote_path)

        wanted = set()
        for root, _, files in os.walk(source):
            for name in files:
                relative = (Path(root) / name).relative_to(source)
                if not _excluded(relative, exclude_patterns):
                    wanted.add(relative)

        if dry_run:
            return RemoteResult(0, stdout="".join(f"{p}\n" for p in sorted(wanted)))

        target.mkdir(parents=True, exist_ok=True)
        for relative in wanted:
            destination = target / relative
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source / relative, destination)
        for root, _, files in os.walk(target):
            for name in files:
                relative = (Path(root) / name).relative_to(target)
                if relative not in wanted and not _excluded(relative, exclude_patterns):
                    (target / relative).unlink()
        return RemoteResult(0)


class StepClock:
    """Deterministic clock: each call is one second after the previous."""

    def __init__(self, start=datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.current = start - timedelta(seconds=1)

    def __call__(self):
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture(autouse=True)
def clean_deploy_env(monkeypatch):
    for var_name in ENV_VARS.values():
        monkeypatch.delenv(var_name, raising=False)
    monkeypatch.delenv("SITEDEPLOY_ROOT", raising=False)


@pytest.fixture
def logger():
    return StubLogger()


@pytest.fixture
def transport(tmp_path):
    fake = FakeTransport(tmp_path / "remote")
    site = fake.local(REMOTE_PATH)
    site.mkdir(parents=True)
    (site / "index.html").write_text("<h1>live</h1>", encoding="utf-8")
    return fake


@pytest.fixture
def local_site(tmp_path):
    public = tmp_path / "project" / "public"
    public.mkdir(parents=True)
    (public / "index.html").write_text("<h1>new</h1>", encoding="utf-8")
    return public


@pytest.fixture
def make_config(local_site):
    def _make(**overrides):
        values = dict(
            host="example.com",
            user="deploy",
            port=22,
            key_path="~/.ssh/id_rsa",
            remote_path=REMOTE_PATH,
            backup_path=BACKUP_PATH,
            local_path=local_site,
            exclude_patterns=(".git", "node_modules", ".env", "*.log", ".DS_Store"),
            max_backups=5,
            require_confirmation=False,
        )
        values.update(overrides)
        return DeploymentConfig(**values)

    return _make


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def make_manager(transport, logger, clock):
    def _make(config):
        backups = BackupService(transport, logger, clock=clock)
        return DeploymentManager(config, transport, logger, backup_service=backups)

    return _make
