from conftest import BACKUP_PATH, MUTATING_OPS, REMOTE_PATH
from sitedeploy.models.results import ErrorKind, ResultStatus


def _live(transport):
    return transport.local(REMOTE_PATH)


def _snapshot_with_sentinel(manager, transport, content):
    (_live(transport) / "sentinel.txt").write_text(content)
    return manager.create_backup().data["backup"]


def test_rollback_without_backups_fails_without_mutation(transport, logger, make_manager, make_config):
    result = make_manager(make_config()).rollback()

    assert result.status == ResultStatus.FAILURE
    assert result.error_kind == ErrorKind.ROLLBACK
    assert result.exit_code == 1
    assert any("No backups available" in m for m in logger.messages("error"))
    assert not MUTATING_OPS & set(transport.ops())
    assert (_live(transport) / "index.html").exists()


def test_rollback_defaults_to_newest(transport, make_manager, make_config):
    manager = make_manager(make_config())
    _snapshot_with_sentinel(manager, transport, "first")
    newest = _snapshot_with_sentinel(manager, transport, "second")
    (_live(transport) / "sentinel.txt").write_text("broken deploy")

    result = manager.rollback()

    assert result.is_success
    assert result.data["backup"] == newest
    assert (_live(transport) / "sentinel.txt").read_text() == "second"


def test_rollback_to_named_backup_restores_its_contents(transport, make_manager, make_config):
    manager = make_manager(make_config())
    oldest = _snapshot_with_sentinel(manager, transport, "first")
    _snapshot_with_sentinel(manager, transport, "second")
    (_live(transport) / "extra.html").write_text("added after the backup")

    result = manager.rollback(oldest)

    assert result.is_success
    assert oldest == "backup-2024-01-01T00-00-00-000Z"
    assert (_live(transport) / "sentinel.txt").read_text() == "first"
    assert not (_live(transport) / "extra.html").exists()
    # the backup itself is untouched
    snapshot = transport.local(f"{BACKUP_PATH}/{oldest}") / "sentinel.txt"
    assert snapshot.read_text() == "first"


def test_rollback_to_unknown_name_fails_without_mutation(transport, logger, make_manager, make_config):
    manager = make_manager(make_config())
    existing = _snapshot_with_sentinel(manager, transport, "first")
    (_live(transport) / "sentinel.txt").write_text("current")
    calls_before = len(transport.calls)

    result = manager.rollback("backup-2024-01-01T00-00-00-999Z")

    assert result.is_failure
    assert result.error_kind == ErrorKind.ROLLBACK
    assert result.data["available_backups"] == [existing]
    assert [call[0] for call in transport.calls[calls_before:]] == ["list_entries"]
    assert (_live(transport) / "sentinel.txt").read_text() == "current"
    errors = [extra["context"] for kind, _, extra in logger.events if kind == "error"]
    assert any(existing in (context or "") for context in errors)


def test_failed_restore_leaves_live_site_in_place(transport, make_manager, make_config):
    manager = make_manager(make_config())
    _snapshot_with_sentinel(manager, transport, "first")
    (_live(transport) / "sentinel.txt").write_text("current")
    transport.failures["restore_tree"] = "cp: No space left on device"

    result = manager.rollback()

    assert result.is_failure
    assert result.error_kind == ErrorKind.ROLLBACK
    assert (_live(transport) / "sentinel.txt").read_text() == "current"


def test_rollback_listing_failure_is_reported(transport, make_manager, make_config):
    transport.failures["list_entries"] = "ls: Permission denied"
    result = make_manager(make_config()).rollback()

    assert result.is_failure
    assert result.error_kind == ErrorKind.ROLLBACK
    assert "restore_tree" not in transport.ops()


def test_rollback_requires_configured_host(transport, make_manager, make_config):
    result = make_manager(make_config(host="")).rollback()

    assert result.error_kind == ErrorKind.CONFIG
    assert transport.calls == []
