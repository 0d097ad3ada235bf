"""Unit tests for the per-user context registry and notifiers."""

import logging

from cafestock.core.app_context import AppContextRegistry
from cafestock.services.notifications import LogNotifier, RecordingNotifier, Severity


def test_open_returns_same_context_per_user(staff_user, admin_user):
    registry = AppContextRegistry()

    first = registry.open(staff_user)

    assert registry.open(staff_user) is first
    assert registry.open(admin_user) is not first
    assert len(registry) == 2


def test_builder_shares_context_notifier(staff_user):
    ctx = AppContextRegistry().open(staff_user)
    assert ctx.builder.notifier is ctx.notifier


def test_close_tears_down_state(staff_user, make_item):
    registry = AppContextRegistry()
    ctx = registry.open(staff_user)
    ctx.builder.confirm(make_item(), 2)

    assert registry.close(staff_user.id) is True

    assert len(ctx.builder) == 0
    assert ctx.notifier.items == []
    assert registry.close(staff_user.id) is False


def test_close_all(staff_user, admin_user):
    registry = AppContextRegistry()
    registry.open(staff_user)
    registry.open(admin_user)

    registry.close_all()

    assert len(registry) == 0


def test_recording_notifier_drain():
    notifier = RecordingNotifier(maxlen=2)
    notifier.notify("a", "first")
    notifier.notify("b", "second", Severity.WARNING)
    notifier.notify("c", "third", Severity.ERROR)

    drained = notifier.drain()

    assert [n.title for n in drained] == ["b", "c"]
    assert notifier.items == []


def test_log_notifier_maps_severity_to_level(caplog):
    with caplog.at_level(logging.INFO, logger="cafestock.services.notifications"):
        LogNotifier().notify("Update Failed", "Failed to update inventory.", Severity.ERROR)

    [record] = caplog.records
    assert record.levelno == logging.ERROR
    assert "Failed to update inventory." in record.getMessage()
