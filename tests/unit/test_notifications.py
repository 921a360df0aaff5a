"""Unit tests for the notification anchor."""

from __future__ import annotations

import pytest

from provision_trigger.page.dom import Document, Element
from provision_trigger.page.notifications import (
    AnchorNotFoundError,
    NotificationAnchor,
    NotificationKind,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class TestNotificationAnchor:
    def test_show_sets_current(self, clock: FakeClock):
        anchor = NotificationAnchor(ttl_seconds=3.0, clock=clock)
        anchor.show("Provisioning started")
        assert anchor.current.text == "Provisioning started"
        assert anchor.current.kind == NotificationKind.OK

    def test_notification_fades_after_ttl(self, clock: FakeClock):
        anchor = NotificationAnchor(ttl_seconds=3.0, clock=clock)
        anchor.show("Provisioning started")
        clock.now += 2
        assert anchor.current is not None
        clock.now += 1.5
        assert anchor.current is None

    def test_last_write_wins(self, clock: FakeClock):
        anchor = NotificationAnchor(clock=clock)
        anchor.show("first")
        clock.now += 1
        anchor.show("second", NotificationKind.WARNING)
        assert anchor.current.text == "second"
        assert [n.text for n in anchor.history] == ["first", "second"]

    def test_new_notification_restarts_ttl(self, clock: FakeClock):
        anchor = NotificationAnchor(ttl_seconds=3.0, clock=clock)
        anchor.show("first")
        clock.now += 2
        anchor.show("second")
        clock.now += 2
        assert anchor.current.text == "second"

    def test_empty_anchor(self):
        anchor = NotificationAnchor()
        assert anchor.current is None
        assert anchor.history == []


class TestResolve:
    def test_resolves_well_known_id(self):
        doc = Document(Element("#document", {}, [Element("div", {"id": "notification-bar"})]))
        anchor = NotificationAnchor.resolve(doc)
        assert anchor.element_id == "notification-bar"

    def test_custom_id(self):
        doc = Document(Element("#document", {}, [Element("div", {"id": "status"})]))
        assert NotificationAnchor.resolve(doc, "status").element_id == "status"

    def test_missing_anchor_raises(self):
        with pytest.raises(AnchorNotFoundError, match="notification-bar"):
            NotificationAnchor.resolve(Document())
