"""Inline, self-expiring notifications bound to a fixed anchor element."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

import structlog

from provision_trigger.page.dom import Document

logger = structlog.get_logger()

DEFAULT_ANCHOR_ID = "notification-bar"

Clock = Callable[[], float]


class AnchorNotFoundError(LookupError):
    """Raised when the page has no element for the notification anchor."""


class NotificationKind(StrEnum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    text: str
    kind: NotificationKind
    shown_at: float
    ttl_seconds: float

    def expired(self, now: float) -> bool:
        return now - self.shown_at >= self.ttl_seconds


class NotificationAnchor:
    """Handle to the single notification slot on a page.

    The anchor is passed explicitly to whoever shows notifications. Concurrent
    activations share it and the last :meth:`show` wins, so the visible text
    follows response-arrival order rather than click order.
    """

    def __init__(
        self,
        element_id: str = DEFAULT_ANCHOR_ID,
        *,
        ttl_seconds: float = 3.0,
        clock: Clock = time.monotonic,
    ) -> None:
        self.element_id = element_id
        self._ttl = ttl_seconds
        self._clock = clock
        self._current: Notification | None = None
        self._history: list[Notification] = []

    @classmethod
    def resolve(
        cls,
        document: Document,
        element_id: str = DEFAULT_ANCHOR_ID,
        *,
        ttl_seconds: float = 3.0,
        clock: Clock = time.monotonic,
    ) -> NotificationAnchor:
        """Bind to the anchor element with *element_id* on *document*."""
        if document.get_element_by_id(element_id) is None:
            msg = f"Notification anchor '#{element_id}' not found on page"
            raise AnchorNotFoundError(msg)
        return cls(element_id, ttl_seconds=ttl_seconds, clock=clock)

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def show(
        self, text: str, kind: NotificationKind = NotificationKind.OK
    ) -> Notification:
        notification = Notification(
            text=text,
            kind=kind,
            shown_at=self._clock(),
            ttl_seconds=self._ttl,
        )
        if self._current is not None and not self._current.expired(
            notification.shown_at
        ):
            logger.debug(
                "notification.replaced",
                anchor=self.element_id,
                previous=self._current.text,
            )
        self._current = notification
        self._history.append(notification)
        logger.debug("notification.shown", anchor=self.element_id, text=text)
        return notification

    @property
    def current(self) -> Notification | None:
        """The visible notification, or ``None`` once it has faded."""
        if self._current is not None and self._current.expired(self._clock()):
            self._current = None
        return self._current

    @property
    def history(self) -> list[Notification]:
        return list(self._history)
