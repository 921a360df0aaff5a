"""Activation strategy protocol.

A strategy turns a click on a trigger element into a provisioning request.
New strategies implement this protocol and plug into the behaviour registry
without touching the registrar.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from provision_trigger.page.dom import Element


class StrategyType(StrEnum):
    """Supported dispatch strategies."""

    ASYNC_REQUESTER = "async_requester"
    FORM_RELAY = "form_relay"


@runtime_checkable
class ActivationStrategy(Protocol):
    """Protocol every dispatch strategy must satisfy."""

    @property
    def strategy_type(self) -> StrategyType:
        """Which variant this strategy is."""
        ...

    def activate(self, trigger: Element) -> None:
        """Handle one click on *trigger*. Must not block."""
        ...
