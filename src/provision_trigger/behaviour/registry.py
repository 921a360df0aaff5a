"""Behaviour registry: attaches trigger strategies to matching page elements.

Modelled on the host page's behaviour mechanism: a behaviour is a selector,
a unique key, a priority and a strategy. Applying the registry to a document
(or to a freshly inserted fragment) instruments every matching element once
per key, no matter how often it runs.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass

import structlog

from provision_trigger.page.dom import (
    ClickEvent,
    Document,
    Element,
    EventListener,
    Selector,
)
from provision_trigger.strategies.base import ActivationStrategy

logger = structlog.get_logger()

TRIGGER_KEY = "os-provision"
TRIGGER_PRIORITY = -99


def trigger_selector(marker: str = TRIGGER_KEY) -> str:
    return f"[data-type='{marker}']"


@dataclass(frozen=True)
class Behaviour:
    selector: str
    key: str
    priority: int
    strategy: ActivationStrategy


class BehaviourRegistry:
    def __init__(self) -> None:
        self._behaviours: dict[str, Behaviour] = {}
        # element -> keys already attached; weak so discarded pages can go away
        self._applied: weakref.WeakKeyDictionary[Element, set[str]] = (
            weakref.WeakKeyDictionary()
        )

    @property
    def behaviours(self) -> list[Behaviour]:
        """Registered behaviours in application order."""
        return sorted(self._behaviours.values(), key=lambda b: b.priority)

    def specify(
        self,
        selector: str,
        key: str,
        priority: int,
        strategy: ActivationStrategy,
    ) -> Behaviour:
        """Register a behaviour. Re-using a key replaces the earlier one."""
        previous = self._behaviours.get(key)
        if previous is not None:
            logger.warning(
                "behaviour.replaced",
                key=key,
                previous=previous.strategy.strategy_type.value,
                current=strategy.strategy_type.value,
            )
        behaviour = Behaviour(selector, key, priority, strategy)
        self._behaviours[key] = behaviour
        return behaviour

    def get(self, key: str) -> Behaviour | None:
        return self._behaviours.get(key)

    def apply(self, root: Document | Element) -> None:
        """Instrument matching elements under *root* that are not yet instrumented."""
        scope = root.root if isinstance(root, Document) else root
        for behaviour in self.behaviours:
            selector = Selector.parse(behaviour.selector)
            attached = 0
            # A fragment root may itself be a trigger, so scan it too.
            for element in scope.iter():
                if not selector.matches(element):
                    continue
                keys = self._applied.setdefault(element, set())
                if behaviour.key in keys:
                    continue
                element.add_event_listener("click", _handler(behaviour.strategy))
                keys.add(behaviour.key)
                attached += 1
            if attached:
                logger.debug(
                    "behaviour.applied", key=behaviour.key, elements=attached
                )

    def is_applied(self, element: Element, key: str) -> bool:
        return key in self._applied.get(element, ())


def _handler(strategy: ActivationStrategy) -> EventListener:
    def on_click(event: ClickEvent) -> None:
        strategy.activate(event.target)

    return on_click


def register_trigger(
    registry: BehaviourRegistry,
    strategy: ActivationStrategy,
    marker: str = TRIGGER_KEY,
    priority: int = TRIGGER_PRIORITY,
) -> Behaviour:
    """Register *strategy* for elements whose ``data-type`` is *marker*.

    The marker doubles as the behaviour key, so re-registering the same
    marker replaces the earlier strategy.
    """
    return registry.specify(trigger_selector(marker), marker, priority, strategy)
