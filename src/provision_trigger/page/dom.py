"""In-memory document model that triggers are wired into.

Only the slice of the DOM the trigger behaviours need: elements with
attributes, children, mutable field values and click listeners, plus
attribute-selector lookups.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

EventListener = Callable[["ClickEvent"], Any]

# tag, #id, [attr], [attr='v'], [attr="v"], tag[attr='v']
_SELECTOR = re.compile(
    r"""^(?P<tag>[a-zA-Z][a-zA-Z0-9-]*)?
        (?:\#(?P<id>[\w-]+))?
        (?:\[(?P<attr>[\w-]+)(?:=(?P<quote>['"]?)(?P<value>[^'"\]]*)(?P=quote))?\])?$""",
    re.VERBOSE,
)


class SelectorError(ValueError):
    """Raised for selectors outside the supported attribute-selector subset."""


@dataclass(frozen=True)
class Selector:
    tag: str | None = None
    element_id: str | None = None
    attr: str | None = None
    value: str | None = None

    @classmethod
    def parse(cls, selector: str) -> Selector:
        match = _SELECTOR.match(selector.strip())
        if match is None or not any(match.group(g) for g in ("tag", "id", "attr")):
            msg = f"Unsupported selector: {selector!r}"
            raise SelectorError(msg)
        tag = match.group("tag")
        return cls(
            tag=tag.lower() if tag else None,
            element_id=match.group("id"),
            attr=match.group("attr"),
            value=match.group("value") if match.group("quote") is not None else None,
        )

    def matches(self, element: Element) -> bool:
        if self.tag is not None and element.tag != self.tag:
            return False
        if self.element_id is not None and element.id != self.element_id:
            return False
        if self.attr is not None:
            if self.attr not in element.attrs:
                return False
            if self.value is not None and element.attrs[self.attr] != self.value:
                return False
        return True


@dataclass
class ClickEvent:
    target: Element
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


def _camel_case(name: str) -> str:
    head, *rest = name.split("-")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


@dataclass(eq=False)
class Element:
    """A node in the page; identity-compared like a DOM node."""

    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[Element] = field(default_factory=list)
    text: str = ""
    parent: Element | None = field(default=None, repr=False)
    _value: str | None = field(default=None, repr=False)
    _listeners: dict[str, list[EventListener]] = field(
        default_factory=dict, repr=False
    )

    def __post_init__(self) -> None:
        self.tag = self.tag.lower()
        for child in self.children:
            child.parent = self

    @property
    def id(self) -> str | None:
        return self.attrs.get("id")

    @property
    def name(self) -> str | None:
        return self.attrs.get("name")

    @property
    def disabled(self) -> bool:
        return "disabled" in self.attrs

    def get(self, attr: str, default: str | None = None) -> str | None:
        return self.attrs.get(attr, default)

    @property
    def dataset(self) -> dict[str, str]:
        """``data-*`` attributes keyed the way ``HTMLElement.dataset`` keys them."""
        return {
            _camel_case(key[5:]): value
            for key, value in self.attrs.items()
            if key.startswith("data-")
        }

    @property
    def value(self) -> str:
        if self._value is not None:
            return self._value
        if self.tag == "textarea":
            return self.text
        return self.attrs.get("value", "")

    @value.setter
    def value(self, new_value: str) -> None:
        self._value = new_value

    def append(self, child: Element) -> Element:
        child.parent = self
        self.children.append(child)
        return child

    def iter(self) -> Iterator[Element]:
        """Yield this element and all descendants in document order."""
        yield self
        for child in self.children:
            yield from child.iter()

    def query_selector_all(self, selector: str) -> list[Element]:
        """Descendants (excluding self) matching *selector*, in document order."""
        sel = Selector.parse(selector)
        return [el for el in self.iter() if el is not self and sel.matches(el)]

    def query_selector(self, selector: str) -> Element | None:
        found = self.query_selector_all(selector)
        return found[0] if found else None

    # -- Events ----------------------------------------------------------------

    def add_event_listener(self, event_type: str, listener: EventListener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)

    def listeners(self, event_type: str) -> list[EventListener]:
        return list(self._listeners.get(event_type, ()))

    def click(self) -> ClickEvent:
        """Dispatch a click to every listener in registration order."""
        event = ClickEvent(target=self)
        for listener in self.listeners("click"):
            listener(event)
        return event


@dataclass
class Navigation:
    """The page a form submission navigated to."""

    url: str
    status_code: int
    body: str = ""


class Document:
    """Root of a page. Tracks whether the page has been navigated away from."""

    def __init__(self, root: Element | None = None) -> None:
        self.root = root or Element("#document")
        self.navigation: Navigation | None = None

    @property
    def navigated(self) -> bool:
        return self.navigation is not None

    def navigate(self, navigation: Navigation) -> None:
        self.navigation = navigation

    @property
    def head(self) -> Element | None:
        return self.root.query_selector("head")

    @property
    def body(self) -> Element | None:
        return self.root.query_selector("body")

    def get_element_by_id(self, element_id: str) -> Element | None:
        for el in self.root.iter():
            if el.id == element_id:
                return el
        return None

    def query_selector_all(self, selector: str) -> list[Element]:
        return self.root.query_selector_all(selector)

    def query_selector(self, selector: str) -> Element | None:
        return self.root.query_selector(selector)

    def iter(self) -> Iterator[Element]:
        return self.root.iter()
