"""Form serialization and submission helpers."""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

import httpx
import structlog

from provision_trigger.page.dom import Element, Navigation

logger = structlog.get_logger()

FIELD_TAGS = frozenset({"input", "select", "textarea"})
_UNSUBMITTED_INPUT_TYPES = frozenset({"submit", "button", "reset", "image", "file"})


def _is_submitted(field: Element) -> bool:
    if field.tag not in FIELD_TAGS or not field.name or field.disabled:
        return False
    input_type = (field.get("type") or "text").lower()
    if input_type in _UNSUBMITTED_INPUT_TYPES:
        return False
    if input_type in ("checkbox", "radio"):
        return "checked" in field.attrs
    return True


def form_fields(form: Element) -> list[Element]:
    """Named, enabled fields of *form* that a submission would carry."""
    return [el for el in form.iter() if el is not form and _is_submitted(el)]


def form_payload(form: Element) -> dict[str, str]:
    """URL-encodable payload; a repeated name keeps its last value."""
    return {field.name: field.value for field in form_fields(form)}  # type: ignore[misc]


def build_form_tree(form: Element, tree_field: str = "json") -> Element:
    """Serialize the form's fields into the hidden *tree_field* input.

    Repeated field names become lists. Returns the hidden field, which is
    created when the form does not already carry one.
    """
    tree: dict[str, Any] = {}
    for field in form_fields(form):
        if field.name == tree_field:
            continue
        name = field.name
        assert name is not None
        if name in tree:
            if not isinstance(tree[name], list):
                tree[name] = [tree[name]]
            tree[name].append(field.value)
        else:
            tree[name] = field.value

    hidden = form.query_selector(f"[name='{tree_field}']")
    if hidden is None:
        hidden = form.append(
            Element("input", {"type": "hidden", "name": tree_field})
        )
    hidden.value = json.dumps(tree)
    return hidden


@runtime_checkable
class FormSubmitter(Protocol):
    """Performs the full-page navigation a form submission causes."""

    def submit(self, form: Element) -> Navigation:
        """Submit *form* and return the page navigated to."""
        ...


class HttpFormSubmitter:
    """Submits forms over HTTP the way a browser would: same origin, no extra headers."""

    def __init__(self, base_url: str = "", client: httpx.Client | None = None) -> None:
        self._client = client or httpx.Client(base_url=base_url, follow_redirects=True)

    def close(self) -> None:
        self._client.close()

    def submit(self, form: Element) -> Navigation:
        action = form.get("action") or ""
        method = (form.get("method") or "post").upper()
        payload = form_payload(form)
        if method == "GET":
            resp = self._client.get(action, params=payload)
        else:
            resp = self._client.request(method, action, data=payload)
        logger.info(
            "form.submitted",
            action=action,
            method=method,
            status_code=resp.status_code,
        )
        return Navigation(url=str(resp.url), status_code=resp.status_code, body=resp.text)
