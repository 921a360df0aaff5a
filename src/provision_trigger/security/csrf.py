"""CSRF crumb providers for state-changing requests."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import SecretStr

from provision_trigger.config.models import CsrfConfig, CsrfMode
from provision_trigger.page.dom import Document

CRUMB_HEADER_ATTR = "data-crumb-header"
CRUMB_VALUE_ATTR = "data-crumb-value"


@runtime_checkable
class CsrfProvider(Protocol):
    """Adds the page's anti-forgery header to a header set."""

    def wrap(self, headers: dict[str, str]) -> dict[str, str]:
        """Return a copy of *headers* carrying the protection token."""
        ...


class NoCsrf:
    def wrap(self, headers: dict[str, str]) -> dict[str, str]:
        return dict(headers)


class StaticCsrf:
    """Crumb taken from configuration."""

    def __init__(self, header_name: str, token: SecretStr) -> None:
        self._header_name = header_name
        self._token = token

    def wrap(self, headers: dict[str, str]) -> dict[str, str]:
        return {**headers, self._header_name: self._token.get_secret_value()}


class DocumentCrumb:
    """Crumb the server rendered onto ``<head>``.

    Read at wrap time so a page update that rotates the crumb is honoured.
    Pages rendered without a crumb pass headers through unchanged.
    """

    def __init__(self, document: Document) -> None:
        self._document = document

    def wrap(self, headers: dict[str, str]) -> dict[str, str]:
        head = self._document.head
        if head is None:
            return dict(headers)
        header_name = head.get(CRUMB_HEADER_ATTR)
        value = head.get(CRUMB_VALUE_ATTR)
        if not header_name or value is None:
            return dict(headers)
        return {**headers, header_name: value}


def create_csrf_provider(config: CsrfConfig, document: Document | None) -> CsrfProvider:
    """Create the crumb provider selected by ``config.mode``."""
    if config.mode == CsrfMode.STATIC:
        assert config.token is not None
        return StaticCsrf(config.header_name, config.token)
    if config.mode == CsrfMode.DOCUMENT:
        if document is None:
            msg = "csrf mode 'document' requires a document"
            raise ValueError(msg)
        return DocumentCrumb(document)
    if config.mode == CsrfMode.NONE:
        return NoCsrf()
    msg = f"Unknown csrf mode: {config.mode}"
    raise ValueError(msg)
