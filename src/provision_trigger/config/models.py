"""Pydantic configuration models for provisioning triggers."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Self

from pydantic import BaseModel, Field, SecretStr, model_validator

from provision_trigger.strategies.base import StrategyType


class CsrfMode(StrEnum):
    """Where the CSRF crumb attached to provisioning requests comes from."""

    DOCUMENT = "document"
    STATIC = "static"
    NONE = "none"


class CsrfConfig(BaseModel):
    """CSRF crumb settings.

    - document: read ``data-crumb-header`` / ``data-crumb-value`` from ``<head>``
    - static:   use ``header_name`` / ``token`` from this config
    - none:     send no protection header
    """

    mode: CsrfMode = CsrfMode.DOCUMENT
    header_name: str = Field(default="Jenkins-Crumb", min_length=1)
    token: SecretStr | None = None

    @model_validator(mode="after")
    def check_static_token(self) -> Self:
        """A static crumb needs a token to send."""
        if self.mode == CsrfMode.STATIC and self.token is None:
            msg = "token is required when csrf mode is 'static'"
            raise ValueError(msg)
        return self


class NotificationConfig(BaseModel):
    """Inline notification anchor settings."""

    anchor_id: str = Field(default="notification-bar", min_length=1)
    ttl_seconds: float = Field(default=3.0, gt=0)


class FormRelayConfig(BaseModel):
    """Field names used by the legacy form relay."""

    template_field: str = Field(default="template", min_length=1)
    tree_field: str = Field(default="json", min_length=1)


Marker = Annotated[str, Field(pattern=r"^[a-zA-Z][a-zA-Z0-9._-]*$")]


class TriggerConfig(BaseModel, extra="forbid"):
    """Top-level configuration: which strategy is registered and how."""

    strategy: StrategyType = StrategyType.ASYNC_REQUESTER
    marker: Marker = "os-provision"
    behaviour_priority: int = -99
    base_url: str = ""
    notification: NotificationConfig = NotificationConfig()
    csrf: CsrfConfig = CsrfConfig()
    form: FormRelayConfig = FormRelayConfig()

    @property
    def selector(self) -> str:
        """Attribute selector matching trigger elements."""
        return f"[data-type='{self.marker}']"
