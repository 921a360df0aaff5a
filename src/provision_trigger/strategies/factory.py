"""Strategy factory: maps StrategyType to concrete dispatch strategies."""

from __future__ import annotations

import httpx

from provision_trigger.config.models import TriggerConfig
from provision_trigger.page.dialogs import Dialogs
from provision_trigger.page.dom import Document
from provision_trigger.page.forms import FormSubmitter
from provision_trigger.page.notifications import NotificationAnchor
from provision_trigger.security.csrf import create_csrf_provider
from provision_trigger.strategies.async_requester import AsyncRequester
from provision_trigger.strategies.base import ActivationStrategy, StrategyType
from provision_trigger.strategies.form_relay import FormRelay


def create_strategy(
    config: TriggerConfig,
    *,
    document: Document,
    dialogs: Dialogs,
    anchor: NotificationAnchor | None = None,
    submitter: FormSubmitter | None = None,
    client: httpx.AsyncClient | None = None,
) -> ActivationStrategy:
    """Create the dispatch strategy selected by ``config.strategy``.

    The async requester resolves the notification anchor from *document*
    unless one is passed in.
    """
    if config.strategy == StrategyType.ASYNC_REQUESTER:
        if anchor is None:
            anchor = NotificationAnchor.resolve(
                document,
                config.notification.anchor_id,
                ttl_seconds=config.notification.ttl_seconds,
            )
        return AsyncRequester(
            anchor,
            dialogs,
            create_csrf_provider(config.csrf, document),
            base_url=config.base_url,
            client=client,
        )

    if config.strategy == StrategyType.FORM_RELAY:
        return FormRelay(
            document,
            submitter,
            base_url=config.base_url,
            template_field=config.form.template_field,
            tree_field=config.form.tree_field,
        )

    msg = f"Unknown strategy type: {config.strategy}"
    raise ValueError(msg)
