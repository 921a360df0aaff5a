"""Async requester: provision with a background HTTP POST (current strategy)."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from provision_trigger.page.dialogs import Dialogs
from provision_trigger.page.dom import Element
from provision_trigger.page.notifications import NotificationAnchor
from provision_trigger.security.csrf import CsrfProvider
from provision_trigger.strategies.base import StrategyType
from provision_trigger.strategies.outcome import (
    ActivationState,
    Failed,
    Outcome,
    ProvisionRequest,
    Succeeded,
    interpret,
)

logger = structlog.get_logger()


@dataclass(eq=False)
class Activation:
    """Lifecycle of a single click: idle → requesting → succeeded | failed."""

    request: ProvisionRequest
    state: ActivationState = ActivationState.IDLE
    outcome: Outcome | None = None
    task: asyncio.Task[None] | None = field(default=None, repr=False)

    def finish(self, outcome: Outcome) -> None:
        if self.state.terminal:
            msg = f"Activation for {self.request.target!r} already {self.state}"
            raise RuntimeError(msg)
        self.outcome = outcome
        self.state = (
            ActivationState.SUCCEEDED
            if isinstance(outcome, Succeeded)
            else ActivationState.FAILED
        )


class AsyncRequester:
    """POSTs ``name=<data-url>`` to ``data-cloud`` and reports the outcome inline.

    The click handler only schedules the request; the response is handled in
    a tracked task on the running event loop. Each click is independent:
    requests are never retried, never cancelled, and carry no timeout beyond
    the HTTP client's defaults. Concurrent activations share only the
    notification anchor.
    """

    def __init__(
        self,
        anchor: NotificationAnchor,
        dialogs: Dialogs,
        csrf: CsrfProvider,
        *,
        base_url: str = "",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._anchor = anchor
        self._dialogs = dialogs
        self._csrf = csrf
        self._base_url = base_url
        self._client = client
        self._owns_client = client is None
        self._pending: set[asyncio.Task[None]] = set()
        self._activations: list[Activation] = []

    @property
    def strategy_type(self) -> StrategyType:
        return StrategyType.ASYNC_REQUESTER

    @property
    def anchor(self) -> NotificationAnchor:
        return self._anchor

    @property
    def activations(self) -> list[Activation]:
        return list(self._activations)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url, follow_redirects=True
            )
            self._owns_client = True
        logger.info("async_requester.started", base_url=self._base_url)

    async def stop(self) -> None:
        try:
            await self.drain()
        finally:
            if self._client is not None and self._owns_client:
                await self._client.aclose()
                self._client = None
            logger.info("async_requester.stopped")

    async def __aenter__(self) -> AsyncRequester:
        await self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.stop()

    # -- Activation ------------------------------------------------------------

    def activate(self, trigger: Element) -> None:
        if self._client is None:
            msg = "AsyncRequester not started, call start() first"
            raise RuntimeError(msg)

        data = trigger.dataset
        activation = Activation(
            request=ProvisionRequest(target=data["url"], endpoint=data["cloud"])
        )
        self._activations.append(activation)
        activation.state = ActivationState.REQUESTING

        task = asyncio.get_running_loop().create_task(self._run(activation))
        activation.task = task
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        logger.debug(
            "async_requester.activated",
            template=activation.request.target,
            endpoint=activation.request.endpoint,
        )

    async def drain(self) -> None:
        """Wait for every in-flight activation to finish."""
        while self._pending:
            await asyncio.gather(*self._pending)

    async def _run(self, activation: Activation) -> None:
        outcome = await self.dispatch(activation.request)
        activation.finish(outcome)
        self.apply(outcome)

    async def dispatch(self, request: ProvisionRequest) -> Outcome:
        """Send *request* once and classify the response."""
        if self._client is None:
            msg = "AsyncRequester not started, call start() first"
            raise RuntimeError(msg)
        try:
            resp = await self._client.post(
                request.endpoint,
                headers=self._csrf.wrap({}),
                data=request.form_data(),
                follow_redirects=True,
            )
        except httpx.HTTPError as exc:
            return Failed(status_code=0, status_text=type(exc).__name__, body=str(exc))

        if resp.is_success:
            return Succeeded(text=resp.reason_phrase)
        return Failed(
            status_code=resp.status_code,
            status_text=resp.reason_phrase,
            body=resp.text,
        )

    def apply(self, outcome: Outcome) -> None:
        """Show the feedback for *outcome* on the page."""
        feedback = interpret(outcome)
        if isinstance(outcome, Failed):
            assert feedback.alert is not None
            self._dialogs.alert(feedback.alert)
            logger.error(
                "provision.failed",
                detail=feedback.log_line,
                status_code=outcome.status_code,
                status_text=outcome.status_text,
                body=outcome.body,
            )
            return
        assert feedback.notification is not None
        self._anchor.show(feedback.notification)
        logger.info("provision.started", anchor=self._anchor.element_id)

    async def health(self) -> dict[str, Any]:
        return {
            "type": self.strategy_type.value,
            "status": "running" if self._client is not None else "stopped",
            "pending": self.pending,
            "activations": len(self._activations),
        }
