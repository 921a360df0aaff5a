"""Form relay: provision by submitting a page form (legacy strategy)."""

from __future__ import annotations

import structlog

from provision_trigger.page.dom import Document, Element
from provision_trigger.page.forms import (
    FormSubmitter,
    HttpFormSubmitter,
    build_form_tree,
)
from provision_trigger.strategies.base import StrategyType

logger = structlog.get_logger()


class FormRelay:
    """Copies the trigger's template name into a form and submits it.

    Submission navigates away from the page, so every bit of feedback comes
    from the page the server returns. The form referenced by ``data-form``
    must contain a ``template`` field; that is the caller's responsibility
    and is not checked.

    Deprecated in favour of
    :class:`~provision_trigger.strategies.async_requester.AsyncRequester`.
    """

    def __init__(
        self,
        document: Document,
        submitter: FormSubmitter | None = None,
        *,
        base_url: str = "",
        template_field: str = "template",
        tree_field: str = "json",
    ) -> None:
        self._document = document
        self._owned: HttpFormSubmitter | None = None
        if submitter is None:
            submitter = self._owned = HttpFormSubmitter(base_url)
        self._submitter = submitter
        self._template_field = template_field
        self._tree_field = tree_field
        logger.warning(
            "form_relay.deprecated",
            replacement=StrategyType.ASYNC_REQUESTER.value,
        )

    @property
    def strategy_type(self) -> StrategyType:
        return StrategyType.FORM_RELAY

    def close(self) -> None:
        """Release the HTTP submitter this relay created, if any."""
        if self._owned is not None:
            self._owned.close()
            self._owned = None

    def __enter__(self) -> FormRelay:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def activate(self, trigger: Element) -> None:
        data = trigger.dataset
        form_id = data.get("form")
        form = self._document.get_element_by_id(form_id) if form_id else None
        if form is None:
            logger.debug("form_relay.form_missing", form=form_id)
            return

        field = form.query_selector(f"[name='{self._template_field}']")
        field.value = data["url"]  # type: ignore[union-attr]
        # The tree must reflect the new template before it is serialized.
        build_form_tree(form, self._tree_field)

        navigation = self._submitter.submit(form)
        self._document.navigate(navigation)
        logger.info(
            "form_relay.submitted",
            template=data["url"],
            form=form_id,
            status_code=navigation.status_code,
        )
