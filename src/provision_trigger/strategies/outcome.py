"""Provisioning requests, their outcomes, and how outcomes reach the user."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

STARTED_MESSAGE = "Provisioning started"
FAILED_PREFIX = "Provisioning failed: "


class ActivationState(StrEnum):
    IDLE = "idle"
    REQUESTING = "requesting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (ActivationState.SUCCEEDED, ActivationState.FAILED)


@dataclass(frozen=True)
class ProvisionRequest:
    """One template provisioning request, built at click time and sent once."""

    target: str
    endpoint: str

    def form_data(self) -> dict[str, str]:
        return {"name": self.target}


@dataclass(frozen=True)
class Succeeded:
    text: str = ""


@dataclass(frozen=True)
class Failed:
    status_code: int
    status_text: str
    body: str


Outcome = Succeeded | Failed


@dataclass(frozen=True)
class Feedback:
    """What the user sees for an outcome."""

    notification: str | None = None
    alert: str | None = None
    log_line: str | None = None


def interpret(outcome: Outcome) -> Feedback:
    """Map an outcome to user feedback.

    Success shows the inline notification and ignores the response body.
    Failure uses the one body text for both the alert and the log line.
    """
    if isinstance(outcome, Succeeded):
        return Feedback(notification=STARTED_MESSAGE)
    return Feedback(
        alert=f"{FAILED_PREFIX}{outcome.body}",
        log_line=(
            f"{FAILED_PREFIX}{outcome.status_code} {outcome.status_text} "
            f"{outcome.body}"
        ),
    )
