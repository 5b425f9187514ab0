"""Translate raw transport status tokens into controller outcomes."""

from __future__ import annotations

from typing import Any, Mapping

from ..connection_state import ConnectionOutcome

# Transport libraries have renamed these tokens across releases; every known
# spelling is listed here so the state machine only sees four outcomes.
STATUS_OUTCOMES: Mapping[str, ConnectionOutcome] = {
    "connecting": ConnectionOutcome.CONNECTING,
    "reconnecting": ConnectionOutcome.CONNECTING,
    "connected": ConnectionOutcome.SUCCEEDED,
    "open": ConnectionOutcome.SUCCEEDED,
    "disconnected": ConnectionOutcome.FAILED,
    "close": ConnectionOutcome.FAILED,
    "closed": ConnectionOutcome.FAILED,
}


def map_status(raw_status: Any) -> ConnectionOutcome:
    """Return the outcome for ``raw_status``; unknown tokens are UNRECOGNIZED."""
    if not isinstance(raw_status, str):
        return ConnectionOutcome.UNRECOGNIZED
    return STATUS_OUTCOMES.get(raw_status.strip().lower(), ConnectionOutcome.UNRECOGNIZED)


def extract_status(context: Any) -> Any:
    """Pull the status token out of a transport event context."""
    if isinstance(context, str):
        return context
    if isinstance(context, Mapping):
        return context.get("status")
    return getattr(context, "status", None)
