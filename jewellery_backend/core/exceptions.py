# core/exceptions.py

"""
ENGINE ERRORS

Centralized domain errors shared by every service in the engine.

Each error carries:
- message: the specific constraint that was violated
- field: offending input field (optional)
- entity_id: id of the order / voucher / plan / referral involved (optional)

status_code is the HTTP status the API layer answers with.
None of these are faults: they are expected branches surfaced to the caller.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base exception for all engine failures."""

    status_code = 400
    default_message = "Request could not be processed."

    def __init__(self, message: str = "", *, field: str | None = None, entity_id=None):
        self.message = message or self.default_message
        self.field = field
        self.entity_id = entity_id
        super().__init__(self.message)

    def as_dict(self) -> dict:
        payload = {"detail": self.message}
        if self.field:
            payload["field"] = self.field
        if self.entity_id is not None:
            payload["entity_id"] = str(self.entity_id)
        return payload


class ValidationError(EngineError):
    """Bad or missing input (amount out of band, unknown mode, ...)."""

    status_code = 400
    default_message = "Invalid input."


class NotFoundError(EngineError):
    """Referenced order / voucher / plan / referral does not exist."""

    status_code = 404
    default_message = "Not found."


class ConflictError(EngineError):
    """Operation clashes with current state (duplicate, exhausted, already done)."""

    status_code = 409
    default_message = "Conflict with current state."


class InsufficientBalanceError(EngineError):
    """Ledger debit exceeds the available balance."""

    status_code = 400
    default_message = "Insufficient loyalty points balance."


class IntegrityRaceError(EngineError):
    """Unique id allocation kept colliding after all retries."""

    status_code = 409
    default_message = "Could not allocate a unique identifier, please retry."


class UpstreamError(EngineError):
    """Payment gateway call failed or timed out."""

    status_code = 502
    default_message = "Payment gateway request failed."
