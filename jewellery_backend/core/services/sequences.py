# core/services/sequences.py

"""
ATOMIC SEQUENCE ALLOCATION

Purpose:
- Reserve the next value of a named counter in one locked step
  (no separate read followed by a separate write).
- Persist a record carrying a value derived from it, retrying with a fresh
  value when the store reports a uniqueness violation.

Notes:
- The counter row is locked with select_for_update() until the caller's
  transaction ends.
- allocate_with_retry() wraps each persist attempt in a savepoint so a
  collision never poisons the caller's outer transaction.
- When a collision happens, `resync` may report the highest value already in
  use; the counter is lifted to it so the next reservation skips past it.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from django.db import IntegrityError, transaction

from core.exceptions import IntegrityRaceError
from core.models import SequenceCounter

logger = logging.getLogger(__name__)

MAX_ALLOCATION_ATTEMPTS = 5

T = TypeVar("T")


@transaction.atomic
def reserve_next_value(name: str) -> int:
    counter, _ = SequenceCounter.objects.select_for_update().get_or_create(name=name)
    counter.last_value += 1
    counter.save(update_fields=["last_value", "updated_at"])
    return counter.last_value


@transaction.atomic
def raise_floor(name: str, floor: int) -> int:
    """Ensure the counter is at least `floor`. Never lowers it."""
    counter, _ = SequenceCounter.objects.select_for_update().get_or_create(name=name)
    if floor > counter.last_value:
        counter.last_value = floor
        counter.save(update_fields=["last_value", "updated_at"])
    return counter.last_value


def allocate_with_retry(
    name: str,
    *,
    persist: Callable[[int], T],
    resync: Callable[[], int] | None = None,
    attempts: int = MAX_ALLOCATION_ATTEMPTS,
) -> T:
    for attempt in range(1, attempts + 1):
        value = reserve_next_value(name)
        try:
            with transaction.atomic():
                return persist(value)
        except IntegrityError:
            logger.warning(
                "Sequence value collided, retrying",
                extra={"sequence": name, "value": value, "attempt": attempt},
            )
            if resync is not None:
                raise_floor(name, resync())

    raise IntegrityRaceError(
        f"Could not allocate a unique value for '{name}' after {attempts} attempts.",
        field=name,
    )
