# core/tests/test_sequences.py

from django.db import IntegrityError
from django.test import TestCase

from core.exceptions import IntegrityRaceError
from core.models import AppSetting, SequenceCounter
from core.services.sequences import allocate_with_retry, raise_floor, reserve_next_value


class SequenceAllocationTests(TestCase):
    """
    GUARANTEES:
    - reservations are strictly increasing per counter name
    - a collision is retried with a fresh value after resync
    - the caller's transaction survives collisions
    - persistent collisions end in IntegrityRaceError
    """

    def test_reserve_is_monotonic_per_name(self):
        self.assertEqual(reserve_next_value("a"), 1)
        self.assertEqual(reserve_next_value("a"), 2)
        self.assertEqual(reserve_next_value("b"), 1)

    def test_raise_floor_never_lowers(self):
        reserve_next_value("c")
        self.assertEqual(raise_floor("c", 10), 10)
        self.assertEqual(raise_floor("c", 3), 10)
        self.assertEqual(reserve_next_value("c"), 11)

    def test_collision_is_retried_after_resync(self):
        AppSetting.objects.create(key="slot-1", value=1)
        AppSetting.objects.create(key="slot-2", value=2)

        row = allocate_with_retry(
            "slots",
            persist=lambda seq: AppSetting.objects.create(key=f"slot-{seq}", value=seq),
            resync=lambda: 2,
        )

        self.assertEqual(row.key, "slot-3")
        self.assertEqual(SequenceCounter.objects.get(name="slots").last_value, 3)
        # outer transaction still usable
        self.assertEqual(AppSetting.objects.count(), 3)

    def test_gives_up_after_attempts(self):
        def always_collide(seq):
            raise IntegrityError("duplicate")

        with self.assertRaises(IntegrityRaceError):
            allocate_with_retry("doomed", persist=always_collide, attempts=3)

        self.assertEqual(SequenceCounter.objects.get(name="doomed").last_value, 3)
