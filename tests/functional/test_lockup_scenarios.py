"""
End-to-end lockup scenarios on a real Ledger.

Each scenario drives a lockup through its whole life with the public
operations and checks balances, progress and conservation along the way.
"""

import pytest
from decimal import Decimal

from lockup import (
    checkpoint,
    create_time_lockup, time_lockup_initialize, compute_set_schedule, time_lockup_claim,
    create_sequence_lockup, sequence_lockup_initialize, compute_add_checkpoint,
    compute_remove_checkpoint, sequence_lockup_claim, get_checkpoints,
    compute_update_admin,
    InvalidSchedule, AlreadyUnlocked, Unauthorized,
)

from tests.helpers import (
    TIME_LOCKUP, SEQUENCE_LOCKUP, TIME_VAULT, SEQUENCE_VAULT, ADMIN, OWNER,
    at, execute_ok, make_ledger,
)


class TestTimeWatermarkedScenario:

    def test_two_step_vesting(self, time_ledger):
        """50% at T0+10000s, the rest at T0+20000s."""
        time_ledger.advance_time(at(10000))
        execute_ok(time_ledger, time_lockup_claim(time_ledger, TIME_LOCKUP, OWNER, ["XLM"]))
        assert time_ledger.get_balance(OWNER, "XLM") == Decimal("500000000")
        assert time_ledger.get_balance(TIME_VAULT, "XLM") == Decimal("500000000")

        time_ledger.advance_time(at(20000))
        execute_ok(time_ledger, time_lockup_claim(time_ledger, TIME_LOCKUP, OWNER, ["XLM"]))
        assert time_ledger.get_balance(OWNER, "XLM") == Decimal("1000000000")
        assert time_ledger.get_balance(TIME_VAULT, "XLM") == Decimal("0")

        assert time_ledger.verify_double_entry({"XLM": Decimal("1000000000")})['valid']

    def test_late_claim_applies_every_missed_checkpoint(self, ledger):
        ledger.register_unit(create_time_lockup(TIME_LOCKUP, "Team", TIME_VAULT))
        ledger.set_balance(TIME_VAULT, "XLM", Decimal("10000"))
        execute_ok(ledger, time_lockup_initialize(ledger, TIME_LOCKUP, ADMIN, OWNER, [
            checkpoint(at(100), 2500),
            checkpoint(at(200), 2500),
            checkpoint(at(300), 10000),
        ]))

        ledger.advance_time(at(250))
        execute_ok(ledger, time_lockup_claim(ledger, TIME_LOCKUP, OWNER, ["XLM"]))
        # 2500 of 10000, then 1875 of the remaining 7500
        assert ledger.get_balance(OWNER, "XLM") == Decimal("4375")

    def test_late_deposit_is_captured(self, time_ledger):
        time_ledger.advance_time(at(10000))
        execute_ok(time_ledger, time_lockup_claim(time_ledger, TIME_LOCKUP, OWNER, ["XLM"]))

        time_ledger.set_balance(TIME_VAULT, "XLM", Decimal("700000000"))
        time_ledger.advance_time(at(20000))
        execute_ok(time_ledger, time_lockup_claim(time_ledger, TIME_LOCKUP, OWNER, ["XLM"]))
        assert time_ledger.get_balance(OWNER, "XLM") == Decimal("1200000000")

    def test_admin_extends_vesting(self, time_ledger):
        time_ledger.advance_time(at(15000))
        execute_ok(time_ledger, compute_set_schedule(time_ledger, TIME_LOCKUP, ADMIN, [
            checkpoint(at(10000), 5000),
            checkpoint(at(20000), 5000),
            checkpoint(at(30000), 10000),
        ]))

        time_ledger.advance_time(at(20000))
        execute_ok(time_ledger, time_lockup_claim(time_ledger, TIME_LOCKUP, OWNER, ["XLM"]))
        # Both reached checkpoints applied: 500M, then 250M
        assert time_ledger.get_balance(OWNER, "XLM") == Decimal("750000000")

        time_ledger.advance_time(at(30000))
        with pytest.raises(AlreadyUnlocked):
            compute_set_schedule(time_ledger, TIME_LOCKUP, ADMIN, [checkpoint(at(40000), 10000)])
        execute_ok(time_ledger, time_lockup_claim(time_ledger, TIME_LOCKUP, OWNER, ["XLM"]))
        assert time_ledger.get_balance(TIME_VAULT, "XLM") == Decimal("0")

    def test_new_admin_takes_over_schedule(self, time_ledger):
        execute_ok(time_ledger, compute_update_admin(time_ledger, TIME_LOCKUP, ADMIN, "bob"))
        new_schedule = [checkpoint(at(5000), 1000), checkpoint(at(6000), 10000)]
        with pytest.raises(Unauthorized):
            compute_set_schedule(time_ledger, TIME_LOCKUP, ADMIN, new_schedule)
        execute_ok(time_ledger, compute_set_schedule(time_ledger, TIME_LOCKUP, "bob", new_schedule))


class TestSequenceConsumingScenario:

    def test_two_checkpoints_leave_remainder_locked(self, sequence_ledger):
        sequence_ledger.advance_sequence(100)
        execute_ok(sequence_ledger, sequence_lockup_claim(sequence_ledger, SEQUENCE_LOCKUP, OWNER, 100, ["XLM"]))
        assert sequence_ledger.get_balance(OWNER, "XLM") == Decimal("500000")
        assert get_checkpoints(sequence_ledger, SEQUENCE_LOCKUP) == {200: 5000}

        sequence_ledger.advance_sequence(250)
        execute_ok(sequence_ledger, sequence_lockup_claim(sequence_ledger, SEQUENCE_LOCKUP, OWNER, 200, ["XLM"]))
        assert sequence_ledger.get_balance(OWNER, "XLM") == Decimal("750000")
        assert sequence_ledger.get_balance(SEQUENCE_VAULT, "XLM") == Decimal("250000")
        assert get_checkpoints(sequence_ledger, SEQUENCE_LOCKUP) == {}

    def test_admin_edits_then_owner_claims(self, sequence_ledger):
        execute_ok(sequence_ledger, compute_add_checkpoint(sequence_ledger, SEQUENCE_LOCKUP, ADMIN, 300, 10000))
        execute_ok(sequence_ledger, compute_remove_checkpoint(sequence_ledger, SEQUENCE_LOCKUP, ADMIN, 200))

        sequence_ledger.advance_sequence(300)
        execute_ok(sequence_ledger, sequence_lockup_claim(sequence_ledger, SEQUENCE_LOCKUP, OWNER, 300, ["XLM"]))
        assert sequence_ledger.get_balance(OWNER, "XLM") == Decimal("1000000")
        assert sequence_ledger.get_balance(SEQUENCE_VAULT, "XLM") == Decimal("0")

    def test_deposit_after_consumption_waits_for_next_checkpoint(self, sequence_ledger):
        sequence_ledger.advance_sequence(100)
        execute_ok(sequence_ledger, sequence_lockup_claim(sequence_ledger, SEQUENCE_LOCKUP, OWNER, 100, ["XLM"]))
        sequence_ledger.set_balance(SEQUENCE_VAULT, "XLM", Decimal("900000"))

        sequence_ledger.advance_sequence(200)
        execute_ok(sequence_ledger, sequence_lockup_claim(sequence_ledger, SEQUENCE_LOCKUP, OWNER, 200, ["XLM"]))
        assert sequence_ledger.get_balance(OWNER, "XLM") == Decimal("950000")


class TestValidationScenario:

    @pytest.fixture
    def fresh(self):
        ledger = make_ledger()
        ledger.register_unit(create_time_lockup(TIME_LOCKUP, "Team", TIME_VAULT))
        return ledger

    def test_percent_above_scale(self, fresh):
        with pytest.raises(InvalidSchedule):
            time_lockup_initialize(fresh, TIME_LOCKUP, ADMIN, OWNER, [
                checkpoint(at(100), 10001), checkpoint(at(200), 10000),
            ])

    def test_empty_schedule(self, fresh):
        with pytest.raises(InvalidSchedule):
            time_lockup_initialize(fresh, TIME_LOCKUP, ADMIN, OWNER, [])

    def test_too_many_checkpoints(self, fresh):
        schedule = [checkpoint(at(i + 1), 100) for i in range(48)]
        schedule.append(checkpoint(at(49), 10000))
        with pytest.raises(InvalidSchedule):
            time_lockup_initialize(fresh, TIME_LOCKUP, ADMIN, OWNER, schedule)

    def test_sequence_lockups_coexist(self, fresh):
        fresh.register_unit(create_sequence_lockup(SEQUENCE_LOCKUP, "Grant", SEQUENCE_VAULT))
        execute_ok(fresh, sequence_lockup_initialize(fresh, SEQUENCE_LOCKUP, ADMIN, OWNER, {10: 100}))
        assert get_checkpoints(fresh, SEQUENCE_LOCKUP) == {10: 100}
