"""
Tests for principal management and the identity gate.

Tests:
- require_auth for matching, mismatching and missing principals
- compute_update_admin / compute_update_owner in both lockup variants
- Claims follow the current owner after an update
"""

import pytest
from decimal import Decimal

from lockup import (
    Role, require_auth,
    compute_update_admin, compute_update_owner, get_admin, get_owner,
    time_lockup_claim, sequence_lockup_claim,
    Unauthorized, LockupError,
)

from tests.helpers import (
    TIME_LOCKUP, SEQUENCE_LOCKUP, TIME_VAULT, ADMIN, OWNER, at, execute_ok,
)


class TestRequireAuth:

    def test_matching_caller_passes(self):
        require_auth("alice", "alice", Role.OWNER)

    def test_mismatch_raises(self):
        with pytest.raises(Unauthorized) as exc_info:
            require_auth("mallory", "alice", Role.OWNER)
        assert exc_info.value.code == 4

    def test_missing_principal_raises(self):
        with pytest.raises(Unauthorized):
            require_auth("alice", None, Role.ADMIN)

    def test_unauthorized_is_lockup_error(self):
        assert issubclass(Unauthorized, LockupError)


@pytest.fixture(params=["time", "sequence"])
def lockup_ledger(request, time_ledger, sequence_ledger):
    """Both lockups live on one ledger; (ledger, symbol) for each variant."""
    symbol = TIME_LOCKUP if request.param == "time" else SEQUENCE_LOCKUP
    return time_ledger, symbol


class TestUpdatePrincipals:

    def test_admin_hands_over_admin(self, lockup_ledger):
        ledger, symbol = lockup_ledger
        execute_ok(ledger, compute_update_admin(ledger, symbol, ADMIN, "bob"))
        assert get_admin(ledger, symbol) == "bob"
        with pytest.raises(Unauthorized):
            compute_update_admin(ledger, symbol, ADMIN, "admin")

    def test_admin_updates_owner(self, lockup_ledger):
        ledger, symbol = lockup_ledger
        execute_ok(ledger, compute_update_owner(ledger, symbol, ADMIN, "bob"))
        assert get_owner(ledger, symbol) == "bob"

    def test_owner_cannot_update_owner(self, lockup_ledger):
        ledger, symbol = lockup_ledger
        with pytest.raises(Unauthorized):
            compute_update_owner(ledger, symbol, OWNER, "bob")

    def test_owner_cannot_update_admin(self, lockup_ledger):
        ledger, symbol = lockup_ledger
        with pytest.raises(Unauthorized):
            compute_update_admin(ledger, symbol, OWNER, OWNER)

    def test_empty_principal_rejected(self, lockup_ledger):
        ledger, symbol = lockup_ledger
        with pytest.raises(ValueError):
            compute_update_admin(ledger, symbol, ADMIN, "")
        with pytest.raises(ValueError):
            compute_update_owner(ledger, symbol, ADMIN, " ")

    def test_admin_round_trip_applies_every_handover(self, lockup_ledger):
        ledger, symbol = lockup_ledger
        for current, new in [(ADMIN, "bob"), ("bob", ADMIN), (ADMIN, "bob")]:
            execute_ok(ledger, compute_update_admin(ledger, symbol, current, new))
        assert get_admin(ledger, symbol) == "bob"

    def test_owner_round_trip_applies_every_update(self, lockup_ledger):
        ledger, symbol = lockup_ledger
        for new in ["bob", OWNER, "bob"]:
            execute_ok(ledger, compute_update_owner(ledger, symbol, ADMIN, new))
        assert get_owner(ledger, symbol) == "bob"


class TestClaimsFollowOwner:

    def test_time_claim_pays_new_owner(self, time_ledger):
        execute_ok(time_ledger, compute_update_owner(time_ledger, TIME_LOCKUP, ADMIN, "bob"))
        time_ledger.advance_time(at(10000))

        with pytest.raises(Unauthorized):
            time_lockup_claim(time_ledger, TIME_LOCKUP, OWNER, ["XLM"])

        execute_ok(time_ledger, time_lockup_claim(time_ledger, TIME_LOCKUP, "bob", ["XLM"]))
        assert time_ledger.get_balance("bob", "XLM") == Decimal("500000000")

    def test_sequence_claim_pays_new_owner(self, sequence_ledger):
        execute_ok(sequence_ledger, compute_update_owner(sequence_ledger, SEQUENCE_LOCKUP, ADMIN, "bob"))
        sequence_ledger.advance_sequence(100)
        execute_ok(sequence_ledger, sequence_lockup_claim(sequence_ledger, SEQUENCE_LOCKUP, "bob", 100, ["XLM"]))
        assert sequence_ledger.get_balance("bob", "XLM") == Decimal("500000")

    def test_owner_cannot_be_custody(self, time_ledger):
        with pytest.raises(ValueError):
            compute_update_owner(time_ledger, TIME_LOCKUP, ADMIN, TIME_VAULT)
