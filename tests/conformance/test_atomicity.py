"""
Atomicity Conformance Tests

INVARIANT: Operations are all-or-nothing.

    ∀ operation O:
        O succeeds ⟹ its whole effect is applied and its events are published
        O fails ⟹ state, event log and journal are exactly as before

A rejected transfer_from never consumes allowance; a rejected mint never
creates supply.
"""

import pytest
from hypothesis import given, settings

from token_ledger import (
    InsufficientBalance, InvalidReceiver, EnforcedPause, UnauthorizedAccount,
    NULL_ACCOUNT,
)

from tests.accounts import OWNER, ACCT1, ACCT2
from tests.harness import new_ledger, apply_op, ledger_state, operation_sequences


class TestAtomicityProperties:
    """Property-based atomicity tests."""

    @given(operation_sequences)
    @settings(max_examples=200)
    def test_rejected_operations_leave_no_trace(self, ops):
        """PROPERTY: A rejection changes neither state nor event log nor journal."""
        ledger = new_ledger()
        for op in ops:
            before = ledger_state(ledger)
            journal_length = len(ledger.receipts)

            receipt = apply_op(ledger, op)

            if receipt is None:
                assert ledger_state(ledger) == before
                assert len(ledger.receipts) == journal_length

    @given(operation_sequences)
    @settings(max_examples=200)
    def test_applied_operations_publish_their_events(self, ops):
        """PROPERTY: Each applied operation appends exactly its receipt's events."""
        ledger = new_ledger()
        for op in ops:
            event_count = len(ledger.events)
            receipt = apply_op(ledger, op)
            if receipt is None:
                assert len(ledger.events) == event_count
                continue
            assert ledger.receipts[-1] is receipt
            assert len(receipt.events) >= 1
            assert list(ledger.events)[event_count:] == list(receipt.events)


class TestAtomicityExamples:
    """Explicit atomicity examples."""

    def _spender_setup(self):
        ledger = new_ledger()
        ledger.transfer(OWNER, ACCT1, 100)
        ledger.approve(ACCT1, ACCT2, 500)
        return ledger

    def test_failed_balance_keeps_allowance(self):
        ledger = self._spender_setup()
        with pytest.raises(InsufficientBalance):
            ledger.transfer_from(ACCT2, ACCT1, OWNER, 200)
        assert ledger.allowance(ACCT1, ACCT2) == 500
        assert ledger.balance_of(ACCT1) == 100

    def test_failed_receiver_keeps_allowance(self):
        ledger = self._spender_setup()
        with pytest.raises(InvalidReceiver):
            ledger.transfer_from(ACCT2, ACCT1, NULL_ACCOUNT, 50)
        assert ledger.allowance(ACCT1, ACCT2) == 500

    def test_failed_burn_from_keeps_allowance(self):
        ledger = self._spender_setup()
        with pytest.raises(InsufficientBalance):
            ledger.burn_from(ACCT2, ACCT1, 101)
        assert ledger.allowance(ACCT1, ACCT2) == 500
        assert ledger.total_supply == 10_000

    def test_unauthorized_mint_creates_nothing(self):
        ledger = new_ledger()
        before = ledger_state(ledger)
        with pytest.raises(UnauthorizedAccount):
            ledger.mint(ACCT1, ACCT1, 1)
        assert ledger_state(ledger) == before

    def test_paused_operations_change_nothing(self):
        ledger = self._spender_setup()
        ledger.pause(OWNER)
        before = ledger_state(ledger)
        for op in [
            ("transfer", ACCT1, ACCT2, 1),
            ("approve", ACCT1, ACCT2, 0),
            ("transfer_from", ACCT2, ACCT1, ACCT2, 1),
            ("burn", ACCT1, 1),
        ]:
            with pytest.raises(EnforcedPause):
                name, caller, *args = op
                getattr(ledger, name)(caller, *args)
        assert ledger_state(ledger) == before

    def test_raising_subscriber_cannot_fail_a_committed_operation(self):
        ledger = new_ledger()
        received = []

        def boom(index, event):
            raise RuntimeError("subscriber crashed")

        ledger.events.subscribe(boom)
        ledger.events.subscribe(lambda index, event: received.append(event))

        receipt = ledger.transfer(OWNER, ACCT1, 10)

        assert receipt is ledger.receipts[-1]
        assert ledger.balance_of(ACCT1) == 10
        assert ledger.verify_conservation()['valid']
        assert received == list(receipt.events)
        assert [f.event for f in ledger.events.failures] == list(receipt.events)

    def test_raising_subscriber_sees_whole_operation(self):
        ledger = new_ledger()
        ledger.transfer(OWNER, ACCT1, 100)
        ledger.approve(ACCT1, ACCT2, 100)
        seen = []

        def record_then_fail(index, event):
            seen.append(event)
            raise ValueError("always")

        ledger.events.subscribe(record_then_fail)
        receipt = ledger.transfer_from(ACCT2, ACCT1, OWNER, 40)
        ledger.mint(OWNER, ACCT2, 5)

        assert seen == [receipt.events[0], ledger.receipts[-1].events[0]]
        assert ledger.allowance(ACCT1, ACCT2) == 60
        assert len(ledger.events.failures) == 2

    def test_rejection_not_seen_by_subscribers(self):
        ledger = new_ledger()
        received = []
        ledger.events.subscribe(lambda index, event: received.append(event))
        assert apply_op(ledger, ("transfer", ACCT1, ACCT2, 1)) is None
        assert received == []
        ledger.transfer(OWNER, ACCT1, 1)
        assert len(received) == 1
