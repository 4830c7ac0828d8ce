"""
ledger.py - Stateful Fungible-Token Ledger

TokenLedger is the central state manager of the package. It is the only module
that mutates balances, allowances and supply.

Key responsibilities:
    - Implements the TokenView protocol for safe read-only access
    - Applies operations atomically: every check runs before any mutation
    - Composes the pause gate and owner check in front of each operation
    - Publishes events only after state has committed
    - Journals every successful operation as a Receipt (clone, replay, audit)
"""

from __future__ import annotations
from functools import wraps
from typing import Any, Dict, List, Optional
import copy
import inspect
import threading

from .access import AccessControl, only_owner
from .core import (
    # Types
    TokenConfig, Receipt, LedgerSnapshot, OpKind, Balances, Allowances,
    Event, Transfer, Approval, OwnershipTransferred,
    # Constants
    NULL_ACCOUNT,
    # Exceptions
    LedgerError, InvalidSender, InvalidReceiver, InvalidApprover,
    InvalidSpender, InsufficientBalance, InsufficientAllowance,
    FailedDecreaseAllowance,
    # Helpers
    require_account, require_amount, check_invariants, format_units,
)
from .events import EventLog
from .pausable import PauseGate, when_not_paused


def _operation(op: OpKind):
    """
    Run a ledger method as one serialized, journaled operation.

    The wrapped method performs its checks, applies its state changes and
    returns the events it produced. This wrapper holds the ledger lock for the
    whole call, then records the Receipt and publishes the events. Rejections
    are reported (when verbose) and re-raised unchanged.
    """
    def decorator(method):
        signature = inspect.signature(method)

        @wraps(method)
        def wrapper(self: TokenLedger, caller: str, *args, **kwargs) -> Receipt:
            bound = signature.bind(self, caller, *args, **kwargs)
            bound.apply_defaults()
            call_args = bound.args[2:]
            require_account(caller)
            with self._lock:
                try:
                    events = method(self, caller, *call_args)
                except LedgerError as e:
                    if self.verbose:
                        print(f"✗ REJECTED {op.value} by {caller}: {type(e).__name__}({e})")
                    raise
                return self._commit(op, caller, call_args, events)

        return wrapper
    return decorator


class TokenLedger:
    """
    Fungible-token ledger with allowances, owner-gated minting and a pause switch.

    Every mutating method takes the authenticated caller first and returns the
    Receipt of the applied operation. Failures raise a LedgerError subclass and
    leave the ledger untouched.

    Thread Safety:
        One re-entrant lock guards balances, allowances, supply, owner, pause
        flag, event log and journal together. Operations are serializable.

    Example:
        ledger = TokenLedger(TokenConfig.default("owner"), verbose=False)
        ledger.transfer("owner", "alice", 1000)
        ledger.approve("alice", "bob", 400)
        ledger.transfer_from("bob", "alice", "carol", 400)
        ledger.balance_of("carol")   # 400
    """

    def __init__(self, config: TokenConfig, verbose: bool = True):
        """
        Deploy a ledger.

        Emits OwnershipTransferred(NULL_ACCOUNT, owner) and, for a non-zero
        initial supply, Transfer(NULL_ACCOUNT, owner, supply), in that order.

        Args:
            config: Construction-time token parameters
            verbose: Print operation outcomes (default: True)

        Raises:
            InvalidOwner: If config.initial_owner is the null identifier
        """
        self.config = config
        self.verbose = verbose
        self.access = AccessControl(config.initial_owner)
        self.pause_gate = PauseGate(self.access)
        self.events = EventLog()
        self.receipts: List[Receipt] = []
        self._balances: Balances = {}
        self._allowances: Allowances = {}
        self._total_supply: int = 0
        self._next_sequence: int = 0
        self._lock = threading.RLock()

        owner = config.initial_owner
        deploy_events: List[Event] = [OwnershipTransferred(NULL_ACCOUNT, owner)]
        if config.initial_supply:
            deploy_events.append(self._update(NULL_ACCOUNT, owner, config.initial_supply))
        if self.verbose:
            supply = format_units(config.initial_supply, config.decimals)
            print(f"📝 Deployed: {config.name} ({config.symbol}) "
                  f"[decimals={config.decimals}, supply={supply}, owner={owner}]")
        self._commit(OpKind.DEPLOY, owner, (), deploy_events)

    def __repr__(self) -> str:
        return (f"TokenLedger({self.symbol}, supply={self._total_supply}, "
                f"holders={len(self._balances)}, paused={self.paused})")

    # ========================================================================
    # TokenView PROTOCOL IMPLEMENTATION (read-only, never gated)
    # ========================================================================

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def symbol(self) -> str:
        return self.config.symbol

    @property
    def decimals(self) -> int:
        return self.config.decimals

    @property
    def total_supply(self) -> int:
        with self._lock:
            return self._total_supply

    @property
    def owner(self) -> str:
        with self._lock:
            return self.access.owner

    @property
    def paused(self) -> bool:
        with self._lock:
            return self.pause_gate.paused

    def balance_of(self, account: str) -> int:
        """Balance of `account`; 0 for accounts never seen."""
        with self._lock:
            return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        """Remaining amount `spender` may move out of `owner`; 0 if unset."""
        with self._lock:
            return self._allowances.get((owner, spender), 0)

    def holders(self) -> Balances:
        """All accounts with a non-zero balance."""
        with self._lock:
            return dict(self._balances)

    def snapshot(self) -> LedgerSnapshot:
        """Consistent, immutable copy of the current state."""
        with self._lock:
            return LedgerSnapshot(
                balances=dict(self._balances),
                allowances=dict(self._allowances),
                total_supply=self._total_supply,
                owner=self.access.owner,
                paused=self.pause_gate.paused,
                event_count=len(self.events),
                sequence_number=self._next_sequence,
            )

    def verify_conservation(self, expected_supply: Optional[int] = None) -> Dict[str, Any]:
        """
        Verify that total supply equals the sum of all balances.

        Args:
            expected_supply: Optional supply the caller believes is outstanding.
                             A mismatch is reported as a discrepancy.

        Returns:
            Dict with 'valid', 'total_supply', 'sum_of_balances' and
            'discrepancies' (see core.check_invariants).

        Example:
            result = ledger.verify_conservation()
            assert result['valid'], result['discrepancies']
        """
        with self._lock:
            result = check_invariants(self, self._balances.keys())
            if expected_supply is not None and expected_supply != self._total_supply:
                result['discrepancies'].append({
                    'check': 'expected_supply',
                    'expected': expected_supply,
                    'actual': self._total_supply,
                    'difference': expected_supply - self._total_supply,
                })
                result['valid'] = False
            return result

    # ========================================================================
    # INTERNAL STATE PRIMITIVES (no checks, no locking)
    # ========================================================================

    def _set_balance(self, account: str, amount: int) -> None:
        # Zero balances are dropped so absent and zero stay indistinguishable.
        if amount:
            self._balances[account] = amount
        else:
            self._balances.pop(account, None)

    def _set_allowance(self, owner: str, spender: str, amount: int) -> None:
        if amount:
            self._allowances[(owner, spender)] = amount
        else:
            self._allowances.pop((owner, spender), None)

    def _require_balance(self, account: str, amount: int) -> None:
        available = self._balances.get(account, 0)
        if available < amount:
            raise InsufficientBalance(account, available, amount)

    def _require_allowance(self, owner: str, spender: str, amount: int) -> int:
        available = self._allowances.get((owner, spender), 0)
        if available < amount:
            raise InsufficientAllowance(spender, available, amount)
        return available

    def _update(self, source: str, dest: str, amount: int) -> Transfer:
        """
        Move `amount` from source to dest. A null source mints, a null dest burns.

        PRECONDITION: the caller has already checked the source balance.
        """
        if source == NULL_ACCOUNT:
            self._total_supply += amount
        else:
            self._set_balance(source, self._balances.get(source, 0) - amount)
        if dest == NULL_ACCOUNT:
            self._total_supply -= amount
        else:
            self._set_balance(dest, self._balances.get(dest, 0) + amount)
        return Transfer(source, dest, amount)

    def _generate_exec_id(self, sequence: int) -> str:
        """Format: exec:{symbol}:{sequence:012d}"""
        return f"exec:{self.config.symbol}:{sequence:012d}"

    def _commit(self, op: OpKind, caller: str, args, events: List[Event]) -> Receipt:
        """
        Journal the applied operation, then publish its events in order.

        State, journal and log are final before any subscriber runs. A raising
        subscriber is reported (when verbose) and kept in events.failures; it
        never turns the committed operation into an error.
        """
        sequence = self._next_sequence
        self._next_sequence += 1
        receipt = Receipt(
            sequence_number=sequence,
            exec_id=self._generate_exec_id(sequence),
            op=op,
            caller=caller,
            args=tuple(args),
            events=tuple(events),
        )
        self.receipts.append(receipt)
        first = self.events.record(receipt.events)
        if self.verbose and op is not OpKind.DEPLOY:
            self._print_receipt(receipt)
        for failure in self.events.publish(first, first + len(receipt.events)):
            if self.verbose:
                print(f"⚠️  LISTENER FAILED on {failure.event!r} [{receipt.exec_id}]: "
                      f"{type(failure.error).__name__}({failure.error})")
        return receipt

    def _print_receipt(self, receipt: Receipt) -> None:
        rendered = ", ".join(repr(a) for a in receipt.args)
        print(f"✓ APPLIED {receipt.op.value}({rendered}) by {receipt.caller} [{receipt.exec_id}]")
        for event in receipt.events:
            print(f"    ↳ {event!r}")

    # ========================================================================
    # BALANCE OPERATIONS (Mutating, pause-gated)
    # ========================================================================

    @_operation(OpKind.TRANSFER)
    @when_not_paused
    def transfer(self, caller: str, to: str, amount: int) -> List[Event]:
        """
        Move `amount` from caller to `to`.

        Raises:
            EnforcedPause: If paused
            InvalidSender: If caller is the null identifier
            InvalidReceiver: If to is the null identifier
            InsufficientBalance: If caller holds less than amount
        """
        require_account(to)
        require_amount(amount)
        if caller == NULL_ACCOUNT:
            raise InvalidSender(caller)
        if to == NULL_ACCOUNT:
            raise InvalidReceiver(to)
        self._require_balance(caller, amount)
        return [self._update(caller, to, amount)]

    @_operation(OpKind.TRANSFER_FROM)
    @when_not_paused
    def transfer_from(self, caller: str, source: str, to: str, amount: int) -> List[Event]:
        """
        Spend caller's allowance over `source` to move `amount` to `to`.

        The allowance is checked first, then the null-identifier rules, then
        the balance. The allowance decrement and the balance movement apply
        together. Emits a single Transfer; no Approval.

        Raises:
            EnforcedPause: If paused
            InsufficientAllowance: If allowance(source, caller) < amount
            InvalidSpender: If caller is the null identifier
            InvalidSender: If source is the null identifier
            InvalidReceiver: If to is the null identifier
            InsufficientBalance: If source holds less than amount
        """
        require_account(source)
        require_account(to)
        require_amount(amount)
        available = self._require_allowance(source, caller, amount)
        if caller == NULL_ACCOUNT:
            raise InvalidSpender(caller)
        if source == NULL_ACCOUNT:
            raise InvalidSender(source)
        if to == NULL_ACCOUNT:
            raise InvalidReceiver(to)
        self._require_balance(source, amount)
        self._set_allowance(source, caller, available - amount)
        return [self._update(source, to, amount)]

    @_operation(OpKind.MINT)
    @when_not_paused
    @only_owner
    def mint(self, caller: str, to: str, amount: int) -> List[Event]:
        """
        Owner-only: create `amount` new tokens for `to`.

        Raises:
            EnforcedPause: If paused
            UnauthorizedAccount: If caller is not the owner
            InvalidReceiver: If to is the null identifier
        """
        require_account(to)
        require_amount(amount)
        if to == NULL_ACCOUNT:
            raise InvalidReceiver(to)
        return [self._update(NULL_ACCOUNT, to, amount)]

    @_operation(OpKind.BURN)
    @when_not_paused
    def burn(self, caller: str, amount: int) -> List[Event]:
        """
        Destroy `amount` of caller's own tokens.

        Raises:
            EnforcedPause: If paused
            InvalidSender: If caller is the null identifier
            InsufficientBalance: If caller holds less than amount
        """
        require_amount(amount)
        if caller == NULL_ACCOUNT:
            raise InvalidSender(caller)
        self._require_balance(caller, amount)
        return [self._update(caller, NULL_ACCOUNT, amount)]

    @_operation(OpKind.BURN_FROM)
    @when_not_paused
    def burn_from(self, caller: str, account: str, amount: int) -> List[Event]:
        """
        Spend caller's allowance over `account` to destroy `amount` of its tokens.

        Raises:
            EnforcedPause: If paused
            InsufficientAllowance: If allowance(account, caller) < amount
            InvalidSpender: If caller is the null identifier
            InvalidSender: If account is the null identifier
            InsufficientBalance: If account holds less than amount
        """
        require_account(account)
        require_amount(amount)
        available = self._require_allowance(account, caller, amount)
        if caller == NULL_ACCOUNT:
            raise InvalidSpender(caller)
        if account == NULL_ACCOUNT:
            raise InvalidSender(account)
        self._require_balance(account, amount)
        self._set_allowance(account, caller, available - amount)
        return [self._update(account, NULL_ACCOUNT, amount)]

    # ========================================================================
    # ALLOWANCE OPERATIONS (Mutating, pause-gated)
    # ========================================================================

    def _require_approval_parties(self, owner: str, spender: str) -> None:
        require_account(spender)
        if owner == NULL_ACCOUNT:
            raise InvalidApprover(owner)
        if spender == NULL_ACCOUNT:
            raise InvalidSpender(spender)

    @_operation(OpKind.APPROVE)
    @when_not_paused
    def approve(self, caller: str, spender: str, amount: int) -> List[Event]:
        """
        Set allowance(caller, spender) to exactly `amount`.

        Emits Approval even when the value does not change.

        Raises:
            EnforcedPause: If paused
            InvalidApprover: If caller is the null identifier
            InvalidSpender: If spender is the null identifier
        """
        require_amount(amount)
        self._require_approval_parties(caller, spender)
        self._set_allowance(caller, spender, amount)
        return [Approval(caller, spender, amount)]

    @_operation(OpKind.INCREASE_ALLOWANCE)
    @when_not_paused
    def increase_allowance(self, caller: str, spender: str, added: int) -> List[Event]:
        """Raise allowance(caller, spender) by `added`; emits Approval with the new value."""
        require_amount(added)
        self._require_approval_parties(caller, spender)
        new_amount = self._allowances.get((caller, spender), 0) + added
        self._set_allowance(caller, spender, new_amount)
        return [Approval(caller, spender, new_amount)]

    @_operation(OpKind.DECREASE_ALLOWANCE)
    @when_not_paused
    def decrease_allowance(self, caller: str, spender: str, subtracted: int) -> List[Event]:
        """
        Lower allowance(caller, spender) by `subtracted`; emits Approval with the new value.

        Raises:
            FailedDecreaseAllowance: If the allowance is smaller than subtracted
        """
        require_amount(subtracted)
        self._require_approval_parties(caller, spender)
        current = self._allowances.get((caller, spender), 0)
        if current < subtracted:
            raise FailedDecreaseAllowance(spender, current, subtracted)
        self._set_allowance(caller, spender, current - subtracted)
        return [Approval(caller, spender, current - subtracted)]

    # ========================================================================
    # ADMINISTRATION (Mutating, owner-only, not pause-gated)
    # ========================================================================

    @_operation(OpKind.PAUSE)
    def pause(self, caller: str) -> List[Event]:
        """
        Raises:
            UnauthorizedAccount: If caller is not the owner
            EnforcedPause: If already paused
        """
        return [self.pause_gate.pause(caller)]

    @_operation(OpKind.UNPAUSE)
    def unpause(self, caller: str) -> List[Event]:
        """
        Raises:
            UnauthorizedAccount: If caller is not the owner
            ExpectedPause: If not paused
        """
        return [self.pause_gate.unpause(caller)]

    @_operation(OpKind.TRANSFER_OWNERSHIP)
    def transfer_ownership(self, caller: str, new_owner: str) -> List[Event]:
        """
        Raises:
            UnauthorizedAccount: If caller is not the owner
            InvalidOwner: If new_owner is the null identifier
        """
        return [self.access.transfer_ownership(caller, new_owner)]

    @_operation(OpKind.RENOUNCE_OWNERSHIP)
    def renounce_ownership(self, caller: str) -> List[Event]:
        return [self.access.renounce_ownership(caller)]

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def clone(self) -> TokenLedger:
        """
        Create an independent deep copy of this ledger.

        The clone shares no mutable state with the original: balances,
        allowances, owner, pause flag, event log and journal are all copied.
        Event subscribers are not carried over.
        """
        with self._lock:
            cloned = TokenLedger.__new__(TokenLedger)
            cloned.config = self.config
            cloned.verbose = self.verbose
            cloned.access = copy.copy(self.access)
            cloned.pause_gate = PauseGate(cloned.access, paused=self.pause_gate.paused)
            cloned.events = self.events.copy()
            cloned.receipts = list(self.receipts)
            cloned._balances = dict(self._balances)
            cloned._allowances = dict(self._allowances)
            cloned._total_supply = self._total_supply
            cloned._next_sequence = self._next_sequence
            cloned._lock = threading.RLock()
            return cloned

    def replay(self, from_receipt: int = 0) -> TokenLedger:
        """
        Build a fresh ledger from the configuration and re-execute the journal.

        Replaying from 0 reproduces identical state, receipts and event log.
        Starting later skips the earlier operations, which may make a later
        one fail.

        Args:
            from_receipt: Index of the first receipt to re-execute

        Returns:
            New TokenLedger with replayed state

        Raises:
            LedgerError: If a journaled operation is rejected during replay
        """
        replayed = TokenLedger(self.config, verbose=self.verbose)
        with self._lock:
            journal = list(self.receipts[from_receipt:])
        for receipt in journal:
            if receipt.op is OpKind.DEPLOY:
                continue
            operation = getattr(replayed, receipt.op.value)
            try:
                operation(receipt.caller, *receipt.args)
            except LedgerError as e:
                raise LedgerError(f"Replay failed at {receipt.exec_id}: {e}") from e
        return replayed
