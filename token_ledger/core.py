"""
Core types and pure functions for the token ledger.

This module provides the foundational data structures for the ledger:
1. Protocols: TokenView for read-only ledger access
2. Immutable data structures: events, TokenConfig, Receipt, LedgerSnapshot
3. Exceptions: LedgerError and the token error taxonomy
4. Type aliases: Balances, Allowances
5. Pure helpers: unit conversion, input validation, invariant checks

Nothing in this module mutates ledger state.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import (
    Any, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple,
    runtime_checkable,
)


# ============================================================================
# CONSTANTS
# ============================================================================

# Reserved "no account" identifier. Minted supply appears to come from it and
# burned supply appears to go to it; it never holds a balance.
NULL_ACCOUNT = "0x0000000000000000000000000000000000000000"

# Reference deployment parameters.
DEFAULT_NAME = "MyToken"
DEFAULT_SYMBOL = "MTK"
DEFAULT_DECIMALS = 18
DEFAULT_INITIAL_SUPPLY = 10_000_000  # whole tokens, scaled by 10**decimals

# Decimals are a uint8 on the wire.
MAX_DECIMALS = 255


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Mapping from account identifier to its non-zero balance.
Balances = Dict[str, int]

# Mapping from (owner, spender) to the non-zero remaining allowance.
Allowances = Dict[Tuple[str, str], int]


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class TokenView(Protocol):
    """
    Read-only interface to token state.

    Functions accepting a TokenView declare their read-only intent. TokenLedger
    and LedgerSnapshot both implement it; tests use FakeView.
    """

    @property
    def total_supply(self) -> int:
        ...

    def balance_of(self, account: str) -> int:
        """Return the balance of `account` (0 for unknown accounts)."""
        ...

    def allowance(self, owner: str, spender: str) -> int:
        """Return what `spender` may still move out of `owner` (0 if unset)."""
        ...


# ============================================================================
# ENUMS
# ============================================================================

class OpKind(Enum):
    """Operations recorded in the receipt journal."""
    DEPLOY = "deploy"
    TRANSFER = "transfer"
    APPROVE = "approve"
    INCREASE_ALLOWANCE = "increase_allowance"
    DECREASE_ALLOWANCE = "decrease_allowance"
    TRANSFER_FROM = "transfer_from"
    MINT = "mint"
    BURN = "burn"
    BURN_FROM = "burn_from"
    PAUSE = "pause"
    UNPAUSE = "unpause"
    TRANSFER_OWNERSHIP = "transfer_ownership"
    RENOUNCE_OWNERSHIP = "renounce_ownership"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all rejected ledger operations."""
    pass


class InvalidAccount(LedgerError):
    """The null identifier was used in a role that forbids it."""

    role = "account"

    def __init__(self, account: str):
        self.account = account
        super().__init__(account)

    def __str__(self) -> str:
        return f"invalid {self.role}: {self.account}"


class InvalidSender(InvalidAccount):
    """Raised when the null identifier would send or burn tokens."""
    role = "sender"


class InvalidReceiver(InvalidAccount):
    """Raised when the null identifier would receive transferred or minted tokens."""
    role = "receiver"


class InvalidApprover(InvalidAccount):
    """Raised when the null identifier would grant an allowance."""
    role = "approver"


class InvalidSpender(InvalidAccount):
    """Raised when the null identifier would be granted an allowance."""
    role = "spender"


class InvalidOwner(InvalidAccount):
    """Raised when ownership would be assigned to the null identifier."""
    role = "owner"


class InsufficientBalance(LedgerError):
    """Raised when a debit would drive a balance below zero."""

    def __init__(self, account: str, available: int, requested: int):
        self.account = account
        self.available = available
        self.requested = requested
        super().__init__(account, available, requested)

    def __str__(self) -> str:
        return f"{self.account} balance {self.available} < {self.requested}"


class InsufficientAllowance(LedgerError):
    """Raised when a spend would drive an allowance below zero."""

    def __init__(self, spender: str, available: int, requested: int):
        self.spender = spender
        self.available = available
        self.requested = requested
        super().__init__(spender, available, requested)

    def __str__(self) -> str:
        return f"{self.spender} allowance {self.available} < {self.requested}"


class FailedDecreaseAllowance(LedgerError):
    """Raised when decrease_allowance would take an allowance below zero."""

    def __init__(self, spender: str, current: int, requested: int):
        self.spender = spender
        self.current = current
        self.requested = requested
        super().__init__(spender, current, requested)

    def __str__(self) -> str:
        return f"{self.spender} allowance {self.current} cannot decrease by {self.requested}"


class UnauthorizedAccount(LedgerError):
    """Raised when an owner-only operation is invoked by anyone but the owner."""

    def __init__(self, account: str):
        self.account = account
        super().__init__(account)

    def __str__(self) -> str:
        return f"{self.account} is not the owner"


class PauseError(LedgerError):
    """Base for pause-state mismatches."""
    pass


class EnforcedPause(PauseError):
    """Raised when a gated operation (or pause itself) runs while paused."""

    def __str__(self) -> str:
        return "ledger is paused"


class ExpectedPause(PauseError):
    """Raised when unpause runs while the ledger is active."""

    def __str__(self) -> str:
        return "ledger is not paused"


# ============================================================================
# EVENTS
# ============================================================================

class Event:
    """
    Base for emitted notifications.

    Subclasses are frozen dataclasses; their field order is the event's
    argument order.
    """

    __slots__ = ()

    @property
    def name(self) -> str:
        return type(self).__name__

    def args(self) -> Tuple[Any, ...]:
        """Return the event arguments in declaration order."""
        return tuple(getattr(self, f.name) for f in fields(self))

    def __repr__(self) -> str:
        return f"{self.name}({', '.join(repr(a) for a in self.args())})"


@dataclass(frozen=True, slots=True, repr=False)
class Transfer(Event):
    """Balance movement. `source` is null for mints, `dest` is null for burns."""
    source: str
    dest: str
    amount: int


@dataclass(frozen=True, slots=True, repr=False)
class Approval(Event):
    owner: str
    spender: str
    amount: int


@dataclass(frozen=True, slots=True, repr=False)
class Paused(Event):
    account: str


@dataclass(frozen=True, slots=True, repr=False)
class Unpaused(Event):
    account: str


@dataclass(frozen=True, slots=True, repr=False)
class OwnershipTransferred(Event):
    previous_owner: str
    new_owner: str


# ============================================================================
# INPUT VALIDATION
# ============================================================================

def require_account(account: Any) -> str:
    """
    Validate an account identifier.

    Raises:
        TypeError: If account is not a string
        ValueError: If account is empty or blank
    """
    if not isinstance(account, str):
        raise TypeError(f"Account must be str, got {type(account).__name__}")
    if not account.strip():
        raise ValueError("Account cannot be empty")
    return account


def require_amount(amount: Any) -> int:
    """
    Validate a token amount in base units.

    Raises:
        TypeError: If amount is not an int (bool is rejected)
        ValueError: If amount is negative
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"Amount must be int, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError(f"Amount must be non-negative, got {amount}")
    return amount


# ============================================================================
# UNIT CONVERSION
# ============================================================================

def to_base_units(amount: Any, decimals: int = DEFAULT_DECIMALS) -> int:
    """
    Convert a display amount to integer base units.

    Args:
        amount: Whole-token amount as int, Decimal or numeric string
        decimals: Token decimal precision

    Returns:
        amount * 10**decimals as an int

    Raises:
        TypeError: If the amount is a float
        ValueError: If the amount is negative, not a number, or has more
                    fractional digits than `decimals` allows

    Example:
        to_base_units("1.5", 18) == 1_500_000_000_000_000_000
    """
    if isinstance(amount, float):
        raise TypeError("Use Decimal or str for fractional amounts, not float")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except InvalidOperation:
        raise ValueError(f"Not a number: {amount!r}") from None
    if not value.is_finite():
        raise ValueError(f"Amount must be finite, got {amount!r}")
    if value < 0:
        raise ValueError(f"Amount must be non-negative, got {amount!r}")

    # Integer arithmetic on the digit tuple; Decimal context precision never applies.
    _, digits, exponent = value.as_tuple()
    coefficient = int("".join(map(str, digits))) if digits else 0
    shift = exponent + decimals
    if shift >= 0:
        return coefficient * 10 ** shift
    whole, dust = divmod(coefficient, 10 ** -shift)
    if dust:
        raise ValueError(f"{amount!r} has more than {decimals} decimal places")
    return whole


def format_units(amount: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """
    Render base units as a display string with trailing zeros removed.

    Example:
        format_units(1_500_000_000_000_000_000, 18) == "1.5"
    """
    require_amount(amount)
    whole, frac = divmod(amount, 10 ** decimals)
    if not frac:
        return str(whole)
    return f"{whole}.{str(frac).rjust(decimals, '0').rstrip('0')}"


# ============================================================================
# CONFIGURATION
# ============================================================================

def _require_decimals(decimals: Any) -> None:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise TypeError(f"Decimals must be int, got {type(decimals).__name__}")
    if not 0 <= decimals <= MAX_DECIMALS:
        raise ValueError(f"Decimals must be in [0, {MAX_DECIMALS}], got {decimals}")


@dataclass(frozen=True, slots=True)
class TokenConfig:
    """
    Construction-time token parameters.

    Attributes:
        initial_owner: Owner identity; receives the initial supply.
        name: Display name.
        symbol: Ticker symbol.
        decimals: Display precision (0..255).
        initial_supply: Supply minted to the owner at construction, in base units.

    All fields are validated in __post_init__. The null owner is rejected by
    the ledger itself (InvalidOwner), not here.
    """
    initial_owner: str
    name: str = DEFAULT_NAME
    symbol: str = DEFAULT_SYMBOL
    decimals: int = DEFAULT_DECIMALS
    initial_supply: int = 0

    def __post_init__(self):
        require_account(self.initial_owner)
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Token name cannot be empty")
        if not isinstance(self.symbol, str) or not self.symbol.strip():
            raise ValueError("Token symbol cannot be empty")
        _require_decimals(self.decimals)
        require_amount(self.initial_supply)

    @classmethod
    def default(cls, initial_owner: str) -> TokenConfig:
        """Reference deployment: 10,000,000 MTK (18 decimals) to the owner."""
        return cls(
            initial_owner=initial_owner,
            initial_supply=DEFAULT_INITIAL_SUPPLY * 10 ** DEFAULT_DECIMALS,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TokenConfig:
        """
        Build a config from a plain mapping (e.g. parsed deployment parameters).

        Accepts either `initial_supply` (base units) or `initial_supply_tokens`
        (whole tokens, scaled by decimals). Unknown keys are rejected.
        """
        known = {"initial_owner", "name", "symbol", "decimals",
                 "initial_supply", "initial_supply_tokens"}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        if "initial_owner" not in data:
            raise ValueError("Config requires initial_owner")
        if "initial_supply" in data and "initial_supply_tokens" in data:
            raise ValueError("Give initial_supply or initial_supply_tokens, not both")

        decimals = data.get("decimals", DEFAULT_DECIMALS)
        supply = data.get("initial_supply", 0)
        if "initial_supply_tokens" in data:
            _require_decimals(decimals)
            supply =to_base_units(data["initial_supply_tokens"], decimals)
        return cls(
            initial_owner=data["initial_owner"],
            name=data.get("name", DEFAULT_NAME),
            symbol=data.get("symbol", DEFAULT_SYMBOL),
            decimals=decimals,
            initial_supply=supply,
        )


# ============================================================================
# RECEIPTS
# ============================================================================

@dataclass(frozen=True, slots=True)
class Receipt:
    """
    Immutable record of one successful operation - represents FACT.

    Attributes:
        sequence_number: Monotonic position within the ledger's journal
        exec_id: Unique execution identifier (symbol + sequence)
        op: Which operation ran
        caller: Authenticated identity that invoked it
        args: Positional arguments after caller, as passed
        events: Events emitted by the operation, in emission order
    """
    sequence_number: int
    exec_id: str
    op: OpKind
    caller: str
    args: Tuple[Any, ...]
    events: Tuple[Event, ...] = ()

    def __repr__(self) -> str:
        rendered = ", ".join(repr(a) for a in (self.caller, *self.args))
        return f"Receipt(#{self.sequence_number} {self.op.value}({rendered}) -> {list(self.events)})"


# ============================================================================
# SNAPSHOTS
# ============================================================================

@dataclass(frozen=True, slots=True)
class LedgerSnapshot:
    """
    Consistent point-in-time copy of ledger state. Implements TokenView.

    Snapshot maps are private copies; mutating them does not affect the ledger.
    Snapshots compare by value but are not hashable.
    """
    __hash__ = None
    balances: Balances
    allowances: Allowances
    total_supply: int
    owner: str
    paused: bool
    event_count: int = 0
    sequence_number: int = 0

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get((owner, spender), 0)


# ============================================================================
# INVARIANT CHECKS
# ============================================================================

def check_invariants(view: TokenView, accounts: Iterable[str]) -> Dict[str, Any]:
    """
    Check conservation and null-account invariants over `accounts`.

    Conservation requires that `accounts` cover every holder: the sum of their
    balances must equal the view's total supply.

    Returns:
        Dict with keys:
        - 'valid': bool - True if every check passed
        - 'total_supply': int
        - 'sum_of_balances': int
        - 'discrepancies': List[Dict] - one entry per failed check
    """
    discrepancies: List[Dict[str, Any]] = []
    total = 0
    for account in sorted(set(accounts)):
        balance = view.balance_of(account)
        if balance < 0:
            discrepancies.append({'check': 'non_negative', 'account': account, 'balance': balance})
        total += balance

    null_balance = view.balance_of(NULL_ACCOUNT)
    if null_balance != 0:
        discrepancies.append({'check': 'null_account', 'balance': null_balance})

    supply = view.total_supply
    if supply != total:
        discrepancies.append({
            'check': 'conservation',
            'expected': supply,
            'actual': total,
            'difference': supply - total,
        })

    return {
        'valid': not discrepancies,
        'total_supply': supply,
        'sum_of_balances': total,
        'discrepancies': discrepancies,
    }
