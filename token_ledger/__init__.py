"""
token_ledger - Fungible-Token Ledger

A deterministic token ledger: balances, allowances, owner-gated minting and a
global pause switch, with an append-only event log.

Usage:
    from token_ledger import TokenLedger, TokenConfig, NULL_ACCOUNT

    ledger = TokenLedger(TokenConfig.default("owner"), verbose=False)

    # Direct transfer
    ledger.transfer("owner", "alice", 1000)

    # Third-party spend
    ledger.approve("alice", "bob", 400)
    ledger.transfer_from("bob", "alice", "carol", 400)

    # Supply control
    ledger.mint("owner", "alice", 50)
    ledger.burn("alice", 25)

    # Freeze everything
    ledger.pause("owner")
"""

# Core types
from .core import (
    TokenView,
    TokenConfig,
    Receipt,
    LedgerSnapshot,
    OpKind,
    Event,
    Transfer,
    Approval,
    Paused,
    Unpaused,
    OwnershipTransferred,
    LedgerError,
    InvalidAccount,
    InvalidSender,
    InvalidReceiver,
    InvalidApprover,
    InvalidSpender,
    InvalidOwner,
    InsufficientBalance,
    InsufficientAllowance,
    FailedDecreaseAllowance,
    UnauthorizedAccount,
    PauseError,
    EnforcedPause,
    ExpectedPause,
    check_invariants,
    to_base_units,
    format_units,
    NULL_ACCOUNT,
    DEFAULT_NAME,
    DEFAULT_SYMBOL,
    DEFAULT_DECIMALS,
    DEFAULT_INITIAL_SUPPLY,
)

# Components
from .events import EventLog, DeliveryFailure
from .access import AccessControl, only_owner
from .pausable import PauseGate, when_not_paused

# Ledger
from .ledger import TokenLedger

__all__ = [
    # Core
    'TokenView', 'TokenConfig', 'Receipt', 'LedgerSnapshot', 'OpKind',
    'check_invariants', 'to_base_units', 'format_units',
    'NULL_ACCOUNT', 'DEFAULT_NAME', 'DEFAULT_SYMBOL', 'DEFAULT_DECIMALS',
    'DEFAULT_INITIAL_SUPPLY',
    # Events
    'Event', 'Transfer', 'Approval', 'Paused', 'Unpaused', 'OwnershipTransferred',
    'EventLog', 'DeliveryFailure',
    # Errors
    'LedgerError', 'InvalidAccount', 'InvalidSender', 'InvalidReceiver',
    'InvalidApprover', 'InvalidSpender', 'InvalidOwner',
    'InsufficientBalance', 'InsufficientAllowance', 'FailedDecreaseAllowance',
    'UnauthorizedAccount', 'PauseError', 'EnforcedPause', 'ExpectedPause',
    # Gates
    'AccessControl', 'only_owner', 'PauseGate', 'when_not_paused',
    # Ledger
    'TokenLedger',
]

__version__ = '1.0.0'
