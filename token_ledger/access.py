"""
access.py - Single-owner access control

AccessControl holds the one privileged identity. Owner-only operations consult
`require_owner(caller)` before doing anything else; the `only_owner` decorator
applies that check in front of a ledger method.

Ownership can be handed over (`transfer_ownership`) or given up
(`renounce_ownership`). After renouncing, the owner is NULL_ACCOUNT and every
owner-only operation fails for every caller.
"""

from __future__ import annotations
from functools import wraps

from .core import (
    NULL_ACCOUNT,
    InvalidOwner, UnauthorizedAccount,
    OwnershipTransferred,
    require_account,
)


class AccessControl:
    """
    Owner storage and authorization predicate.

    State mutators return the event describing the change; the caller decides
    when to publish it.
    """

    def __init__(self, owner: str):
        require_account(owner)
        if owner == NULL_ACCOUNT:
            raise InvalidOwner(owner)
        self._owner = owner

    @property
    def owner(self) -> str:
        return self._owner

    def is_owner(self, caller: str) -> bool:
        """True if `caller` is the current owner. Never true once renounced."""
        return self._owner != NULL_ACCOUNT and caller == self._owner

    def require_owner(self, caller: str) -> None:
        """
        Raises:
            UnauthorizedAccount: If caller is not the owner
        """
        if not self.is_owner(caller):
            raise UnauthorizedAccount(caller)

    def transfer_ownership(self, caller: str, new_owner: str) -> OwnershipTransferred:
        """
        Owner-only: hand ownership to `new_owner`.

        Raises:
            UnauthorizedAccount: If caller is not the owner
            InvalidOwner: If new_owner is the null identifier
        """
        self.require_owner(caller)
        require_account(new_owner)
        if new_owner == NULL_ACCOUNT:
            raise InvalidOwner(new_owner)
        previous = self._owner
        self._owner = new_owner
        return OwnershipTransferred(previous, new_owner)

    def renounce_ownership(self, caller: str) -> OwnershipTransferred:
        """Owner-only: leave the ledger without an owner."""
        self.require_owner(caller)
        previous = self._owner
        self._owner = NULL_ACCOUNT
        return OwnershipTransferred(previous, NULL_ACCOUNT)


def only_owner(method):
    """
    Guard a ledger method so it runs only for the owner.

    The wrapped method's first argument after self must be the caller, and the
    instance must expose its AccessControl as `self.access`.
    """
    @wraps(method)
    def wrapper(self, caller, *args, **kwargs):
        self.access.require_owner(caller)
        return method(self, caller, *args, **kwargs)

    return wrapper
