"""
pausable.py - Global pause switch

PauseGate is a two-state machine:

    ACTIVE --pause(owner)--> PAUSED --unpause(owner)--> ACTIVE

The ledger starts ACTIVE. While PAUSED, every balance- or allowance-mutating
operation fails with EnforcedPause; reads are never gated. The
`when_not_paused` decorator composes the check in front of a ledger method so
it always runs before any arithmetic.
"""

from __future__ import annotations
from functools import wraps

from .access import AccessControl
from .core import EnforcedPause, ExpectedPause, Paused, Unpaused


class PauseGate:
    """
    Pause flag plus the owner-gated transitions that toggle it.

    Authorization is delegated to the shared AccessControl; the owner check
    runs before the state check.
    """

    def __init__(self, access: AccessControl, paused: bool = False):
        self.access = access
        self._paused = bool(paused)

    @property
    def paused(self) -> bool:
        return self._paused

    def require_not_paused(self) -> None:
        """
        Raises:
            EnforcedPause: If the gate is paused
        """
        if self._paused:
            raise EnforcedPause()

    def require_paused(self) -> None:
        """
        Raises:
            ExpectedPause: If the gate is not paused
        """
        if not self._paused:
            raise ExpectedPause()

    def pause(self, caller: str) -> Paused:
        """
        ACTIVE -> PAUSED.

        Raises:
            UnauthorizedAccount: If caller is not the owner
            EnforcedPause: If already paused
        """
        self.access.require_owner(caller)
        self.require_not_paused()
        self._paused = True
        return Paused(caller)

    def unpause(self, caller: str) -> Unpaused:
        """
        PAUSED -> ACTIVE.

        Raises:
            UnauthorizedAccount: If caller is not the owner
            ExpectedPause: If not paused
        """
        self.access.require_owner(caller)
        self.require_paused()
        self._paused = False
        return Unpaused(caller)


def when_not_paused(method):
    """
    Guard a ledger method so it fails with EnforcedPause while paused.

    The instance must expose its PauseGate as `self.pause_gate`.
    """
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        self.pause_gate.require_not_paused()
        return method(self, *args, **kwargs)

    return wrapper
