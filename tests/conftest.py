"""
conftest.py - Shared pytest fixtures for token ledger tests

Provides common fixtures used across unit and scenario tests:
- The reference deployment (10,000,000 MTK, 18 decimals, credited to owner)
- Funded and paused variants
- A small-supply ledger
- Comparison utilities
"""

import pytest

from token_ledger import TokenLedger, TokenConfig

from tests.accounts import OWNER, ACCT1, TEST_AMOUNT
from tests.harness import ledger_state, new_ledger


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def token():
    """Reference deployment, silent."""
    return TokenLedger(TokenConfig.default(OWNER), verbose=False)


@pytest.fixture
def small_token():
    """Owner holds 10,000 base units of a 0-decimal token."""
    return new_ledger()


@pytest.fixture
def funded_token(token):
    """Reference deployment with acct1 holding TEST_AMOUNT."""
    token.transfer(OWNER, ACCT1, TEST_AMOUNT)
    return token


@pytest.fixture
def paused_token(token):
    """Reference deployment, paused by the owner."""
    token.pause(OWNER)
    return token


@pytest.fixture
def state_of():
    """Expose ledger_state to tests as a fixture."""
    return ledger_state
