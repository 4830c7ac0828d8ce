"""
accounts.py - Account identifiers and reference deployment constants for tests
"""

from token_ledger import NULL_ACCOUNT, DEFAULT_INITIAL_SUPPLY, DEFAULT_DECIMALS


OWNER = "0x90F79bf6EB2c4f870365E785982E1f101E93b906"
ACCT1 = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
ACCT2 = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
ACCT3 = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"

NAME = "MyToken"
SYMBOL = "MTK"
DECIMALS = DEFAULT_DECIMALS
INIT_SUPPLY = DEFAULT_INITIAL_SUPPLY * 10 ** DECIMALS
TEST_AMOUNT = 1000

ZERO_ADDRESS = NULL_ACCOUNT
