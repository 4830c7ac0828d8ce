#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Token Ledger Step by Step

This is a pedagogical demonstration of how the fungible-token ledger works.
Each step builds on the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:  Foundation      - Deployment, balances, transfers and rejections
  4-5:  Delegation      - Allowances, transfer_from, burn_from
  6-7:  Supply          - Owner-only minting, burning
  8-9:  Administration  - The pause switch, ownership transfer
  10:   Audit           - Receipts, replay and the conservation proof

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
import sys

from token_ledger import (
    TokenLedger, TokenConfig, LedgerError, Transfer,
    NULL_ACCOUNT, to_base_units, format_units,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    owner: str = "treasury"
    alice: str = "alice"
    bob: str = "bob"
    carol: str = "carol"

    alice_funding: str = "2500"
    bob_allowance: str = "400.5"
    mint_amount: str = "1000"
    burn_amount: str = "250"


CONFIG = DemoConfig()

INTERACTIVE = "--quick" not in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if INTERACTIVE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    """Print a section header within a step."""
    print(f"\n--- {text} ---\n")


def units(ledger: TokenLedger, amount: str) -> int:
    return to_base_units(amount, ledger.decimals)


def show(ledger: TokenLedger, amount: int) -> str:
    return f"{format_units(amount, ledger.decimals)} {ledger.symbol}"


def attempt(description: str, operation, *args):
    """Run an operation expected to fail and report the error."""
    print(f">>> {description}")
    try:
        operation(*args)
    except LedgerError as e:
        print(f"    rejected with {type(e).__name__}: {e}")
    else:
        print("    unexpectedly applied")


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_deploy() -> TokenLedger:
    step_header(1, "Deploying the Token",
        "See what a fresh deployment holds and which events it emits.")

    print(f">>> ledger = TokenLedger(TokenConfig.default({CONFIG.owner!r}))")
    ledger = TokenLedger(TokenConfig.default(CONFIG.owner))

    section_header("Initial State")
    print(f"Name / symbol:   {ledger.name} / {ledger.symbol}")
    print(f"Decimals:        {ledger.decimals}")
    print(f"Total supply:    {show(ledger, ledger.total_supply)}")
    print(f"Owner:           {ledger.owner}")
    print(f"Owner balance:   {show(ledger, ledger.balance_of(CONFIG.owner))}")

    section_header("Deployment Events")
    for index, event in ledger.events.replay():
        print(f"  [{index}] {event!r}")

    print("""
    Amounts are integers in base units. With 18 decimals, one whole token is
    10**18 base units. The whole supply starts with the owner.
    """)
    return ledger


def step_02_transfer(ledger: TokenLedger) -> TokenLedger:
    step_header(2, "A Simple Transfer",
        "Move tokens between holders and read back the receipt.")

    amount = units(ledger, CONFIG.alice_funding)
    receipt = ledger.transfer(CONFIG.owner, CONFIG.alice, amount)

    section_header("Receipt")
    print(f"  {receipt!r}")
    print(f"\nalice now holds {show(ledger, ledger.balance_of(CONFIG.alice))}")
    return ledger


def step_03_rejections(ledger: TokenLedger) -> TokenLedger:
    step_header(3, "Rejected Operations",
        "Failures raise a typed error and change nothing.")

    before = ledger.snapshot()
    attempt("transfer more than bob holds",
            ledger.transfer, CONFIG.bob, CONFIG.alice, 1)
    attempt("transfer to the null account",
            ledger.transfer, CONFIG.alice, NULL_ACCOUNT, 1)
    assert ledger.snapshot() == before

    print("\nThe snapshot before and after the rejections is identical.")
    return ledger


# ============================================================================
# PHASE 2: DELEGATION (Steps 4-5)
# ============================================================================

def step_04_allowance(ledger: TokenLedger) -> TokenLedger:
    step_header(4, "Allowances",
        "Let bob spend some of alice's tokens on their behalf.")

    allowance = units(ledger, CONFIG.bob_allowance)
    ledger.approve(CONFIG.alice, CONFIG.bob, allowance)
    half = allowance // 2
    ledger.transfer_from(CONFIG.bob, CONFIG.alice, CONFIG.carol, half)

    section_header("After transfer_from")
    print(f"carol balance:            {show(ledger, ledger.balance_of(CONFIG.carol))}")
    print(f"allowance(alice, bob):    {show(ledger, ledger.allowance(CONFIG.alice, CONFIG.bob))}")

    attempt("bob spends more than the remaining allowance",
            ledger.transfer_from, CONFIG.bob, CONFIG.alice, CONFIG.carol, allowance)
    return ledger


def step_05_burn_from(ledger: TokenLedger) -> TokenLedger:
    step_header(5, "Delegated Burning",
        "burn_from consumes allowance exactly like transfer_from.")

    remaining = ledger.allowance(CONFIG.alice, CONFIG.bob)
    supply = ledger.total_supply
    ledger.burn_from(CONFIG.bob, CONFIG.alice, remaining)

    print(f"\nallowance(alice, bob) is now {ledger.allowance(CONFIG.alice, CONFIG.bob)}")
    print(f"supply fell by {show(ledger, supply - ledger.total_supply)}")
    return ledger


# ============================================================================
# PHASE 3: SUPPLY (Steps 6-7)
# ============================================================================

def step_06_mint(ledger: TokenLedger) -> TokenLedger:
    step_header(6, "Minting",
        "Only the owner may create new tokens.")

    amount = units(ledger, CONFIG.mint_amount)
    attempt("alice tries to mint", ledger.mint, CONFIG.alice, CONFIG.alice, amount)
    ledger.mint(CONFIG.owner, CONFIG.carol, amount)
    print(f"\ntotal supply: {show(ledger, ledger.total_supply)}")
    return ledger


def step_07_burn(ledger: TokenLedger) -> TokenLedger:
    step_header(7, "Burning",
        "Any holder may destroy their own tokens.")

    ledger.burn(CONFIG.carol, units(ledger, CONFIG.burn_amount))
    print(f"\ncarol balance: {show(ledger, ledger.balance_of(CONFIG.carol))}")
    print(f"total supply:  {show(ledger, ledger.total_supply)}")
    return ledger


# ============================================================================
# PHASE 4: ADMINISTRATION (Steps 8-9)
# ============================================================================

def step_08_pause(ledger: TokenLedger) -> TokenLedger:
    step_header(8, "The Pause Switch",
        "While paused, nothing that moves balances or allowances applies.")

    ledger.pause(CONFIG.owner)
    attempt("alice transfers while paused", ledger.transfer, CONFIG.alice, CONFIG.bob, 1)
    attempt("alice approves while paused", ledger.approve, CONFIG.alice, CONFIG.bob, 1)
    attempt("owner mints while paused", ledger.mint, CONFIG.owner, CONFIG.owner, 1)
    attempt("owner pauses twice", ledger.pause, CONFIG.owner)

    print(f"\nReads still work: alice holds {show(ledger, ledger.balance_of(CONFIG.alice))}")
    ledger.unpause(CONFIG.owner)
    return ledger


def step_09_ownership(ledger: TokenLedger) -> TokenLedger:
    step_header(9, "Ownership Transfer",
        "Hand the owner role to someone else.")

    ledger.transfer_ownership(CONFIG.owner, CONFIG.alice)
    attempt("the old owner mints", ledger.mint, CONFIG.owner, CONFIG.owner, 1)
    ledger.mint(CONFIG.alice, CONFIG.alice, 1)
    print(f"\ncurrent owner: {ledger.owner}")
    return ledger


# ============================================================================
# PHASE 5: AUDIT (Step 10)
# ============================================================================

def step_10_audit(ledger: TokenLedger) -> TokenLedger:
    step_header(10, "Conservation Proof",
        "Supply equals the sum of balances, and the journal reproduces everything.")

    section_header("Holders")
    for account, balance in sorted(ledger.holders().items()):
        print(f"  {account:<10} {show(ledger, balance)}")

    result = ledger.verify_conservation()
    print(f"\nsum of balances: {show(ledger, result['sum_of_balances'])}")
    print(f"total supply:    {show(ledger, result['total_supply'])}")
    print(f"valid:           {result['valid']}")

    minted = sum(e.amount for e in ledger.events.of_type(Transfer) if e.source == NULL_ACCOUNT)
    burned = sum(e.amount for e in ledger.events.of_type(Transfer) if e.dest == NULL_ACCOUNT)
    print(f"minted - burned: {show(ledger, minted - burned)}")

    section_header("Replay")
    replayed = ledger.replay()
    same = replayed.snapshot() == ledger.snapshot() and replayed.receipts == ledger.receipts
    print(f"{len(ledger.receipts)} receipts replayed; identical state: {same}")
    return ledger


# ============================================================================
# MAIN
# ============================================================================

def run_demo(interactive: bool = True) -> TokenLedger:
    """Run every step in order and return the final ledger."""
    global INTERACTIVE
    INTERACTIVE = interactive

    print("=" * 70)
    print("       TOKEN LEDGER - INTERACTIVE TUTORIAL")
    print("=" * 70)

    steps = [
        step_02_transfer, step_03_rejections, step_04_allowance, step_05_burn_from,
        step_06_mint, step_07_burn, step_08_pause, step_09_ownership, step_10_audit,
    ]
    ledger = step_01_deploy()
    wait_for_enter()
    for step in steps:
        ledger = step(ledger)
        wait_for_enter()

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    You've learned:
      - Balances move by transfer, allowances by approve / transfer_from
      - Only the owner mints; anyone burns their own tokens
      - The pause switch freezes balances and allowances, not reads
      - Every applied operation leaves a receipt and its events
      - Supply always equals the sum of balances

    Run tests: pytest tests/
    """)
    return ledger


if __name__ == "__main__":
    run_demo(interactive=INTERACTIVE)
