"""Settlement calculator - core business logic for applying a payment to open invoices"""

from datetime import date
from typing import Dict, List, Sequence

from club_ar.domain.allocation import allocate
from club_ar.domain.exceptions import InvalidInputError
from club_ar.domain.models import (
    AllocationResult,
    ClearingRule,
    Invoice,
    OverrideKind,
    SettlementResult,
    SettlementStrategy,
    StatusEvaluation,
    StatusTransition,
    SuspensionOverride,
    is_minor_units,
)
from club_ar.domain.suspension import evaluate


def total_settlement_funds(payment_cents: int, wht_cents: int) -> int:
    """Cash/transfer payment plus the withholding-tax certificate amount"""
    for name, value in (("payment", payment_cents), ("wht", wht_cents)):
        if not is_minor_units(value):
            raise InvalidInputError(f"{name} amount must be integer minor units")
        if value < 0:
            raise InvalidInputError(f"{name} amount cannot be negative ({value})")
    return payment_cents + wht_cents


def apply_allocation(invoices: Sequence[Invoice], allocation: AllocationResult) -> List[Invoice]:
    """Hypothetical post-settlement invoice set; the inputs are left untouched"""
    return [
        inv.with_balance(inv.balance_cents - allocation.allocations.get(inv.invoice_id, 0))
        for inv in invoices
    ]


def determine_transition(before: StatusEvaluation, after: StatusEvaluation) -> StatusTransition:
    if before.is_suspended and not after.is_suspended:
        return StatusTransition.REINSTATEMENT
    elif before.is_suspended and after.is_suspended:
        return StatusTransition.STILL_SUSPENDED
    return StatusTransition.NO_CHANGE


def _clears_override(
    override: SuspensionOverride | None,
    clearing_rule: ClearingRule,
    allocation: AllocationResult,
    after: StatusEvaluation,
    outstanding_after: int,
) -> bool:
    """Whether this settlement counts as the payment an until-payment override waits for"""
    if override is None or override.kind != OverrideKind.UNTIL_PAYMENT or override.payment_cleared:
        return False
    if allocation.total_allocated_cents == 0:
        return False

    if clearing_rule == ClearingRule.MAX_BUCKET_CLEARED:
        return after.suspended_balance_cents == 0
    elif clearing_rule == ClearingRule.FULLY_PAID:
        return outstanding_after == 0

    raise InvalidInputError(f"Unknown override clearing rule: {clearing_rule!r}")


def compute(
    payment_cents: int,
    wht_cents: int,
    invoices: Sequence[Invoice],
    strategy: SettlementStrategy,
    status_before: StatusEvaluation | None = None,
    *,
    override: SuspensionOverride | None = None,
    as_of: date | None = None,
    clearing_rule: ClearingRule = ClearingRule.MAX_BUCKET_CLEARED,
) -> SettlementResult:
    """
    Main entry point: preview the effect of a payment on an account.

    Flow:
    1. Total funds = payment + WHT
    2. Allocate funds with the chosen strategy (errors propagate unchanged)
    3. Balances after = balance - allocation for every invoice
    4. Evaluate suspension before and after, report the transition

    Nothing is persisted; the caller applies the result within its own
    transaction. With a fixed `as_of` the result depends only on the inputs.
    """
    if as_of is None:
        as_of = date.today()

    invoices = list(invoices)
    funds = total_settlement_funds(payment_cents, wht_cents)
    allocation = allocate(strategy, funds, invoices)

    settled = apply_allocation(invoices, allocation)
    balances_after: Dict[str, int] = {inv.invoice_id: inv.balance_cents for inv in settled}
    outstanding_after = sum(balances_after.values())

    if status_before is None:
        status_before = evaluate(invoices, override, as_of)

    # Evaluate once without touching the override to learn whether it clears
    after_uncleared = evaluate(settled, override, as_of)
    override_cleared = _clears_override(override, clearing_rule, allocation, after_uncleared, outstanding_after)
    status_after = evaluate(settled, override.cleared(), as_of) if override_cleared else after_uncleared

    return SettlementResult(
        strategy=strategy.kind,
        payment_cents=payment_cents,
        wht_cents=wht_cents,
        total_funds_cents=funds,
        allocations=dict(allocation.allocations),
        credit_to_add_cents=allocation.credit_to_add_cents,
        balances_after=balances_after,
        status_before=status_before,
        status_after=status_after,
        transition=determine_transition(status_before, status_after),
        remaining_suspended_balance_cents=status_after.suspended_balance_cents,
        outstanding_after_cents=outstanding_after,
        override_cleared=override_cleared,
    )
