"""Unit tests for the settlement calculator"""

import pytest
from datetime import timedelta

from club_ar.domain.allocation import allocate_fifo
from club_ar.domain.exceptions import InsufficientFundsError, InvalidInputError, OverAllocationError
from club_ar.domain.models import (
    AccountStatus,
    ClearingRule,
    SettlementStrategy,
    StatusTransition,
    StrategyKind,
    SuspensionOverride,
)
from club_ar.domain.settlement import apply_allocation, compute, total_settlement_funds
from club_ar.domain.suspension import evaluate


def test_fifo_payment_reinstates_suspended_member(suspended_account, as_of):
    """91+ invoice fully cleared by FIFO: suspended -> current"""
    result = compute(6000, 0, suspended_account, SettlementStrategy.fifo(), as_of=as_of)

    assert result.allocations == {"INV-1": 5000, "INV-2": 1000}
    assert result.credit_to_add_cents == 0
    assert result.balances_after == {"INV-1": 0, "INV-2": 2000}
    assert result.status_before.effective_status == AccountStatus.SUSPENDED
    assert result.status_after.effective_status == AccountStatus.CURRENT
    assert result.transition == StatusTransition.REINSTATEMENT
    assert result.will_reinstate is True
    assert result.outstanding_after_cents == 2000


def test_wht_adds_to_settlement_funds(suspended_account, as_of):
    """Cash plus withholding certificate together fund the allocation"""
    result = compute(7760, 240, suspended_account, SettlementStrategy.fifo(), as_of=as_of)

    assert result.total_funds_cents == 8000
    assert result.allocations == {"INV-1": 5000, "INV-2": 3000}
    assert result.credit_to_add_cents == 0


def test_partial_payment_still_suspended(suspended_account, as_of):
    result = compute(3000, 0, suspended_account, SettlementStrategy.fifo(), as_of=as_of)

    assert result.allocations == {"INV-1": 3000}
    assert result.transition == StatusTransition.STILL_SUSPENDED
    assert result.remaining_suspended_balance_cents == 2000
    assert result.outstanding_after_cents == 5000


def test_manual_allocation_skipping_oldest_stays_suspended(suspended_account, as_of):
    strategy = SettlementStrategy.manual({"INV-2": 3000})
    result = compute(3000, 0, suspended_account, strategy, as_of=as_of)

    assert result.strategy == StrategyKind.MANUAL
    assert result.transition == StatusTransition.STILL_SUSPENDED
    assert result.remaining_suspended_balance_cents == 5000


def test_current_account_no_change(invoice_factory, as_of):
    invoices = [invoice_factory("A", 20, 1000)]
    result = compute(1500, 0, invoices, SettlementStrategy.full(), as_of=as_of)

    assert result.transition == StatusTransition.NO_CHANGE
    assert result.credit_to_add_cents == 500
    assert result.balances_after == {"A": 0}


def test_balances_after_cover_unallocated_invoices(invoice_factory, as_of):
    invoices = [invoice_factory("A", 50, 1000), invoice_factory("B", 5, 700)]
    result = compute(400, 0, invoices, SettlementStrategy.fifo(), as_of=as_of)

    assert result.balances_after == {"A": 600, "B": 700}


def test_conservation(suspended_account, as_of):
    for payment in (0, 1, 4999, 8000, 9000):
        result = compute(payment, 100, suspended_account, SettlementStrategy.fifo(), as_of=as_of)
        assert result.total_allocated_cents + result.credit_to_add_cents == payment + 100


def test_compute_is_idempotent(suspended_account, as_of):
    """Same inputs with a fixed as_of give identical results"""
    first = compute(6000, 500, suspended_account, SettlementStrategy.fifo(), as_of=as_of)
    second = compute(6000, 500, suspended_account, SettlementStrategy.fifo(), as_of=as_of)

    assert first == second


def test_inputs_are_not_modified(suspended_account, as_of):
    compute(8000, 0, suspended_account, SettlementStrategy.full(), as_of=as_of)

    assert [inv.balance_cents for inv in suspended_account] == [5000, 3000]


def test_errors_propagate_without_clamping(suspended_account, as_of):
    with pytest.raises(OverAllocationError):
        compute(9000, 0, suspended_account, SettlementStrategy.manual({"INV-2": 3500}), as_of=as_of)

    with pytest.raises(InsufficientFundsError):
        compute(7000, 0, suspended_account, SettlementStrategy.full(), as_of=as_of)


def test_full_shortfall_falls_back_to_fifo(suspended_account, as_of):
    """Callers may retry with FIFO when full settlement is short"""
    try:
        result = compute(7000, 0, suspended_account, SettlementStrategy.full(), as_of=as_of)
    except InsufficientFundsError:
        result = compute(7000, 0, suspended_account, SettlementStrategy.fifo(), as_of=as_of)

    assert result.strategy == StrategyKind.FIFO
    assert result.allocations == {"INV-1": 5000, "INV-2": 2000}


@pytest.mark.parametrize("payment,wht", [(-1, 0), (100, -5)])
def test_negative_amounts_rejected(suspended_account, as_of, payment, wht):
    with pytest.raises(InvalidInputError):
        compute(payment, wht, suspended_account, SettlementStrategy.fifo(), as_of=as_of)


@pytest.mark.parametrize("payment,wht", [(True, 0), (5000, False), (5000.0, 0), (5000, 0.5)])
def test_non_integer_amounts_rejected(suspended_account, as_of, payment, wht):
    """bool and float are not money even though bool subclasses int"""
    with pytest.raises(InvalidInputError, match="integer minor units"):
        compute(payment, wht, suspended_account, SettlementStrategy.fifo(), as_of=as_of)


def test_supplied_status_before_is_used(suspended_account, invoice_factory, as_of):
    """A status computed earlier by the caller is reported as-is"""
    cached = evaluate([invoice_factory("X", 5, 10)], as_of=as_of)
    result = compute(6000, 0, suspended_account, SettlementStrategy.fifo(), cached, as_of=as_of)

    assert result.status_before == cached
    assert result.transition == StatusTransition.NO_CHANGE


def test_until_payment_override_clears_when_max_bucket_paid(suspended_account, as_of):
    override = SuspensionOverride.until_payment(granted_on=as_of - timedelta(days=2))
    result = compute(5000, 0, suspended_account, SettlementStrategy.fifo(), override=override, as_of=as_of)

    assert result.status_before.override_active is True
    assert result.status_before.raw_status == AccountStatus.SUSPENDED
    assert result.override_cleared is True
    assert result.status_after.override_active is False
    assert result.status_after.raw_status == AccountStatus.CURRENT
    assert result.transition == StatusTransition.NO_CHANGE


def test_until_payment_override_kept_under_fully_paid_rule(suspended_account, as_of):
    override = SuspensionOverride.until_payment(granted_on=as_of - timedelta(days=2))
    result = compute(
        6000,
        0,
        suspended_account,
        SettlementStrategy.fifo(),
        override=override,
        as_of=as_of,
        clearing_rule=ClearingRule.FULLY_PAID,
    )

    assert result.override_cleared is False
    assert result.status_after.override_active is True

    full = compute(
        8000,
        0,
        suspended_account,
        SettlementStrategy.full(),
        override=override,
        as_of=as_of,
        clearing_rule=ClearingRule.FULLY_PAID,
    )
    assert full.override_cleared is True


def test_partial_payment_does_not_clear_override(suspended_account, as_of):
    override = SuspensionOverride.until_payment(granted_on=as_of)
    result = compute(1000, 0, suspended_account, SettlementStrategy.fifo(), override=override, as_of=as_of)

    assert result.override_cleared is False
    assert result.status_after.effective_status == AccountStatus.CURRENT
    assert result.status_after.raw_status == AccountStatus.SUSPENDED


def test_fixed_override_never_cleared_by_payment(suspended_account, as_of):
    override = SuspensionOverride.for_days(granted_on=as_of, days=7)
    result = compute(8000, 0, suspended_account, SettlementStrategy.full(), override=override, as_of=as_of)

    assert result.override_cleared is False


def test_apply_allocation_and_total_funds(suspended_account):
    allocation = allocate_fifo(5500, suspended_account)
    settled = apply_allocation(suspended_account, allocation)

    assert [inv.balance_cents for inv in settled] == [0, 2500]
    assert total_settlement_funds(5000, 250) == 5250
