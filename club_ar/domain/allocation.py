"""Payment allocation strategies: manual (validated), FIFO and full settlement"""

import re
from typing import Dict, List, Sequence, Tuple

from club_ar.domain.exceptions import (
    FundsExceededError,
    InsufficientFundsError,
    InvalidInputError,
    NegativeAllocationError,
    OverAllocationError,
    UnknownInvoiceError,
)
from club_ar.domain.models import AllocationResult, Invoice, SettlementStrategy, StrategyKind, is_minor_units


def _index_invoices(invoices: Sequence[Invoice]) -> Dict[str, Invoice]:
    by_id: Dict[str, Invoice] = {}
    for invoice in invoices:
        if invoice.invoice_id in by_id:
            raise InvalidInputError(f"Duplicate invoice {invoice.invoice_id}")
        by_id[invoice.invoice_id] = invoice
    return by_id


def _check_funds(funds_cents: int) -> None:
    if not is_minor_units(funds_cents):
        raise InvalidInputError("Settlement funds must be integer minor units")
    if funds_cents < 0:
        raise InvalidInputError(f"Settlement funds cannot be negative ({funds_cents})")


_DIGITS = re.compile(r"(\d+)")


def natural_id_key(invoice_id: str) -> Tuple:
    """Sort key that compares digit runs numerically, so INV-9 comes before INV-10"""
    return tuple((0, int(part), "") if part.isdigit() else (1, 0, part) for part in _DIGITS.split(invoice_id) if part)


def fifo_order(invoices: Sequence[Invoice]) -> List[Invoice]:
    """
    Oldest due date first.

    Invoices due the same day are ordered by id in natural order (INV-9 before
    INV-10), so the result never depends on input order.
    """
    return sorted(invoices, key=lambda inv: (inv.due_date, natural_id_key(inv.invoice_id), inv.invoice_id))


def validate_manual_allocation(
    funds_cents: int,
    invoices: Sequence[Invoice],
    proposed: Dict[str, int],
) -> AllocationResult:
    """
    Validate a caller-supplied allocation map.

    Nothing is computed here: the map is returned unchanged when every entry
    is within its invoice's balance and the total fits within the funds.

    Raises:
        UnknownInvoiceError: entry names an invoice not in `invoices`
        NegativeAllocationError: entry below zero
        OverAllocationError: entry above the invoice balance
        FundsExceededError: entries sum to more than the funds
    """
    _check_funds(funds_cents)
    by_id = _index_invoices(invoices)

    for invoice_id, amount in proposed.items():
        invoice = by_id.get(invoice_id)
        if invoice is None:
            raise UnknownInvoiceError(invoice_id)
        if not is_minor_units(amount):
            raise InvalidInputError(f"Allocation for invoice {invoice_id} must be integer minor units")
        if amount < 0:
            raise NegativeAllocationError(invoice_id, amount)
        if amount > invoice.balance_cents:
            raise OverAllocationError(invoice_id, amount, invoice.balance_cents)

    total = sum(proposed.values())
    if total > funds_cents:
        raise FundsExceededError(total, funds_cents)

    return AllocationResult(
        allocations=dict(proposed),
        total_funds_cents=funds_cents,
        credit_to_add_cents=funds_cents - total,
    )


def allocate_fifo(funds_cents: int, invoices: Sequence[Invoice]) -> AllocationResult:
    """
    Apply funds oldest-invoice-first.

    Each invoice takes min(remaining, balance) until funds run out; whatever
    is left after the last invoice becomes credit. Only invoices that receive
    money appear in the allocation map.
    """
    _check_funds(funds_cents)
    _index_invoices(invoices)

    allocations: Dict[str, int] = {}
    remaining = funds_cents

    for invoice in fifo_order(invoices):
        if remaining == 0:
            break
        if not invoice.is_open:
            continue

        allocated = min(remaining, invoice.balance_cents)
        allocations[invoice.invoice_id] = allocated
        remaining -= allocated

    return AllocationResult(
        allocations=allocations,
        total_funds_cents=funds_cents,
        credit_to_add_cents=remaining,
    )


def allocate_full(funds_cents: int, invoices: Sequence[Invoice]) -> AllocationResult:
    """
    Settle every open invoice in full.

    Raises:
        InsufficientFundsError: funds do not cover the sum of balances.
            Callers may fall back to FIFO.
    """
    _check_funds(funds_cents)
    _index_invoices(invoices)

    required = sum(inv.balance_cents for inv in invoices)
    if funds_cents < required:
        raise InsufficientFundsError(required, funds_cents)

    allocations = {inv.invoice_id: inv.balance_cents for inv in fifo_order(invoices) if inv.is_open}

    return AllocationResult(
        allocations=allocations,
        total_funds_cents=funds_cents,
        credit_to_add_cents=funds_cents - required,
    )


def allocate(
    strategy: SettlementStrategy,
    funds_cents: int,
    invoices: Sequence[Invoice],
) -> AllocationResult:
    """Dispatch to the allocation algorithm for the chosen strategy"""
    if strategy.kind == StrategyKind.MANUAL:
        return validate_manual_allocation(funds_cents, invoices, strategy.manual_allocations)
    elif strategy.kind == StrategyKind.FIFO:
        return allocate_fifo(funds_cents, invoices)
    elif strategy.kind == StrategyKind.FULL:
        return allocate_full(funds_cents, invoices)

    raise InvalidInputError(f"Unknown settlement strategy: {strategy.kind!r}")
