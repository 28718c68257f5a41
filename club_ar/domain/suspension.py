"""Account suspension status derived from invoice aging"""

from datetime import date
from typing import Iterable

from club_ar.domain.aging import classify, is_suspension_eligible
from club_ar.domain.models import (
    AccountStatus,
    AgingBucket,
    Invoice,
    StatusEvaluation,
    SuspensionOverride,
)


def evaluate(
    invoices: Iterable[Invoice],
    override: SuspensionOverride | None = None,
    as_of: date | None = None,
) -> StatusEvaluation:
    """
    Derive an account's status from its open invoices.

    The account is suspended when any invoice with a positive balance sits in
    the maximal (91+ days) bucket. An active override forces the effective
    status to current but the raw status is still reported, so callers can
    show that an override is holding off a suspension.

    Status is recomputed from invoices on every call, never read from storage.
    """
    if as_of is None:
        as_of = date.today()

    worst_bucket = AgingBucket.CURRENT
    suspended_balance = 0

    for invoice in invoices:
        if not invoice.is_open:
            continue
        bucket = classify(invoice.due_date, as_of)
        if bucket.severity > worst_bucket.severity:
            worst_bucket = bucket
        if is_suspension_eligible(bucket):
            suspended_balance += invoice.balance_cents

    raw_status = AccountStatus.SUSPENDED if suspended_balance > 0 else AccountStatus.CURRENT
    override_active = override is not None and override.is_active(as_of)
    effective_status = AccountStatus.CURRENT if override_active else raw_status

    return StatusEvaluation(
        raw_status=raw_status,
        effective_status=effective_status,
        override_active=override_active,
        suspended_balance_cents=suspended_balance,
        worst_bucket=worst_bucket,
    )
