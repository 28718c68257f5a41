"""Aging dashboard summary across member ledgers"""

from datetime import date
from enum import Enum
from typing import Dict, Sequence

from club_ar.domain.aging import MAX_INVOICE_BUCKET, days_overdue
from club_ar.domain.exceptions import InvalidInputError
from club_ar.domain.models import (
    AgingBucket,
    AgingSummary,
    BucketSummary,
    MemberAgingRow,
    MemberLedger,
)
from club_ar.domain.suspension import evaluate


class AgingFilter(str, Enum):
    ALL = "all"
    DAYS_30_PLUS = "30+"
    DAYS_60_PLUS = "60+"
    DAYS_90_PLUS = "90+"
    SUSPENDED = "suspended"


class AgingSort(str, Enum):
    BALANCE_DESC = "balance-desc"
    DAYS_DESC = "days-desc"
    NAME_ASC = "name-asc"


# Minimum status severity each filter lets through
_FILTER_THRESHOLDS = {
    AgingFilter.ALL: AgingBucket.CURRENT,
    AgingFilter.DAYS_30_PLUS: AgingBucket.BUCKET_30,
    AgingFilter.DAYS_60_PLUS: AgingBucket.BUCKET_60,
    AgingFilter.DAYS_90_PLUS: AgingBucket.BUCKET_90,
    AgingFilter.SUSPENDED: AgingBucket.SUSPENDED,
}

AT_RISK_BUCKET = AgingBucket.BUCKET_60


def build_member_row(ledger: MemberLedger, as_of: date) -> MemberAgingRow | None:
    """One dashboard row per member with an open balance; None when nothing is owed"""
    open_invoices = [inv for inv in ledger.invoices if inv.is_open]
    if not open_invoices:
        return None

    status = evaluate(open_invoices, ledger.override, as_of)
    worst = AgingBucket.SUSPENDED if status.is_suspended else status.worst_bucket
    oldest_due = min(inv.due_date for inv in open_invoices)

    return MemberAgingRow(
        member_id=ledger.member_id,
        balance_cents=sum(inv.balance_cents for inv in open_invoices),
        oldest_due_date=oldest_due,
        days_outstanding=days_overdue(oldest_due, as_of),
        status=worst,
        override_active=status.override_active,
    )


_SORT_KEYS = {
    AgingSort.BALANCE_DESC: lambda r: (-r.balance_cents, r.member_id),
    AgingSort.DAYS_DESC: lambda r: (-r.days_outstanding, r.member_id),
    AgingSort.NAME_ASC: lambda r: r.member_id,
}


def _parse_option(enum_cls, value, name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(option.value for option in enum_cls)
        raise InvalidInputError(f"Unknown {name} {value!r}; expected one of: {allowed}") from None


def _percentage(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


def summarize_aging(
    ledgers: Sequence[MemberLedger],
    as_of: date | None = None,
    aging_filter: AgingFilter = AgingFilter.ALL,
    sort: AgingSort = AgingSort.BALANCE_DESC,
    page: int = 1,
    limit: int = 20,
) -> AgingSummary:
    """
    Bucket totals over every member plus one filtered, sorted page of member rows.

    A member lands in the `suspended` bucket when their effective status is
    suspended; otherwise in the bucket of their worst open invoice. Members
    at risk are those with any balance in the maximal bucket, whether or not
    an override holds the suspension off.
    """
    if as_of is None:
        as_of = date.today()
    if page < 1 or limit < 1:
        raise InvalidInputError("page and limit must be positive")
    aging_filter = _parse_option(AgingFilter, aging_filter, "filter")
    sort = _parse_option(AgingSort, sort, "sort")

    rows = [row for row in (build_member_row(ledger, as_of) for ledger in ledgers) if row is not None]

    totals: Dict[AgingBucket, int] = {bucket: 0 for bucket in AgingBucket}
    counts: Dict[AgingBucket, int] = {bucket: 0 for bucket in AgingBucket}
    for row in rows:
        totals[row.status] += row.balance_cents
        counts[row.status] += 1

    grand_total = sum(totals.values())
    buckets = [
        BucketSummary(
            bucket=bucket,
            label=bucket.label,
            member_count=counts[bucket],
            total_cents=totals[bucket],
            percentage=_percentage(totals[bucket], grand_total),
        )
        for bucket in AgingBucket
    ]

    members_at_risk = sum(1 for row in rows if row.status.severity >= MAX_INVOICE_BUCKET.severity)
    at_risk_amount = sum(amount for bucket, amount in totals.items() if bucket.severity >= AT_RISK_BUCKET.severity)

    threshold = _FILTER_THRESHOLDS[aging_filter]
    filtered = [row for row in rows if row.status.severity >= threshold.severity]
    ordered = sorted(filtered, key=_SORT_KEYS[sort])

    start = (page - 1) * limit
    return AgingSummary(
        as_of=as_of,
        buckets=buckets,
        members=ordered[start:start + limit],
        total_count=len(filtered),
        total_outstanding_cents=grand_total,
        members_at_risk=members_at_risk,
        at_risk_percentage=_percentage(at_risk_amount, grand_total),
    )
