"""Unit tests for the aging dashboard summary"""

import pytest
from datetime import timedelta

from club_ar.domain.exceptions import InvalidInputError
from club_ar.domain.models import AgingBucket, MemberLedger, SuspensionOverride
from club_ar.domain.reporting import AgingFilter, AgingSort, build_member_row, summarize_aging


@pytest.fixture
def ledgers(invoice_factory, as_of):
    return [
        MemberLedger("M1", [invoice_factory("M1-1", 95, 5000)]),
        MemberLedger("M2", [invoice_factory("M2-1", 45, 3000)]),
        MemberLedger(
            "M3",
            [invoice_factory("M3-1", 95, 2000)],
            override=SuspensionOverride.until_payment(granted_on=as_of - timedelta(days=1)),
        ),
        MemberLedger("M4", [invoice_factory("M4-1", 200, 0, amount_cents=900)]),
        MemberLedger("M5", [invoice_factory("M5-1", 10, 1000)]),
    ]


def test_bucket_totals(ledgers, as_of):
    summary = summarize_aging(ledgers, as_of)
    by_bucket = {b.bucket: b for b in summary.buckets}

    assert [b.bucket for b in summary.buckets] == list(AgingBucket)
    assert summary.total_outstanding_cents == 11_000
    assert by_bucket[AgingBucket.SUSPENDED].member_count == 1
    assert by_bucket[AgingBucket.SUSPENDED].total_cents == 5000
    assert by_bucket[AgingBucket.BUCKET_90].total_cents == 2000  # override holds M3 off suspension
    assert by_bucket[AgingBucket.BUCKET_60].member_count == 0
    assert by_bucket[AgingBucket.BUCKET_30].total_cents == 3000
    assert by_bucket[AgingBucket.CURRENT].total_cents == 1000
    assert by_bucket[AgingBucket.SUSPENDED].percentage == pytest.approx(5000 / 11_000 * 100)
    assert sum(b.percentage for b in summary.buckets) == pytest.approx(100.0)


def test_members_at_risk(ledgers, as_of):
    summary = summarize_aging(ledgers, as_of)

    assert summary.members_at_risk == 2
    assert summary.at_risk_percentage == pytest.approx(7000 / 11_000 * 100)


def test_zero_balance_members_omitted(ledgers, as_of):
    summary = summarize_aging(ledgers, as_of)

    assert summary.total_count == 4
    assert "M4" not in [row.member_id for row in summary.members]


def test_default_sort_balance_desc(ledgers, as_of):
    summary = summarize_aging(ledgers, as_of)
    assert [row.member_id for row in summary.members] == ["M1", "M2", "M3", "M5"]


def test_sort_days_desc(ledgers, as_of):
    summary = summarize_aging(ledgers, as_of, sort=AgingSort.DAYS_DESC)
    assert [row.member_id for row in summary.members] == ["M1", "M3", "M2", "M5"]


@pytest.mark.parametrize(
    "aging_filter,expected",
    [
        (AgingFilter.ALL, ["M1", "M2", "M3", "M5"]),
        (AgingFilter.DAYS_30_PLUS, ["M1", "M2", "M3"]),
        (AgingFilter.DAYS_60_PLUS, ["M1", "M3"]),
        (AgingFilter.DAYS_90_PLUS, ["M1", "M3"]),
        (AgingFilter.SUSPENDED, ["M1"]),
    ],
)
def test_filters(ledgers, as_of, aging_filter, expected):
    summary = summarize_aging(ledgers, as_of, aging_filter=aging_filter)

    assert [row.member_id for row in summary.members] == expected
    assert summary.total_count == len(expected)
    # bucket totals are never filtered
    assert summary.total_outstanding_cents == 11_000


def test_pagination(ledgers, as_of):
    summary = summarize_aging(ledgers, as_of, page=2, limit=2)

    assert [row.member_id for row in summary.members] == ["M3", "M5"]
    assert summary.total_count == 4


def test_invalid_page(ledgers, as_of):
    with pytest.raises(InvalidInputError):
        summarize_aging(ledgers, as_of, page=0)


@pytest.mark.parametrize("bad_filter", ["45+", "SUSPENDED", ""])
def test_unknown_filter_is_invalid_input(ledgers, as_of, bad_filter):
    with pytest.raises(InvalidInputError, match="Unknown filter"):
        summarize_aging(ledgers, as_of, aging_filter=bad_filter)


@pytest.mark.parametrize("bad_sort", ["balance-asc", "name"])
def test_unknown_sort_is_invalid_input(ledgers, as_of, bad_sort):
    with pytest.raises(InvalidInputError, match="Unknown sort"):
        summarize_aging(ledgers, as_of, sort=bad_sort)


def test_filter_and_sort_accept_plain_strings(ledgers, as_of):
    summary = summarize_aging(ledgers, as_of, aging_filter="90+", sort="name-asc")

    assert [row.member_id for row in summary.members] == ["M1", "M3"]


def test_empty_ledgers(as_of):
    summary = summarize_aging([], as_of)

    assert summary.total_count == 0
    assert summary.members == []
    assert all(b.percentage == 0.0 for b in summary.buckets)
    assert summary.at_risk_percentage == 0.0


def test_member_row_uses_oldest_open_invoice(invoice_factory, as_of):
    ledger = MemberLedger(
        "M9",
        [
            invoice_factory("A", 150, 0, amount_cents=500),  # settled, ignored
            invoice_factory("B", 70, 1200),
            invoice_factory("C", 15, 800),
        ],
    )
    row = build_member_row(ledger, as_of)

    assert row.balance_cents == 2000
    assert row.oldest_due_date == as_of - timedelta(days=70)
    assert row.days_outstanding == 70
    assert row.status == AgingBucket.BUCKET_60
