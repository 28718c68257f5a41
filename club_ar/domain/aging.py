"""Invoice aging classification"""

from datetime import date

from club_ar.domain.exceptions import InvalidInputError
from club_ar.domain.models import AgingBucket
from club_ar.utils.date_utils import days_between

# Highest bucket an invoice can reach; an open balance here makes the account suspendable
MAX_INVOICE_BUCKET = AgingBucket.BUCKET_90


def _require_date(value, name: str) -> date:
    if value is None or not isinstance(value, date):
        raise InvalidInputError(f"{name} must be a date, got {value!r}")
    return value


def days_overdue(due_date: date, as_of: date | None = None) -> int:
    """Whole days past due, floored at zero (not-yet-due invoices are 0)"""
    due_date = _require_date(due_date, "due_date")
    as_of = _require_date(as_of if as_of is not None else date.today(), "as_of")
    return max(0, days_between(due_date, as_of))


def classify(due_date: date, as_of: date | None = None) -> AgingBucket:
    """
    Map an invoice's due date to an aging bucket.

    Boundaries are inclusive on the lower bucket:
    - 0-30 days:  current
    - 31-60 days: bucket30
    - 61-90 days: bucket60
    - 91+ days:   bucket90

    Raises:
        InvalidInputError: due_date or as_of is missing or not a date
    """
    overdue = days_overdue(due_date, as_of)

    if overdue <= 30:
        return AgingBucket.CURRENT
    elif overdue <= 60:
        return AgingBucket.BUCKET_30
    elif overdue <= 90:
        return AgingBucket.BUCKET_60
    else:
        return AgingBucket.BUCKET_90


def is_suspension_eligible(bucket: AgingBucket) -> bool:
    return bucket.severity >= MAX_INVOICE_BUCKET.severity
