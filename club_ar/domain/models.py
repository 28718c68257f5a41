"""Domain models - value objects for receivables, aging and settlement"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Dict, List

from club_ar.domain.exceptions import InvalidInputError
from club_ar.utils.date_utils import add_days, as_date


def is_minor_units(value) -> bool:
    """Money is a plain int of the smallest currency unit; bools and floats are not money"""
    return isinstance(value, int) and not isinstance(value, bool)


class AgingBucket(str, Enum):
    """Aging classification, ordered by severity"""

    CURRENT = "current"
    BUCKET_30 = "bucket30"
    BUCKET_60 = "bucket60"
    BUCKET_90 = "bucket90"
    SUSPENDED = "suspended"

    @property
    def severity(self) -> int:
        return _BUCKET_ORDER.index(self)

    @property
    def label(self) -> str:
        return _BUCKET_LABELS[self]


_BUCKET_ORDER = [
    AgingBucket.CURRENT,
    AgingBucket.BUCKET_30,
    AgingBucket.BUCKET_60,
    AgingBucket.BUCKET_90,
    AgingBucket.SUSPENDED,
]

_BUCKET_LABELS = {
    AgingBucket.CURRENT: "Current",
    AgingBucket.BUCKET_30: "31-60 Days",
    AgingBucket.BUCKET_60: "61-90 Days",
    AgingBucket.BUCKET_90: "90+ Days",
    AgingBucket.SUSPENDED: "Suspended",
}


class AccountStatus(str, Enum):
    CURRENT = "current"
    SUSPENDED = "suspended"


class OverrideKind(str, Enum):
    """How long a suspension override lasts"""

    UNTIL_PAYMENT = "until_payment"
    FIXED_DAYS = "fixed_days"
    CUSTOM_DATE = "custom_date"


class ClearingRule(str, Enum):
    """What payment clears an until-payment override"""

    MAX_BUCKET_CLEARED = "max_bucket_cleared"  # 91+ balance fully settled
    FULLY_PAID = "fully_paid"  # every open balance settled


class StrategyKind(str, Enum):
    MANUAL = "manual"
    FIFO = "fifo"
    FULL = "full"


class StatusTransition(str, Enum):
    REINSTATEMENT = "reinstatement"
    STILL_SUSPENDED = "still-suspended"
    NO_CHANGE = "no-change"


@dataclass(frozen=True)
class Invoice:
    """Open receivable line. Balance only ever decreases through allocation."""

    invoice_id: str
    issue_date: date
    due_date: date
    amount_cents: int
    balance_cents: int

    def __post_init__(self) -> None:
        if not self.invoice_id:
            raise InvalidInputError("Invoice identifier is required")
        for name in ("issue_date", "due_date"):
            value = getattr(self, name)
            if not isinstance(value, date):
                raise InvalidInputError(f"Invoice {self.invoice_id}: {name} must be a date, got {value!r}")
            # frozen dataclass: bypass __setattr__ to normalise datetimes
            object.__setattr__(self, name, as_date(value))
        if not is_minor_units(self.amount_cents) or not is_minor_units(self.balance_cents):
            raise InvalidInputError(f"Invoice {self.invoice_id}: amounts must be integer minor units")
        if self.amount_cents < 0:
            raise InvalidInputError(f"Invoice {self.invoice_id}: amount cannot be negative")
        if not 0 <= self.balance_cents <= self.amount_cents:
            raise InvalidInputError(
                f"Invoice {self.invoice_id}: balance {self.balance_cents} must be between 0 and {self.amount_cents}"
            )

    @property
    def is_open(self) -> bool:
        return self.balance_cents > 0

    def with_balance(self, balance_cents: int) -> "Invoice":
        """Copy of this invoice with a different outstanding balance"""
        return replace(self, balance_cents=balance_cents)


@dataclass(frozen=True)
class SuspensionOverride:
    """
    Manual lift of a suspension.

    - UNTIL_PAYMENT: active until the payment workflow marks it cleared
    - FIXED_DAYS: active for `days` days starting on granted_on
    - CUSTOM_DATE: active from granted_on through expires_on (inclusive)
    """

    kind: OverrideKind
    granted_on: date
    days: int | None = None
    expires_on: date | None = None
    payment_cleared: bool = False
    notes: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.granted_on, date):
            raise InvalidInputError("Override granted_on must be a date")
        object.__setattr__(self, "granted_on", as_date(self.granted_on))
        if self.kind == OverrideKind.FIXED_DAYS:
            if self.days is None or self.days <= 0:
                raise InvalidInputError("Fixed-duration override needs a positive number of days")
        elif self.kind == OverrideKind.CUSTOM_DATE:
            if not isinstance(self.expires_on, date):
                raise InvalidInputError("Custom-date override needs an expiry date")
            object.__setattr__(self, "expires_on", as_date(self.expires_on))
            if self.expires_on < self.granted_on:
                raise InvalidInputError("Override cannot expire before it is granted")

    @classmethod
    def until_payment(cls, granted_on: date, notes: str = "") -> "SuspensionOverride":
        return cls(kind=OverrideKind.UNTIL_PAYMENT, granted_on=granted_on, notes=notes)

    @classmethod
    def for_days(cls, granted_on: date, days: int, notes: str = "") -> "SuspensionOverride":
        return cls(kind=OverrideKind.FIXED_DAYS, granted_on=granted_on, days=days, notes=notes)

    @classmethod
    def until_date(cls, granted_on: date, expires_on: date, notes: str = "") -> "SuspensionOverride":
        return cls(kind=OverrideKind.CUSTOM_DATE, granted_on=granted_on, expires_on=expires_on, notes=notes)

    def is_active(self, as_of: date) -> bool:
        as_of = as_date(as_of)
        if as_of < self.granted_on:
            return False
        if self.kind == OverrideKind.UNTIL_PAYMENT:
            return not self.payment_cleared
        if self.kind == OverrideKind.FIXED_DAYS:
            return as_of < add_days(self.granted_on, self.days)
        if self.kind == OverrideKind.CUSTOM_DATE:
            return as_of <= self.expires_on
        raise InvalidInputError(f"Unknown override kind: {self.kind!r}")

    def cleared(self) -> "SuspensionOverride":
        return replace(self, payment_cleared=True)


@dataclass(frozen=True)
class StatusEvaluation:
    """Account status derived from invoice aging; never stored independently"""

    raw_status: AccountStatus
    effective_status: AccountStatus
    override_active: bool
    suspended_balance_cents: int
    worst_bucket: AgingBucket

    @property
    def is_suspended(self) -> bool:
        return self.effective_status == AccountStatus.SUSPENDED


@dataclass(frozen=True)
class SettlementStrategy:
    """Chosen settlement mode; manual mode carries the caller's proposed allocation"""

    kind: StrategyKind
    manual_allocations: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.kind != StrategyKind.MANUAL and self.manual_allocations:
            raise InvalidInputError(
                f"manual_allocations is only accepted with the manual strategy, not {getattr(self.kind, 'value', self.kind)}"
            )

    @classmethod
    def manual(cls, allocations: Dict[str, int]) -> "SettlementStrategy":
        return cls(kind=StrategyKind.MANUAL, manual_allocations=dict(allocations))

    @classmethod
    def fifo(cls) -> "SettlementStrategy":
        return cls(kind=StrategyKind.FIFO)

    @classmethod
    def full(cls) -> "SettlementStrategy":
        return cls(kind=StrategyKind.FULL)


@dataclass(frozen=True)
class AllocationResult:
    """Per-invoice allocation plus the surplus that becomes account credit"""

    allocations: Dict[str, int]
    total_funds_cents: int
    credit_to_add_cents: int

    @property
    def total_allocated_cents(self) -> int:
        return sum(self.allocations.values())


@dataclass(frozen=True)
class SettlementResult:
    """Full preview of applying a payment; the caller persists it, not the engine"""

    strategy: StrategyKind
    payment_cents: int
    wht_cents: int
    total_funds_cents: int
    allocations: Dict[str, int]
    credit_to_add_cents: int
    balances_after: Dict[str, int]
    status_before: StatusEvaluation
    status_after: StatusEvaluation
    transition: StatusTransition
    remaining_suspended_balance_cents: int
    outstanding_after_cents: int
    override_cleared: bool = False

    @property
    def total_allocated_cents(self) -> int:
        return sum(self.allocations.values())

    @property
    def will_reinstate(self) -> bool:
        return self.transition == StatusTransition.REINSTATEMENT


@dataclass(frozen=True)
class MemberLedger:
    """A member's open invoices as loaded by the caller"""

    member_id: str
    invoices: List[Invoice]
    override: SuspensionOverride | None = None


@dataclass(frozen=True)
class MemberAgingRow:
    member_id: str
    balance_cents: int
    oldest_due_date: date
    days_outstanding: int
    status: AgingBucket
    override_active: bool = False


@dataclass(frozen=True)
class BucketSummary:
    bucket: AgingBucket
    label: str
    member_count: int
    total_cents: int
    percentage: float


@dataclass(frozen=True)
class AgingSummary:
    """Aging dashboard data: bucket totals over all members plus one page of rows"""

    as_of: date
    buckets: List[BucketSummary]
    members: List[MemberAgingRow]
    total_count: int
    total_outstanding_cents: int
    members_at_risk: int
    at_risk_percentage: float
