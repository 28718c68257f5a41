"""Pydantic schemas for API request/response validation"""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from club_ar.domain.models import (
    AccountStatus,
    AgingBucket,
    AgingSummary,
    Invoice,
    MemberLedger,
    OverrideKind,
    SettlementResult,
    StatusEvaluation,
    StatusTransition,
    StrategyKind,
    SuspensionOverride,
)
from club_ar.domain.reporting import AgingFilter, AgingSort


class InvoiceSchema(BaseModel):
    """Open invoice as loaded by the caller"""

    invoice_id: str = Field(..., min_length=1)
    issue_date: date
    due_date: date
    amount_cents: int = Field(..., ge=0, description="Original amount in minor units")
    balance_cents: int = Field(..., ge=0, description="Outstanding balance in minor units")

    def to_domain(self) -> Invoice:
        return Invoice(
            invoice_id=self.invoice_id,
            issue_date=self.issue_date,
            due_date=self.due_date,
            amount_cents=self.amount_cents,
            balance_cents=self.balance_cents,
        )


class OverrideSchema(BaseModel):
    """Suspension override granted by staff"""

    kind: OverrideKind
    granted_on: date
    days: Optional[int] = Field(None, gt=0, description="Duration for fixed_days overrides")
    expires_on: Optional[date] = Field(None, description="Last active day for custom_date overrides")
    payment_cleared: bool = False
    notes: str = ""

    def to_domain(self) -> SuspensionOverride:
        return SuspensionOverride(
            kind=self.kind,
            granted_on=self.granted_on,
            days=self.days,
            expires_on=self.expires_on,
            payment_cleared=self.payment_cleared,
            notes=self.notes,
        )


class StatusSchema(BaseModel):
    raw_status: AccountStatus
    effective_status: AccountStatus
    override_active: bool
    suspended_balance_cents: int
    worst_bucket: AgingBucket

    @classmethod
    def from_domain(cls, status: StatusEvaluation) -> "StatusSchema":
        return cls(
            raw_status=status.raw_status,
            effective_status=status.effective_status,
            override_active=status.override_active,
            suspended_balance_cents=status.suspended_balance_cents,
            worst_bucket=status.worst_bucket,
        )


class SettlementPreviewRequest(BaseModel):
    """Request body for POST /v1/settlement/preview"""

    account_id: str = Field(..., min_length=1, description="Member or city-ledger account")
    payment_cents: int = Field(..., ge=0, description="Cash/transfer amount in minor units")
    wht_cents: int = Field(0, ge=0, description="Withholding tax certificate amount in minor units")
    strategy: StrategyKind
    invoices: List[InvoiceSchema]
    manual_allocations: Optional[Dict[str, int]] = None
    override: Optional[OverrideSchema] = None
    as_of: Optional[date] = None


class SettlementPreviewResponse(BaseModel):
    """Response for POST /v1/settlement/preview"""

    strategy: StrategyKind
    payment_cents: int
    wht_cents: int
    total_funds_cents: int
    allocations: Dict[str, int]
    total_allocated_cents: int
    credit_to_add_cents: int
    balances_after: Dict[str, int]
    outstanding_after_cents: int
    status_before: StatusSchema
    status_after: StatusSchema
    transition: StatusTransition
    will_reinstate: bool
    remaining_suspended_balance_cents: int
    override_cleared: bool

    @classmethod
    def from_domain(cls, result: SettlementResult) -> "SettlementPreviewResponse":
        return cls(
            strategy=result.strategy,
            payment_cents=result.payment_cents,
            wht_cents=result.wht_cents,
            total_funds_cents=result.total_funds_cents,
            allocations=result.allocations,
            total_allocated_cents=result.total_allocated_cents,
            credit_to_add_cents=result.credit_to_add_cents,
            balances_after=result.balances_after,
            outstanding_after_cents=result.outstanding_after_cents,
            status_before=StatusSchema.from_domain(result.status_before),
            status_after=StatusSchema.from_domain(result.status_after),
            transition=result.transition,
            will_reinstate=result.will_reinstate,
            remaining_suspended_balance_cents=result.remaining_suspended_balance_cents,
            override_cleared=result.override_cleared,
        )


class AgingStatusRequest(BaseModel):
    """Request body for POST /v1/aging/status"""

    invoices: List[InvoiceSchema]
    override: Optional[OverrideSchema] = None
    as_of: Optional[date] = None


class InvoiceAgingSchema(BaseModel):
    invoice_id: str
    due_date: date
    balance_cents: int
    days_overdue: int
    bucket: AgingBucket


class AgingStatusResponse(BaseModel):
    """Response for POST /v1/aging/status"""

    as_of: date
    invoices: List[InvoiceAgingSchema]
    status: StatusSchema


class MemberLedgerSchema(BaseModel):
    member_id: str = Field(..., min_length=1)
    invoices: List[InvoiceSchema]
    override: Optional[OverrideSchema] = None

    def to_domain(self) -> MemberLedger:
        return MemberLedger(
            member_id=self.member_id,
            invoices=[inv.to_domain() for inv in self.invoices],
            override=self.override.to_domain() if self.override else None,
        )


class AgingSummaryRequest(BaseModel):
    """Request body for POST /v1/aging/summary"""

    ledgers: List[MemberLedgerSchema]
    filter: AgingFilter = AgingFilter.ALL
    sort: AgingSort = AgingSort.BALANCE_DESC
    page: int = Field(1, ge=1)
    limit: Optional[int] = Field(None, ge=1, le=100, description="Defaults to the configured page size")
    as_of: Optional[date] = None


class BucketSchema(BaseModel):
    id: AgingBucket
    label: str
    member_count: int
    total_cents: int
    percentage: float


class MemberAgingSchema(BaseModel):
    member_id: str
    balance_cents: int
    oldest_due_date: date
    days_outstanding: int
    status: AgingBucket
    override_active: bool


class AgingSummaryResponse(BaseModel):
    """Response for POST /v1/aging/summary"""

    as_of: date
    buckets: List[BucketSchema]
    members: List[MemberAgingSchema]
    total_count: int
    total_outstanding_cents: int
    members_at_risk: int
    at_risk_percentage: float

    @classmethod
    def from_domain(cls, summary: AgingSummary) -> "AgingSummaryResponse":
        return cls(
            as_of=summary.as_of,
            buckets=[
                BucketSchema(
                    id=b.bucket,
                    label=b.label,
                    member_count=b.member_count,
                    total_cents=b.total_cents,
                    percentage=b.percentage,
                )
                for b in summary.buckets
            ],
            members=[
                MemberAgingSchema(
                    member_id=m.member_id,
                    balance_cents=m.balance_cents,
                    oldest_due_date=m.oldest_due_date,
                    days_outstanding=m.days_outstanding,
                    status=m.status,
                    override_active=m.override_active,
                )
                for m in summary.members
            ],
            total_count=summary.total_count,
            total_outstanding_cents=summary.total_outstanding_cents,
            members_at_risk=summary.members_at_risk,
            at_risk_percentage=summary.at_risk_percentage,
        )
