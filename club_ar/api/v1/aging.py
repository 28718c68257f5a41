"""Read-only aging endpoints for the dashboard and status badges"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from club_ar.api.v1.schemas import (
    AgingStatusRequest,
    AgingStatusResponse,
    AgingSummaryRequest,
    AgingSummaryResponse,
    InvoiceAgingSchema,
    StatusSchema,
)
from club_ar.api.dependencies import get_page_size
from club_ar.domain.aging import classify, days_overdue
from club_ar.domain.exceptions import DomainException
from club_ar.domain.reporting import summarize_aging
from club_ar.domain.suspension import evaluate
from club_ar.infrastructure.observability.metrics import record_status_evaluation

router = APIRouter()


@router.post("/aging/status", response_model=AgingStatusResponse)
def get_account_status(request_body: AgingStatusRequest):
    """
    Classify an account's invoices and derive its suspension status.

    Returns:
        Per-invoice bucket and days overdue, plus raw and effective status
    """
    as_of = request_body.as_of or date.today()

    try:
        invoices = [inv.to_domain() for inv in request_body.invoices]
        override = request_body.override.to_domain() if request_body.override else None
        status = evaluate(invoices, override, as_of)
    except DomainException as e:
        raise HTTPException(status_code=422, detail={"error": e.code, "message": str(e)})

    record_status_evaluation(status.effective_status.value, status.override_active)

    return AgingStatusResponse(
        as_of=as_of,
        invoices=[
            InvoiceAgingSchema(
                invoice_id=inv.invoice_id,
                due_date=inv.due_date,
                balance_cents=inv.balance_cents,
                days_overdue=days_overdue(inv.due_date, as_of),
                bucket=classify(inv.due_date, as_of),
            )
            for inv in invoices
        ],
        status=StatusSchema.from_domain(status),
    )


@router.post("/aging/summary", response_model=AgingSummaryResponse)
def get_aging_summary(
    request_body: AgingSummaryRequest,
    page_size: int = Depends(get_page_size),
):
    """
    Aging dashboard: bucket totals, members at risk and one page of member rows.
    """
    try:
        ledgers = [ledger.to_domain() for ledger in request_body.ledgers]
        summary = summarize_aging(
            ledgers,
            as_of=request_body.as_of,
            aging_filter=request_body.filter,
            sort=request_body.sort,
            page=request_body.page,
            limit=request_body.limit or page_size,
        )
    except DomainException as e:
        raise HTTPException(status_code=422, detail={"error": e.code, "message": str(e)})

    return AgingSummaryResponse.from_domain(summary)
