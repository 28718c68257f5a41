"""POST /v1/settlement/preview - payment allocation preview endpoint"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from club_ar.api.v1.schemas import SettlementPreviewRequest, SettlementPreviewResponse
from club_ar.api.dependencies import get_clearing_rule, get_request_id
from club_ar.domain.exceptions import DomainException
from club_ar.domain.models import ClearingRule, SettlementStrategy
from club_ar.domain.settlement import compute
from club_ar.infrastructure.observability.logging import log_rejection, log_settlement
from club_ar.infrastructure.observability.metrics import record_rejection, record_settlement

router = APIRouter()


@router.post("/settlement/preview", response_model=SettlementPreviewResponse)
def preview_settlement(
    request_body: SettlementPreviewRequest,
    request: Request,
    clearing_rule: ClearingRule = Depends(get_clearing_rule),
):
    """
    Preview how a payment would settle an account's open invoices.

    Flow:
    1. Convert request invoices/override into domain objects
    2. Allocate payment + WHT with the chosen strategy
    3. Report balances after, credit to add and suspension transition

    Nothing is persisted; the payment workflow applies the confirmed result.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        invoices = [inv.to_domain() for inv in request_body.invoices]
        override = request_body.override.to_domain() if request_body.override else None
        strategy = SettlementStrategy(
            kind=request_body.strategy,
            manual_allocations=request_body.manual_allocations or {},
        )

        result = compute(
            request_body.payment_cents,
            request_body.wht_cents,
            invoices,
            strategy,
            override=override,
            as_of=request_body.as_of,
            clearing_rule=clearing_rule,
        )

    except DomainException as e:
        record_rejection(e.code)
        log_rejection(request_id, request_body.account_id, request_body.strategy.value, e.code, str(e))
        raise HTTPException(status_code=422, detail={"error": e.code, "message": str(e)})

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_settlement(result.strategy.value, result.transition.value, result.credit_to_add_cents)
    log_settlement(request_id, request_body.account_id, result, duration_ms)

    return SettlementPreviewResponse.from_domain(result)
