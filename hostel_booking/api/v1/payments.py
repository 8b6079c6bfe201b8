"""
Payment endpoints, including the gateway webhook.

The webhook is unauthenticated at the HTTP layer; its body is authenticated
by signature inside ``PaymentService.handle_webhook``, which needs the raw
bytes exactly as sent.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from hostel_booking.api import deps
from hostel_booking.core.security import CurrentUser
from hostel_booking.integrations.paystack import SIGNATURE_HEADER
from hostel_booking.models.enums import PaymentStatus, PaymentType
from hostel_booking.schemas.common import PaginationMeta, SuccessResponse
from hostel_booking.schemas.payment import (
    BalanceResponse,
    PaymentHistoryFilters,
    PaymentHistoryResponse,
    PaymentHistorySummary,
    PaymentInitializeRequest,
    PaymentInitializeResponse,
    PaymentResponse,
    UnmatchedWebhookEventResponse,
)
from hostel_booking.services.payment_service import PaymentService, SettlementOutcome

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/initialize", response_model=SuccessResponse[PaymentInitializeResponse])
def initialize_payment(
    payload: PaymentInitializeRequest,
    current_user: CurrentUser = Depends(deps.get_current_user),
    service: PaymentService = Depends(deps.get_payment_service),
):
    """Open a gateway checkout and return its payment link"""
    result = service.initialize_payment(
        user_id=current_user.id,
        amount=payload.amount,
        payment_type=payload.payment_type,
        reference_id=payload.reference_id,
        payment_method=payload.payment_method,
    )
    return SuccessResponse.create(
        message="Payment initialized successfully",
        data=PaymentInitializeResponse(**result),
    )


@router.api_route("/verify", methods=["GET", "POST"], response_model=SuccessResponse[PaymentResponse])
def verify_payment(
    reference: str = Query(..., min_length=1, max_length=100),
    service: PaymentService = Depends(deps.get_payment_service),
):
    """Gateway callback target; also callable by the client after checkout"""
    payment, outcome = service.verify_payment(reference)
    message = (
        "Payment already verified"
        if outcome == SettlementOutcome.ALREADY_COMPLETED
        else "Payment verified successfully"
    )
    return SuccessResponse.create(message=message, data=PaymentResponse.model_validate(payment))


@router.get("/history", response_model=SuccessResponse[PaymentHistoryResponse])
def get_payment_history(
    payment_status: Optional[PaymentStatus] = Query(None, alias="status"),
    payment_type: Optional[PaymentType] = Query(None, alias="type"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: CurrentUser = Depends(deps.get_current_user),
    service: PaymentService = Depends(deps.get_payment_service),
):
    filters = PaymentHistoryFilters(
        status=payment_status,
        payment_type=payment_type,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    items, total, summary = service.get_payment_history(current_user.id, filters)
    return SuccessResponse.create(
        data=PaymentHistoryResponse(
            items=[PaymentResponse.model_validate(p) for p in items],
            pagination=PaginationMeta.build(page, limit, total),
            summary=PaymentHistorySummary(**summary),
        )
    )


@router.get("/balance", response_model=SuccessResponse[BalanceResponse])
def get_balance(
    current_user: CurrentUser = Depends(deps.get_current_user),
    service: PaymentService = Depends(deps.get_payment_service),
):
    return SuccessResponse.create(data=BalanceResponse(**service.get_balance(current_user.id)))


@router.post("/webhook", include_in_schema=False)
async def payment_webhook(
    request: Request,
    service: PaymentService = Depends(deps.get_payment_service),
):
    raw_body = await request.body()
    result = await run_in_threadpool(
        service.handle_webhook,
        raw_body,
        request.headers.get(SIGNATURE_HEADER),
    )
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.get(
    "/webhook-events",
    response_model=SuccessResponse[List[UnmatchedWebhookEventResponse]],
)
def list_unmatched_webhook_events(
    include_resolved: bool = Query(False, alias="includeResolved"),
    admin: CurrentUser = Depends(deps.require_admin),
    service: PaymentService = Depends(deps.get_payment_service),
):
    """Gateway events that matched no payment, for manual reconciliation"""
    events = service.list_unmatched_events(include_resolved=include_resolved)
    return SuccessResponse.create(
        data=[UnmatchedWebhookEventResponse.model_validate(e) for e in events]
    )


@router.post(
    "/webhook-events/{event_id}/reprocess",
    response_model=SuccessResponse[UnmatchedWebhookEventResponse],
)
def reprocess_unmatched_webhook_event(
    event_id: UUID,
    admin: CurrentUser = Depends(deps.require_admin),
    service: PaymentService = Depends(deps.get_payment_service),
):
    event, outcome = service.reprocess_unmatched_event(event_id)
    return SuccessResponse.create(
        message=f"Event reprocessed: {outcome.value}",
        data=UnmatchedWebhookEventResponse.model_validate(event),
    )
