"""Payment intent endpoint for the strategy-session checkout."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import Services, get_services
from ..payments import PaymentError, PaymentNotConfiguredError
from ..schemas import PaymentIntentRequest, PaymentIntentResponse

router = APIRouter(prefix="/api", tags=["checkout"])


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
def create_payment_intent(
    payload: Optional[PaymentIntentRequest] = None,
    services: Services = Depends(get_services),
) -> PaymentIntentResponse:
    """Create a Stripe payment intent and hand its client secret to the browser."""

    request = payload or PaymentIntentRequest()
    try:
        client_secret = services.payments.create_payment_intent(request.amount)
    except PaymentNotConfiguredError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except PaymentError as exc:
        raise HTTPException(status_code=500, detail=f"Error creating payment intent: {exc}") from exc
    return PaymentIntentResponse(client_secret=client_secret)
