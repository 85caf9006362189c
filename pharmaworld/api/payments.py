from typing import Optional

from fastapi import APIRouter, Depends, Header

from pharmaworld.api.deps import get_claims
from pharmaworld.models.schemas import PaymentIntentRequest, PaymentIntentResponse
from pharmaworld.services.payments import PaymentGateway, get_payment_gateway

router = APIRouter()


@router.post(
    "/create-payment-intent",
    response_model=PaymentIntentResponse,
    dependencies=[Depends(get_claims)],
)
async def create_payment_intent(
    body: PaymentIntentRequest,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Card-only payment intent for ``amount`` (smallest currency unit).
    Clients should send the same ``Idempotency-Key`` when retrying a request
    so Stripe does not create a second charge.
    """
    client_secret = await gateway.create_payment_intent(body.amount, idempotency_key=idempotency_key)
    return {"clientSecret": client_secret}
