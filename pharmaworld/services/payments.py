import logging
import math
from typing import Optional

import httpx
from fastapi import Request

from pharmaworld.core.errors import InvalidArgument, UpstreamError

logger = logging.getLogger(__name__)


class PaymentGateway:
    """Creates Stripe payment intents over the REST API."""

    def __init__(
        self,
        secret_key: str,
        currency: str = "usd",
        api_base: str = "https://api.stripe.com/v1",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.secret_key = secret_key
        self.currency = currency
        self.api_base = api_base.rstrip("/")
        self._transport = transport
        self._timeout = timeout

    async def create_payment_intent(self, amount: float, idempotency_key: Optional[str] = None) -> str:
        if amount is None or not math.isfinite(amount) or amount <= 0:
            raise InvalidArgument("Invalid payment amount")
        amount_minor = int(round(amount))
        if amount_minor <= 0:
            raise InvalidArgument("Invalid payment amount")

        headers = {"Authorization": f"Bearer {self.secret_key}"}
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key
        form = {
            "amount": str(amount_minor),
            "currency": self.currency,
            "payment_method_types[]": "card",
        }

        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            try:
                response = await client.post(f"{self.api_base}/payment_intents", data=form, headers=headers)
            except httpx.HTTPError as e:
                logger.error("Stripe request failed: %s", e)
                raise UpstreamError()

        if response.status_code >= 300:
            try:
                message = response.json().get("error", {}).get("message")
            except ValueError:
                message = response.text[:200]
            logger.error("Stripe payment intent creation failed (%s): %s", response.status_code, message)
            raise UpstreamError()

        client_secret = response.json().get("client_secret")
        if not client_secret:
            logger.error("Stripe response had no client_secret")
            raise UpstreamError()
        return client_secret


def get_payment_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payments
