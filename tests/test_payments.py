import asyncio

import httpx
import pytest

from pharmaworld.core.errors import InvalidArgument, UpstreamError
from pharmaworld.services.payments import PaymentGateway


def test_payment_intent_returns_client_secret(client, auth_headers, stripe_requests):
    res = client.post("/create-payment-intent", json={"amount": 1999.6}, headers=auth_headers("b@x.com"))

    assert res.status_code == 200
    assert res.json() == {"clientSecret": "pi_123_secret_abc"}
    [sent] = stripe_requests
    assert sent["url"] == "https://api.stripe.com/v1/payment_intents"
    assert sent["form"] == {"amount": "2000", "currency": "usd", "payment_method_types[]": "card"}
    assert sent["headers"]["authorization"] == "Bearer sk_test_123"
    assert "idempotency-key" not in sent["headers"]


def test_idempotency_key_is_forwarded(client, auth_headers, stripe_requests):
    headers = {**auth_headers("b@x.com"), "Idempotency-Key": "order-42"}

    client.post("/create-payment-intent", json={"amount": 500}, headers=headers)

    assert stripe_requests[0]["headers"]["idempotency-key"] == "order-42"


@pytest.mark.parametrize("amount", [-5, 0])
def test_non_positive_amount_is_rejected_without_calling_stripe(client, auth_headers, stripe_requests, amount):
    res = client.post("/create-payment-intent", json={"amount": amount}, headers=auth_headers("b@x.com"))

    assert res.status_code == 400
    assert stripe_requests == []


def test_payment_intent_requires_token(client, stripe_requests):
    res = client.post("/create-payment-intent", json={"amount": 500})

    assert res.status_code == 401
    assert stripe_requests == []


def test_stripe_failure_is_500(app, client, auth_headers):
    def declined(request):
        return httpx.Response(402, json={"error": {"message": "Your card was declined."}})

    app.state.payments = PaymentGateway("sk_test_123", transport=httpx.MockTransport(declined))

    res = client.post("/create-payment-intent", json={"amount": 500}, headers=auth_headers("b@x.com"))

    assert res.status_code == 500
    assert res.json() == {"detail": "Internal server error"}


def test_gateway_rejects_amount_that_rounds_to_zero():
    gateway = PaymentGateway("sk_test_123", transport=httpx.MockTransport(lambda r: httpx.Response(500)))

    with pytest.raises(InvalidArgument):
        asyncio.run(gateway.create_payment_intent(0.4))


def test_gateway_wraps_transport_errors():
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    gateway = PaymentGateway("sk_test_123", transport=httpx.MockTransport(unreachable))

    with pytest.raises(UpstreamError):
        asyncio.run(gateway.create_payment_intent(100))


@pytest.mark.parametrize("raw", ['{"amount": Infinity}', '{"amount": NaN}'])
def test_non_finite_amount_is_rejected(client, auth_headers, stripe_requests, raw):
    headers = {**auth_headers("b@x.com"), "Content-Type": "application/json"}

    res = client.post("/create-payment-intent", content=raw, headers=headers)

    assert res.status_code == 400
    assert stripe_requests == []


def test_gateway_rejects_infinite_amount():
    gateway = PaymentGateway("sk_test_123", transport=httpx.MockTransport(lambda r: httpx.Response(500)))

    with pytest.raises(InvalidArgument):
        asyncio.run(gateway.create_payment_intent(float("inf")))
