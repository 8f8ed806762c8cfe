"""Tests for premium lesson checkout: price conversion, provider payload and the route."""

from decimal import Decimal
import time

from bson import ObjectId
import pytest
from razorpay.errors import BadRequestError, ServerError

from life_lessons.services.checkout_service import CheckoutService
from life_lessons.services.errors import NotFound, UpstreamFailure
from life_lessons.utils.currency_exchange import (
    convert_local_to_settlement,
    local_price_in_settlement_minor_units,
    to_minor_units,
)


def test_default_price_is_1250_cents():
    assert local_price_in_settlement_minor_units(Decimal("1500"), Decimal("120"), "USD") == 1250


def test_rounding_is_half_up():
    assert to_minor_units(Decimal("0.125"), "USD") == 13
    assert to_minor_units(Decimal("0.124"), "usd") == 12
    assert to_minor_units(Decimal("99.5"), "JPY") == 100


def test_conversion_rejects_bad_input():
    with pytest.raises(ValueError):
        convert_local_to_settlement(Decimal("1500"), Decimal("0"))
    with pytest.raises(ValueError):
        convert_local_to_settlement(Decimal("-1"), Decimal("120"))
    with pytest.raises(ValueError):
        to_minor_units(Decimal("1"), "XYZ")


def test_payment_link_payload(checkout_service):
    lesson_id = str(ObjectId())

    payload = checkout_service.build_payment_link(lesson_id, "Patience compounds", "reader@example.com")

    assert payload["amount"] == 1250
    assert payload["currency"] == "USD"
    assert payload["customer"] == {"email": "reader@example.com"}
    assert payload["callback_url"] == f"http://localhost:5173/payment-success?lessonId={lesson_id}"
    assert payload["callback_method"] == "get"
    assert payload["notes"]["lessonId"] == lesson_id
    assert payload["notes"]["localPrice"] == "1500 BDT"
    assert payload["notes"]["cancelUrl"] == f"http://localhost:5173/payment-cancelled?lessonId={lesson_id}"


@pytest.mark.asyncio
async def test_create_checkout_session(checkout_service, razorpay_client):
    lesson_id = str(ObjectId())

    session = await checkout_service.create_checkout_session(lesson_id, "Patience compounds", "reader@example.com")

    assert session == {
        "id": "plink_test123",
        "url": "https://rzp.io/i/test123",
        "amount": 1250,
        "currency": "USD",
        "cancelUrl": f"http://localhost:5173/payment-cancelled?lessonId={lesson_id}",
    }
    razorpay_client.payment_link.create.assert_called_once()


@pytest.mark.asyncio
async def test_create_checkout_session_rejects_malformed_lesson_id(checkout_service, razorpay_client):
    with pytest.raises(NotFound):
        await checkout_service.create_checkout_session("nope", "Title", "reader@example.com")

    razorpay_client.payment_link.create.assert_not_called()


@pytest.mark.asyncio
async def test_provider_error_becomes_upstream_failure(checkout_service, razorpay_client):
    razorpay_client.payment_link.create.side_effect = BadRequestError("The amount is invalid")

    with pytest.raises(UpstreamFailure) as exc_info:
        await checkout_service.create_checkout_session(str(ObjectId()), "Title", "reader@example.com")

    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_provider_timeout(test_settings, razorpay_client):
    razorpay_client.payment_link.create.side_effect = lambda data: time.sleep(0.5)
    service = CheckoutService(
        test_settings.model_copy(update={"PAYMENT_PROVIDER_TIMEOUT_SECONDS": 0.05}), client=razorpay_client
    )

    with pytest.raises(UpstreamFailure) as exc_info:
        await service.create_checkout_session(str(ObjectId()), "Title", "reader@example.com")

    assert exc_info.value.message == "Payment provider timed out"


@pytest.mark.asyncio
async def test_checkout_route(client, auth_headers, razorpay_client):
    lesson_id = str(ObjectId())
    body = {"lessonId": lesson_id, "lessonTitle": "Patience compounds", "email": "someone-else@example.com"}

    assert (await client.post("/create-checkout-session", json=body)).status_code == 401

    response = await client.post("/create-checkout-session", json=body, headers=auth_headers("reader@example.com"))

    assert response.status_code == 200
    session = response.json()
    assert session["url"] == "https://rzp.io/i/test123"
    assert session["amount"] == 1250
    assert session["currency"] == "USD"
    assert session["cancelUrl"].endswith(f"/payment-cancelled?lessonId={lesson_id}")

    payload = razorpay_client.payment_link.create.call_args.kwargs["data"]
    assert payload["customer"]["email"] == "reader@example.com"


@pytest.mark.asyncio
async def test_checkout_route_provider_failure(client, auth_headers, razorpay_client):
    razorpay_client.payment_link.create.side_effect = ServerError("Gateway down")
    body = {"lessonId": str(ObjectId()), "lessonTitle": "Patience compounds"}

    response = await client.post("/create-checkout-session", json=body, headers=auth_headers())

    assert response.status_code == 502
    assert response.json() == {"message": "Failed to create checkout session"}
