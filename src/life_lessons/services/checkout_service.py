"""
Checkout Service.

Creates Razorpay hosted payment links for premium lessons. The price is fixed in the local
currency and converted to the settlement currency with the configured exchange rate.

No webhook handling or payment persistence lives here: the lesson identifier travels in
the link's `notes` so a later confirmation step can attribute the payment.
"""

import asyncio
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import razorpay
from razorpay.errors import BadRequestError, GatewayError, ServerError
import requests

from life_lessons.config import Settings
from life_lessons.managers.logging_manager import get_logger
from life_lessons.services.errors import UpstreamFailure
from life_lessons.services.lesson_service import parse_object_id
from life_lessons.utils.currency_exchange import local_price_in_settlement_minor_units

logger = get_logger(name="payments", prefix="[CHECKOUT_SERVICE]")

PROVIDER_ERRORS = (
    BadRequestError,
    GatewayError,
    ServerError,
    requests.RequestException,
)


class CheckoutService:
    """Service for premium lesson checkout sessions."""

    def __init__(self, settings: Settings, client: Optional[razorpay.Client] = None):
        self.settings = settings
        self.client = client or razorpay.Client(
            auth=(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET.get_secret_value())
        )

    @property
    def amount_minor(self) -> int:
        """The premium price in settlement-currency minor units (1500 BDT → 1250 USD cents)."""
        return local_price_in_settlement_minor_units(
            self.settings.PREMIUM_PRICE_LOCAL,
            self.settings.LOCAL_PER_SETTLEMENT_UNIT,
            self.settings.SETTLEMENT_CURRENCY,
        )

    def _client_url(self, path: str, lesson_id: str) -> str:
        return f"{self.settings.CLIENT_URL.rstrip('/')}/{path}?{urlencode({'lessonId': lesson_id})}"

    def success_url(self, lesson_id: str) -> str:
        return self._client_url("payment-success", lesson_id)

    def cancel_url(self, lesson_id: str) -> str:
        return self._client_url("payment-cancelled", lesson_id)

    def build_payment_link(self, lesson_id: str, lesson_title: str, email: str) -> Dict[str, Any]:
        """The payment-link payload sent to Razorpay."""
        return {
            "amount": self.amount_minor,
            "currency": self.settings.SETTLEMENT_CURRENCY,
            "accept_partial": False,
            "description": f"Premium lesson: {lesson_title}",
            "customer": {"email": email},
            "notify": {"sms": False, "email": True},
            "reminder_enable": False,
            "notes": {
                "lessonId": lesson_id,
                "lessonTitle": lesson_title,
                "localPrice": f"{self.settings.PREMIUM_PRICE_LOCAL} {self.settings.LOCAL_CURRENCY}",
                "cancelUrl": self.cancel_url(lesson_id),
            },
            "callback_url": self.success_url(lesson_id),
            "callback_method": "get",
        }

    async def create_checkout_session(self, lesson_id: str, lesson_title: str, email: str) -> Dict[str, Any]:
        """
        Create a hosted payment link for one lesson purchase.

        The Razorpay SDK is synchronous, so the call runs in a worker thread bounded by
        `PAYMENT_PROVIDER_TIMEOUT_SECONDS`.

        Args:
            lesson_id: Lesson being purchased
            lesson_title: Shown on the hosted page
            email: Verified purchaser email

        Returns:
            Dict with `id`, `url`, `amount`, `currency` and `cancelUrl`

        Raises:
            NotFound: If `lesson_id` is not a valid lesson identifier
            UpstreamFailure: If the provider rejects the request, fails or times out
        """
        parse_object_id(lesson_id)
        payload = self.build_payment_link(lesson_id, lesson_title, email)

        try:
            link = await asyncio.wait_for(
                asyncio.to_thread(self.client.payment_link.create, data=payload),
                timeout=self.settings.PAYMENT_PROVIDER_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.error("Payment provider timed out for lesson %s", lesson_id)
            raise UpstreamFailure("Payment provider timed out")
        except PROVIDER_ERRORS as e:
            logger.error("Payment provider rejected checkout for lesson %s: %s", lesson_id, e, exc_info=True)
            raise UpstreamFailure("Failed to create checkout session")

        logger.info(
            "Created payment link %s for lesson %s (%d %s)",
            link.get("id"),
            lesson_id,
            payload["amount"],
            payload["currency"],
        )

        return {
            "id": link["id"],
            "url": link["short_url"],
            "amount": payload["amount"],
            "currency": payload["currency"],
            "cancelUrl": self.cancel_url(lesson_id),
        }
