"""
Payment Routes.

Opens a Razorpay hosted payment link for a premium lesson. The fixed local price is
converted to the settlement currency on the server; the client never sends an amount.

Flow:
    1. Client posts `lessonId` and `lessonTitle` with the member's bearer token.
    2. Server creates the payment link and returns its `url`.
    3. Client redirects; Razorpay calls back to `{CLIENT_URL}/payment-success?lessonId=...`.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from life_lessons.managers.logging_manager import get_logger
from life_lessons.models.payment_models import CheckoutSessionResponse, CreateCheckoutSessionRequest
from life_lessons.routes.dependencies import AccessLevel, get_checkout_service, require_access
from life_lessons.services.checkout_service import CheckoutService
from life_lessons.services.errors import LessonsError

logger = get_logger(prefix="[Payment Routes]")

router = APIRouter(tags=["payments"])


@router.post(
    "/create-checkout-session",
    response_model=CheckoutSessionResponse,
    status_code=status.HTTP_200_OK,
    summary="Create a hosted checkout for a premium lesson",
    description="""
    Create a Razorpay payment link for one lesson purchase.

    **Pricing:** the premium price is fixed in the local currency and converted with a
    configured exchange rate (default 1500 BDT at 120 BDT/USD = 1250 USD cents).

    **Purchaser:** the authenticated caller's email; the optional `email` in the body
    is ignored.
    """,
    responses={
        200: {"description": "Payment link created"},
        401: {"description": "Missing or invalid bearer token"},
        404: {"description": "Malformed lesson identifier"},
        502: {"description": "Payment provider failed or timed out"},
    },
)
async def create_checkout_session(
    request: CreateCheckoutSessionRequest,
    caller: Dict[str, Any] = Depends(require_access(AccessLevel.MEMBER)),
    checkout: CheckoutService = Depends(get_checkout_service),
):
    try:
        session = await checkout.create_checkout_session(
            lesson_id=request.lesson_id,
            lesson_title=request.lesson_title,
            email=caller["email"],
        )
        logger.info("Checkout session %s opened for %s", session["id"], caller["email"])
        return session

    except LessonsError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error("Failed to create checkout session: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create checkout session")
