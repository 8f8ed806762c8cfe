"""
Payment Models for the premium lesson checkout.

Pydantic models for creating a hosted payment link for one lesson purchase.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class CreateCheckoutSessionRequest(BaseModel):
    """
    Request to open a hosted checkout for a lesson.

    The purchaser is always the authenticated caller. `email` is accepted for
    compatibility with older clients but the verified token email wins.

    Example:
        {
            "lessonId": "665f1c2e9b1e8a3f4c2d1a00",
            "lessonTitle": "Patience compounds",
            "email": "reader@example.com"
        }
    """

    model_config = ConfigDict(populate_by_name=True)

    lesson_id: str = Field(..., alias="lessonId", min_length=1, description="Lesson being purchased")
    lesson_title: str = Field(..., alias="lessonTitle", min_length=1, max_length=200)
    email: Optional[EmailStr] = Field(None, description="Purchaser email (ignored, token email is used)")

    @field_validator("lesson_id", "lesson_title")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class CheckoutSessionResponse(BaseModel):
    """
    Response after creating the hosted payment link.

    Example:
        {
            "id": "plink_xxxxx",
            "url": "https://rzp.io/i/xxxxx",
            "amount": 1250,
            "currency": "USD",
            "cancelUrl": "http://localhost:5173/payment-cancelled?lessonId=..."
        }
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    url: str
    amount: int = Field(..., description="Amount in settlement-currency minor units")
    currency: str
    cancel_url: str = Field(..., alias="cancelUrl")
