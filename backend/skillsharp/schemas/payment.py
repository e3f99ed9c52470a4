"""Payment Schemas — payment proof submissions and admin review.

Invariants:
    - transaction_id stripped, non-empty
    - amount > 0 when given (defaults to the configured subscription price)
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class PaymentRequestCreate(BaseModel):
    transaction_id: str = Field(min_length=1, max_length=100)
    payment_method: Literal["easypaisa", "bank"]
    amount: float | None = Field(None, gt=0)

    @field_validator("transaction_id")
    @classmethod
    def strip_transaction_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("transaction_id cannot be empty or whitespace")
        return v


class PaymentReview(BaseModel):
    action: Literal["approve", "reject"]
