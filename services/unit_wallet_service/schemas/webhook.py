"""VPay webhook payload and acknowledgement."""

import uuid
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VPayWebhookPayload(BaseModel):
    """Inbound transfer notification; unknown provider fields are ignored."""

    account_number: str = Field(..., min_length=1)
    amount: Decimal
    reference: str = Field(..., min_length=1)
    payer_name: Optional[str] = None
    payer_phone: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("account_number", "reference", mode="before")
    @classmethod
    def _strip(cls, v):
        if isinstance(v, (int, str)):
            return str(v).strip()
        return v

    @field_validator("payer_name", "payer_phone", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v


class WebhookAckResponse(BaseModel):
    accepted: bool
    reference: str
    transaction_id: uuid.UUID
    net_amount: Decimal
    duplicate: bool = False

    model_config = ConfigDict(from_attributes=True)
