"""
==============================================================================
Payment Schemas Module
==============================================================================

Checkout, payout onboarding and webhook acknowledgement responses.

==============================================================================
"""

from typing import Optional
from pydantic import BaseModel, Field


class CheckoutResponse(BaseModel):
    success: bool = Field(default=True)
    checkout_url: str
    session_id: str


class ConnectResponse(BaseModel):
    """Onboarding link for the cleaner's payout account."""
    success: bool = Field(default=True)
    onboarding_url: str
    account_id: str


class ConnectStatusResponse(BaseModel):
    success: bool = Field(default=True)
    account_id: Optional[str] = None
    onboarded: bool
    charges_enabled: bool = False
    payouts_enabled: bool = False


class WebhookAck(BaseModel):
    received: bool = Field(default=True)
