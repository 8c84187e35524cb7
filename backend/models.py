"""
Pydantic models for request/response validation.

JSON uses camelCase (``targetAddress``); Python code may construct models by
either the field name or the alias.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Literal, Optional

from domain.constants import (
    MSG_AMOUNT_REQUIRED,
    MSG_INVALID_ADDRESS,
    RECIPIENT_NAME_MAX_LENGTH,
)
from domain.enums import Currency
from utils.validators import validate_amount, validate_eth_address


class TipBase(BaseModel):
    """Shared base; allows construction by Python name or alias."""
    model_config = ConfigDict(populate_by_name=True)


# ── Tip Models ──────────────────────────────────────────────────────

class TipRequest(TipBase):
    """Request model for payment link generation."""
    target_address: str = Field(
        ...,
        alias="targetAddress",
        description="Recipient Ethereum address (0x + 40 hex chars)",
    )
    amount: str = Field(..., description="Positive decimal amount, e.g. '0.01'")
    currency: Currency = Field(..., description="ETH or USDC")
    sender_fid: Optional[int] = Field(default=None, alias="senderFid")
    sender_username: Optional[str] = Field(default=None, alias="senderUsername")

    @field_validator("target_address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        return validate_eth_address(value)

    @field_validator("amount")
    @classmethod
    def _check_amount(cls, value: str) -> str:
        return validate_amount(value)


class TipResponse(TipBase):
    """Response model for POST /api/tip."""
    success: bool
    payment_url: Optional[str] = Field(default=None, alias="paymentUrl")
    error: Optional[str] = None


class ValidateAddressRequest(TipBase):
    """Request model for POST /api/validate-address."""
    address: str


class ValidateAddressResponse(TipBase):
    """Response model for POST /api/validate-address."""
    valid: bool
    address: Optional[str] = None
    error: Optional[str] = None


class HealthResponse(TipBase):
    """Response model for GET /api/health."""
    status: str = "ok"
    timestamp: str


# ── Client Form Models ──────────────────────────────────────────────

class TipFormInput(TipBase):
    """Values collected by the tip form before submission."""
    amount: str
    currency: Currency = Currency.ETH

    @field_validator("amount")
    @classmethod
    def _check_amount(cls, value: str) -> str:
        if not value:
            raise ValueError(MSG_AMOUNT_REQUIRED)
        return validate_amount(value)


class RecipientSettings(TipBase):
    """Recipient name and address edited from the settings panel."""
    recipient_name: str = Field(..., alias="recipientName")
    target_address: str = Field(..., alias="targetAddress")

    @field_validator("recipient_name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if len(value) < 1:
            raise ValueError("Recipient name is required")
        if len(value) > RECIPIENT_NAME_MAX_LENGTH:
            raise ValueError("Name too long")
        return value

    @field_validator("target_address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        if not value:
            raise ValueError(MSG_INVALID_ADDRESS)
        return validate_eth_address(value)


# ── Farcaster Host Context ──────────────────────────────────────────

class FarcasterUser(TipBase):
    """Identity of the user viewing the mini-app."""
    fid: int
    username: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    pfp_url: Optional[str] = Field(default=None, alias="pfpUrl")


class FarcasterClient(TipBase):
    """Host client details."""
    platform_type: Optional[Literal["web", "mobile"]] = Field(default=None, alias="platformType")
    client_fid: int = Field(default=0, alias="clientFid")
    added: bool = False


class FarcasterLocation(TipBase):
    """Where in the host the mini-app was launched from."""
    type: str


class FarcasterContext(TipBase):
    """Read-only host context: user identity, client info, launch location."""
    user: FarcasterUser
    client: FarcasterClient = Field(default_factory=FarcasterClient)
    location: Optional[FarcasterLocation] = None
