"""
Tip endpoints — payment link generation and address validation.

Bodies are parsed inside the handlers rather than by FastAPI so that a
schema failure maps to a 400 with the first validation message instead of
FastAPI's 422 envelope.
"""
import json
import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from config import settings
from domain.constants import MSG_INVALID_ADDRESS_FORMAT, MSG_PAYMENT_LINK_FAILED
from domain.errors import DomainError, PaymentLinkError, ValidationError
from models import TipRequest, TipResponse, ValidateAddressRequest, ValidateAddressResponse
from services.payment_link_service import build_payment_url
from utils.validators import first_error_message, is_valid_eth_address

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tip"])


async def _read_json(request: Request):
    """Read the request body as JSON, raising ValidationError on malformed input."""
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid request data")


def _tip_error(status_code: int, message: str) -> JSONResponse:
    body = TipResponse(success=False, error=message)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


@router.post("/tip", response_model=TipResponse, response_model_exclude_none=True)
async def create_tip(request: Request):
    """
    Validate a tip request and return a hosted payment link.

    Returns:
        200 {success: true, paymentUrl}
        400 {success: false, error} on schema violation
        500 {success: false, error} on unexpected failure
    """
    try:
        payload = await _read_json(request)
        tip = TipRequest.model_validate(payload)

        try:
            payment_url = build_payment_url(
                tip.target_address,
                tip.amount,
                tip.currency,
                base_url=settings.payment_base_url,
            )
        except Exception as e:
            logger.error(f"Payment link generation failed: {e}", exc_info=True)
            raise PaymentLinkError(MSG_PAYMENT_LINK_FAILED) from e

        logger.info(
            f"Payment link generated: {tip.amount} {tip.currency.value} -> "
            f"{tip.target_address[:10]}... (fid={tip.sender_fid})"
        )
        return TipResponse(success=True, payment_url=payment_url)

    except PydanticValidationError as e:
        message = first_error_message(e)
        logger.info(f"Rejected tip request: {message}")
        return _tip_error(status.HTTP_400_BAD_REQUEST, message)
    except DomainError as e:
        return _tip_error(e.status_code, e.message)
    except Exception as e:
        logger.error(f"Tip request failed: {e}", exc_info=True)
        return _tip_error(status.HTTP_500_INTERNAL_SERVER_ERROR, MSG_PAYMENT_LINK_FAILED)


@router.post(
    "/validate-address",
    response_model=ValidateAddressResponse,
    response_model_exclude_none=True,
)
async def validate_address(request: Request):
    """
    Check an Ethereum address against the 0x + 40 hex format.

    Returns the lowercased address when valid.
    """
    try:
        payload = await _read_json(request)
        body = ValidateAddressRequest.model_validate(payload)
    except (PydanticValidationError, ValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"valid": False, "error": "Invalid request"},
        )

    if not is_valid_eth_address(body.address):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"valid": False, "error": MSG_INVALID_ADDRESS_FORMAT},
        )

    return ValidateAddressResponse(valid=True, address=body.address.lower())
