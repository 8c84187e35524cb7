"""
Input validation utilities for the Tip Jar.

Provides reusable validators for Ethereum addresses and decimal amounts.
The same checks back the pydantic models, the validate-address endpoint
and the client-side tip form.
"""
import math
import re

from pydantic import ValidationError as PydanticValidationError

from domain.constants import (
    ETH_ADDRESS_PATTERN,
    MSG_INVALID_ADDRESS,
    MSG_INVALID_AMOUNT,
)

_ETH_ADDRESS_RE = re.compile(ETH_ADDRESS_PATTERN)


def is_valid_eth_address(address) -> bool:
    """Return True if *address* is ``0x`` followed by exactly 40 hex chars."""
    if not isinstance(address, str):
        return False
    return _ETH_ADDRESS_RE.fullmatch(address) is not None


def validate_eth_address(address: str) -> str:
    """
    Validate an Ethereum address format.

    No EIP-55 checksum check is made; mixed case passes as long as every
    character is hex.

    Returns:
        The validated address (unchanged)

    Raises:
        ValueError if the address is malformed
    """
    if not is_valid_eth_address(address):
        raise ValueError(MSG_INVALID_ADDRESS)
    return address


def parse_positive_amount(amount) -> float:
    """
    Parse a decimal amount string and require a finite value > 0.

    Rejects empty strings, non-numeric text, ``nan`` and ``inf``.

    Raises:
        ValueError if the amount is not a finite positive number
    """
    if not isinstance(amount, str):
        raise ValueError(MSG_INVALID_AMOUNT)
    try:
        value = float(amount.strip())
    except ValueError:
        raise ValueError(MSG_INVALID_AMOUNT)
    if not math.isfinite(value) or value <= 0:
        raise ValueError(MSG_INVALID_AMOUNT)
    return value


def validate_amount(amount: str) -> str:
    """Validate an amount string, returning it unchanged."""
    parse_positive_amount(amount)
    return amount


def first_error_message(exc: PydanticValidationError, default: str = "Invalid request data") -> str:
    """
    Extract a client-facing message from the first pydantic validation error.

    Custom validator messages (``ValueError`` raised in a field validator) are
    returned verbatim; built-in errors are prefixed with the offending field.
    """
    errors = exc.errors()
    if not errors:
        return default
    first = errors[0]
    ctx_error = (first.get("ctx") or {}).get("error")
    if first.get("type") == "value_error" and ctx_error is not None:
        return str(ctx_error)
    field = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg") or default
    return f"{field}: {message}" if field else message


def field_errors(exc: PydanticValidationError) -> dict[str, str]:
    """Map pydantic errors to ``{field: message}``, keeping the first error per field."""
    errors: dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err.get("loc") else "form"
        ctx_error = (err.get("ctx") or {}).get("error")
        message = str(ctx_error) if ctx_error is not None else err.get("msg", "Invalid value")
        errors.setdefault(field, message)
    return errors
