"""
Payment link service — builds hosted Send.it payment URLs.

    https://pay.send.it/<targetAddress>?amount=<amount>[&token=usdc]

The builder is pure: same input, same URL. Inputs are expected to be
validated already (see models.TipRequest).
"""
import logging
from urllib.parse import urlencode

from domain.constants import PAYMENT_BASE_URL, USDC_TOKEN_PARAM
from domain.enums import Currency

logger = logging.getLogger(__name__)


def build_payment_url(
    target_address: str,
    amount: str,
    currency: Currency | str,
    base_url: str = PAYMENT_BASE_URL,
) -> str:
    """
    Build the payment link for a tip.

    Args:
        target_address: Recipient Ethereum address
        amount: Decimal amount string, passed through as-is
        currency: ETH or USDC; only USDC adds a token parameter
        base_url: Payment host (overridable via PAYMENT_BASE_URL)

    Returns:
        The payment URL
    """
    params = [("amount", amount)]
    if currency == Currency.USDC:
        params.append(("token", USDC_TOKEN_PARAM))

    url = f"{base_url.rstrip('/')}/{target_address}?{urlencode(params)}"
    logger.debug(f"Built payment URL for {target_address[:10]}...: {url}")
    return url
