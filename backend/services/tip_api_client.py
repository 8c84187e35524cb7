"""
Tip API client. Asks the server for a payment link.

Wraps httpx.AsyncClient. Transport failures become NetworkError; any
non-2xx response or a body without a payment link becomes
TipSubmissionError carrying the server's message when it sent one.
"""
import logging
from typing import Optional

import httpx

from domain.constants import MSG_GENERIC_FAILURE, MSG_PAYMENT_LINK_FAILED
from exceptions import NetworkError, TipSubmissionError
from models import TipRequest

logger = logging.getLogger(__name__)


class TipApiClient:
    """Client for POST /api/tip."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "TipApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def create_payment_link(self, tip: TipRequest) -> str:
        """
        Request a payment link for *tip*.

        Returns:
            The payment URL

        Raises:
            NetworkError, TipSubmissionError
        """
        payload = tip.model_dump(by_alias=True, exclude_none=True, mode="json")
        try:
            response = await self._client.post("/api/tip", json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"Tip API unreachable: {e}")
            raise NetworkError(MSG_GENERIC_FAILURE) from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.is_error:
            raise TipSubmissionError(data.get("error") or MSG_PAYMENT_LINK_FAILED)

        payment_url = data.get("paymentUrl")
        if not data.get("success") or not payment_url:
            raise TipSubmissionError(data.get("error") or MSG_PAYMENT_LINK_FAILED)

        return payment_url
