"""
Client startup. Wires settings, host bridge, API client and wallet into
one TipController for a page session.
"""
import logging
import webbrowser
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Optional

from config import Settings
from services.host_bridge import select_host_bridge
from services.tip_api_client import TipApiClient
from services.tip_controller import TipController
from services.wallet_service import WalletClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def tip_session(
    settings: Settings,
    sdk: Any = None,
    wallet: Optional[WalletClient] = None,
    open_url: Callable[[str], Any] = webbrowser.open_new_tab,
    api: Optional[TipApiClient] = None,
) -> AsyncIterator[TipController]:
    """
    Build a controller for one session and tear it down on exit.

    The host bridge is selected once here. The API client is created from
    ``tip_api_base_url`` unless one is passed in, and is closed on exit only
    when created here.
    """
    host = await select_host_bridge(sdk)
    owns_api = api is None
    if api is None:
        api = TipApiClient(settings.tip_api_base_url, timeout=settings.request_timeout_seconds)

    controller: Optional[TipController] = None
    try:
        controller = TipController(
            api=api,
            host=host,
            wallet=wallet,
            routing=settings.tip_routing,
            open_url=open_url,
        )
        logger.info(
            f"Tip session started (routing={controller.routing.value}, demo={host.is_demo}, "
            f"wallet={'connected' if wallet is not None and wallet.is_connected else 'none'})"
        )
        yield controller
    finally:
        if controller is not None:
            controller.close()
        if owns_api:
            await api.aclose()
