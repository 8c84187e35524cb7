"""
Wallet panel view-model: connect menu, account summary, network switch,
copy address and explorer link.

Like TipForm, it holds no rendering. The "Copied!" flag clears itself
after a short delay; close() cancels that timer.
"""
import asyncio
import logging
import webbrowser
from decimal import Decimal
from typing import Any, Callable, Optional

from services.wallet_service import CONNECTOR_INJECTED, Web3Wallet
from utils.formatting import format_address, format_balance

logger = logging.getLogger(__name__)

COPY_RESET_SECONDS = 2.0
NATIVE_SYMBOL = "ETH"

_CONNECTOR_NAMES = {
    "injected": "Browser Wallet",
    "local": "Private Key",
}


class WalletPanel:
    """Account menu bound to a Web3Wallet."""

    def __init__(
        self,
        wallet: Web3Wallet,
        open_url: Callable[[str], Any] = webbrowser.open_new_tab,
        copy_to_clipboard: Optional[Callable[[str], Any]] = None,
        copy_reset_delay: float = COPY_RESET_SECONDS,
    ) -> None:
        self.wallet = wallet
        self._open_url = open_url
        self._copy_to_clipboard = copy_to_clipboard
        self._copy_reset_delay = copy_reset_delay
        self._copy_handle: Optional[asyncio.TimerHandle] = None

        self.is_pending = False
        self.copied = False
        self.balance: Optional[Decimal] = None

    # ── Connection ──────────────────────────────────────────────

    async def connect(self, connector: str = CONNECTOR_INJECTED, private_key: Optional[str] = None) -> str:
        """Connect through *connector* and load the balance."""
        self.is_pending = True
        try:
            address = await self.wallet.connect(connector, private_key=private_key)
        finally:
            self.is_pending = False
        await self.refresh_balance()
        return address

    async def disconnect(self) -> None:
        await self.wallet.disconnect()
        self.balance = None
        self._clear_copied()

    async def switch_chain(self, chain_id: int) -> None:
        await self.wallet.switch_chain(chain_id)
        await self.refresh_balance()

    async def refresh_balance(self) -> Optional[Decimal]:
        """Reload the balance. A failed lookup hides it rather than failing the panel."""
        if not self.wallet.is_connected:
            self.balance = None
            return None
        try:
            self.balance = await self.wallet.get_balance()
        except Exception as e:
            logger.warning(f"Balance lookup failed: {e}")
            self.balance = None
        return self.balance

    # ── Account actions ─────────────────────────────────────────

    def copy_address(self) -> Optional[str]:
        address = self.wallet.address
        if address is None:
            return None
        if self._copy_to_clipboard is not None:
            self._copy_to_clipboard(address)
        self.copied = True
        if self._copy_handle is not None:
            self._copy_handle.cancel()
        self._copy_handle = asyncio.get_running_loop().call_later(self._copy_reset_delay, self._clear_copied)
        return address

    def _clear_copied(self) -> None:
        if self._copy_handle is not None:
            self._copy_handle.cancel()
            self._copy_handle = None
        self.copied = False

    def view_on_explorer(self) -> Optional[str]:
        if not self.wallet.is_connected:
            return None
        url = self.wallet.explorer_address_url()
        self._open_url(url)
        return url

    def close(self) -> None:
        self._clear_copied()

    # ── Presentation ────────────────────────────────────────────

    @property
    def button_label(self) -> str:
        if self.wallet.is_connected:
            return format_address(self.wallet.address)
        return "Connecting..." if self.is_pending else "Connect Wallet"

    @property
    def connector_label(self) -> Optional[str]:
        connector = self.wallet.connector
        if connector is None:
            return None
        return f"Connected with {_CONNECTOR_NAMES.get(connector, connector)}"

    @property
    def balance_label(self) -> Optional[str]:
        if self.balance is None:
            return None
        return f"{format_balance(self.balance)} {NATIVE_SYMBOL}"

    @property
    def copy_label(self) -> str:
        return "Copied!" if self.copied else "Copy Address"

    @property
    def networks(self) -> list[tuple[int, str, bool]]:
        """(chain_id, name, active) for each configured chain."""
        active = self.wallet.chain.chain_id
        return [(c.chain_id, c.name, c.chain_id == active) for c in self.wallet.config.chains]
