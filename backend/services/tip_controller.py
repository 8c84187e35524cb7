"""
Tip Submission Controller — client-side status machine for sending tips.

    idle ──submit──▶ loading ──▶ success ──(5s)──▶ idle
                        │
                        └──────▶ error ────(5s)──▶ idle

Routing (TipRouting):
    hybrid:     connected wallet + ETH sends directly, everything else
                goes through a hosted payment link
    link_only:  every tip goes through a payment link
    wallet_eth: ETH always sends directly (guarded when no wallet is
                connected), USDC goes through a payment link

The controller owns its auto-reset timer. Each transition cancels the
previous timer and close() cancels whatever is pending, so nothing fires
after teardown. Only one submission runs at a time.
"""
import asyncio
import logging
import webbrowser
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from domain.constants import (
    DEFAULT_RECIPIENT_NAME,
    DEFAULT_TARGET_ADDRESS,
    MSG_CONFIRM_IN_WALLET,
    MSG_GENERATING_LINK,
    MSG_GENERIC_FAILURE,
    MSG_LINK_OPENED,
    MSG_TIP_CONFIRMED,
    MSG_TRANSACTION_FAILED,
    MSG_USER_REJECTED,
    MSG_WAITING_CONFIRMATION,
    MSG_WALLET_NOT_CONNECTED,
    STATUS_RESET_SECONDS,
    WALLET_GUARD_RESET_SECONDS,
)
from domain.enums import Currency, HapticType, TipRouting, TipStatus
from exceptions import FormValidationError, TipError, UserRejectedError, WalletNotConnectedError
from models import RecipientSettings, TipRequest
from services.host_bridge import DemoHostBridge, HostBridge
from services.tip_api_client import TipApiClient
from services.wallet_service import WalletClient, classify_wallet_error
from utils.validators import field_errors

logger = logging.getLogger(__name__)

_STATUS_HAPTICS = {
    TipStatus.LOADING: HapticType.MEDIUM,
    TipStatus.SUCCESS: HapticType.SUCCESS,
    TipStatus.ERROR: HapticType.ERROR,
}


@dataclass(frozen=True)
class TipState:
    """Snapshot handed to subscribers on every change."""
    status: TipStatus = TipStatus.IDLE
    message: str = ""
    is_submitting: bool = False


class TipController:
    """Drives one page session's tip submissions."""

    def __init__(
        self,
        api: TipApiClient,
        host: Optional[HostBridge] = None,
        wallet: Optional[WalletClient] = None,
        routing: TipRouting | str = TipRouting.HYBRID,
        target_address: str = DEFAULT_TARGET_ADDRESS,
        recipient_name: str = DEFAULT_RECIPIENT_NAME,
        open_url: Callable[[str], Any] = webbrowser.open_new_tab,
        reset_delay: float = STATUS_RESET_SECONDS,
        guard_reset_delay: float = WALLET_GUARD_RESET_SECONDS,
    ) -> None:
        self.api = api
        self.host = host or DemoHostBridge()
        self.wallet = wallet
        self.routing = TipRouting(routing)
        self.target_address = target_address
        self.recipient_name = recipient_name
        self._open_url = open_url
        self._reset_delay = reset_delay
        self._guard_reset_delay = guard_reset_delay

        self._state = TipState()
        self._reset_handle: Optional[asyncio.TimerHandle] = None
        self._subscribers: list[Callable[[TipState], Any]] = []
        self._closed = False

        self.last_error: Optional[TipError] = None
        self.last_tx_hash: Optional[str] = None
        self.last_payment_url: Optional[str] = None

    # ── State ───────────────────────────────────────────────────

    @property
    def state(self) -> TipState:
        return self._state

    @property
    def status(self) -> TipStatus:
        return self._state.status

    @property
    def message(self) -> str:
        return self._state.message

    @property
    def is_submitting(self) -> bool:
        return self._state.is_submitting

    @property
    def reset_pending(self) -> bool:
        return self._reset_handle is not None

    def subscribe(self, callback: Callable[[TipState], Any]) -> Callable[[], None]:
        """Register a state listener. Returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _set_state(self, **changes) -> None:
        values = {
            "status": self._state.status,
            "message": self._state.message,
            "is_submitting": self._state.is_submitting,
        }
        values.update(changes)
        self._state = TipState(**values)
        if self._closed:
            return
        for callback in list(self._subscribers):
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Tip state subscriber failed: {e}", exc_info=True)

    def _cancel_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

    def _schedule_reset(self, delay: float) -> None:
        self._cancel_reset()
        if self._closed:
            return
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(delay, self._reset)

    def _reset(self) -> None:
        self._reset_handle = None
        if self._closed:
            return
        self._set_state(status=TipStatus.IDLE, message="")

    async def _transition(
        self,
        status: TipStatus,
        message: str,
        reset_after: Optional[float] = None,
    ) -> None:
        """
        Move to *status* and fire its haptic.

        Every success or error fires; loading fires only when first entered,
        so the follow-up loading message stays silent.
        """
        self._cancel_reset()
        repeated_loading = status is TipStatus.LOADING and self._state.status is TipStatus.LOADING
        self._set_state(status=status, message=message)
        if reset_after is not None:
            self._schedule_reset(reset_after)
        if self._closed or repeated_loading or status not in _STATUS_HAPTICS:
            return
        await self.host.trigger_haptic(_STATUS_HAPTICS[status])

    async def _fail(self, error: TipError, message: str, reset_after: Optional[float] = None) -> None:
        self.last_error = error
        await self._transition(
            TipStatus.ERROR,
            message,
            reset_after=self._reset_delay if reset_after is None else reset_after,
        )

    # ── Lifetime ────────────────────────────────────────────────

    def close(self) -> None:
        """
        Cancel the pending reset and stop notifying.

        A submission still in flight runs to completion, but its state
        changes reach no subscriber and fire no haptic.
        """
        self._closed = True
        self._cancel_reset()

    async def __aenter__(self) -> "TipController":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    # ── Recipient ───────────────────────────────────────────────

    async def update_recipient(self, values: RecipientSettings | dict) -> RecipientSettings:
        """Replace the recipient name and address from the settings panel."""
        try:
            recipient = (
                values if isinstance(values, RecipientSettings)
                else RecipientSettings.model_validate(values)
            )
        except PydanticValidationError as e:
            raise FormValidationError(field_errors(e)) from e
        self.recipient_name = recipient.recipient_name
        self.target_address = recipient.target_address
        await self.host.trigger_haptic(HapticType.SUCCESS)
        logger.info(f"Recipient updated: {recipient.recipient_name} ({recipient.target_address[:10]}...)")
        return recipient

    # ── Submission ──────────────────────────────────────────────

    def _build_request(self, amount: str, currency: Currency | str) -> TipRequest:
        user = self.host.user
        try:
            return TipRequest(
                target_address=self.target_address,
                amount=amount,
                currency=currency,
                sender_fid=user.fid if user else None,
                sender_username=user.username if user else None,
            )
        except PydanticValidationError as e:
            raise FormValidationError(field_errors(e)) from e

    def uses_wallet(self, currency: Currency | str) -> bool:
        """True when a tip in *currency* would be sent from the wallet."""
        currency = Currency(currency)
        if self.routing is TipRouting.LINK_ONLY or currency is not Currency.ETH:
            return False
        if self.routing is TipRouting.WALLET_ETH:
            return True
        return self.wallet is not None and self.wallet.is_connected

    async def submit_tip(self, amount: str, currency: Currency | str) -> TipState:
        """
        Submit a tip along the route chosen by the routing policy.

        Raises:
            FormValidationError before any state change when the input is invalid
        """
        if self._closed:
            raise RuntimeError("TipController is closed")
        if self._state.is_submitting:
            logger.warning("Tip submission already in progress, ignoring")
            return self._state

        tip = self._build_request(amount, currency)
        if self.uses_wallet(tip.currency):
            await self._send_direct(tip)
        else:
            await self._send_via_link(tip)
        return self._state

    async def send_direct_tip(self, amount: str) -> TipState:
        """Send an ETH tip from the connected wallet, bypassing routing."""
        if self._closed:
            raise RuntimeError("TipController is closed")
        if self._state.is_submitting:
            logger.warning("Tip submission already in progress, ignoring")
            return self._state

        await self._send_direct(self._build_request(amount, Currency.ETH))
        return self._state

    async def _send_direct(self, tip: TipRequest) -> None:
        if self.wallet is None or not self.wallet.is_connected:
            await self._fail(
                WalletNotConnectedError(MSG_WALLET_NOT_CONNECTED),
                MSG_WALLET_NOT_CONNECTED,
                reset_after=self._guard_reset_delay,
            )
            return

        self._set_state(is_submitting=True)
        try:
            await self._transition(TipStatus.LOADING, MSG_CONFIRM_IN_WALLET)
            try:
                tx_hash = await self.wallet.send_transaction(tip.target_address, tip.amount)
                self.last_tx_hash = tx_hash
                await self._transition(TipStatus.LOADING, MSG_WAITING_CONFIRMATION)
                await self.wallet.wait_for_transaction_receipt(tx_hash)
            except Exception as e:
                error = classify_wallet_error(e)
                logger.warning(f"Direct tip failed: {e}")
                message = MSG_USER_REJECTED if isinstance(error, UserRejectedError) else MSG_TRANSACTION_FAILED
                await self._fail(error, message)
                return

            self.last_error = None
            logger.info(f"Direct tip confirmed: {tip.amount} ETH -> {tip.target_address[:10]}... ({tx_hash})")
            await self._transition(TipStatus.SUCCESS, MSG_TIP_CONFIRMED, reset_after=self._reset_delay)
        finally:
            self._set_state(is_submitting=False)

    async def _send_via_link(self, tip: TipRequest) -> None:
        self._set_state(is_submitting=True)
        try:
            await self._transition(TipStatus.LOADING, MSG_GENERATING_LINK)
            try:
                payment_url = await self.api.create_payment_link(tip)
                self._open_url(payment_url)
            except TipError as e:
                await self._fail(e, str(e) or MSG_GENERIC_FAILURE)
                return
            except Exception as e:
                logger.error(f"Payment link flow failed: {e}", exc_info=True)
                await self._fail(TipError(MSG_GENERIC_FAILURE), MSG_GENERIC_FAILURE)
                return

            self.last_error = None
            self.last_payment_url = payment_url
            logger.info(f"Payment link opened: {payment_url}")
            await self._transition(TipStatus.SUCCESS, MSG_LINK_OPENED, reset_after=self._reset_delay)
        finally:
            self._set_state(is_submitting=False)
