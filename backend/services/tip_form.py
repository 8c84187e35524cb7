"""
Tip form view-model: amount/currency input, presets and button state.

Holds no rendering; a UI binds to the properties here and calls the
handlers. Validation happens before anything reaches the controller.
"""
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from domain.constants import PRESET_AMOUNTS
from domain.enums import Currency, HapticType, TipStatus
from exceptions import FormValidationError
from models import TipFormInput
from services.tip_controller import TipController, TipState
from utils.formatting import format_address
from utils.validators import field_errors

logger = logging.getLogger(__name__)


class TipForm:
    """Form state bound to a TipController."""

    preset_amounts = PRESET_AMOUNTS

    def __init__(self, controller: TipController) -> None:
        self.controller = controller
        self.amount = ""
        self.currency = Currency.ETH
        self.errors: dict[str, str] = {}

    # ── Input handlers ──────────────────────────────────────────

    async def select_preset(self, amount: str) -> None:
        self.amount = amount
        self.errors.pop("amount", None)
        await self.controller.host.trigger_haptic(HapticType.LIGHT)

    async def select_currency(self, currency: Currency | str) -> None:
        self.currency = Currency(currency)
        await self.controller.host.trigger_haptic(HapticType.LIGHT)

    def set_amount(self, amount: str) -> None:
        self.amount = amount

    def validate(self) -> TipFormInput:
        """
        Check the current input.

        Raises:
            FormValidationError with per-field messages
        """
        try:
            values = TipFormInput(amount=self.amount, currency=self.currency)
        except PydanticValidationError as e:
            self.errors = field_errors(e)
            logger.debug(f"Tip form invalid: {self.errors}")
            raise FormValidationError(self.errors) from e
        self.errors = {}
        return values

    async def submit(self) -> TipState:
        """Validate and hand the tip to the controller."""
        values = self.validate()
        return await self.controller.submit_tip(values.amount, values.currency)

    # ── Presentation ────────────────────────────────────────────

    @property
    def recipient_label(self) -> str:
        return self.controller.recipient_name or "Recipient"

    @property
    def recipient_address(self) -> str:
        return format_address(self.controller.target_address)

    @property
    def preset_labels(self) -> list[str]:
        return [f"{amount} {self.currency.value}" for amount in self.preset_amounts]

    @property
    def submit_disabled(self) -> bool:
        state = self.controller.state
        return state.is_submitting or state.status is TipStatus.LOADING

    @property
    def submit_label(self) -> str:
        state = self.controller.state
        if state.is_submitting or state.status is TipStatus.LOADING:
            return "Processing..."
        if state.status is TipStatus.SUCCESS:
            return "Tip Sent!"
        if state.status is TipStatus.ERROR:
            return "Try Again"
        return "Send Tip"

    @property
    def banner(self) -> Optional[tuple[TipStatus, str]]:
        """(status, message) for the status banner, or None when hidden."""
        state = self.controller.state
        if state.status is TipStatus.IDLE or not state.message:
            return None
        return state.status, state.message
