"""
Domain enums shared by the server and the client core.
"""

from enum import Enum


class Currency(str, Enum):
    ETH = "ETH"
    USDC = "USDC"


class TipStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class HapticType(str, Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

    @property
    def is_notification(self) -> bool:
        """Notification haptics (success/warning/error) vs. impact haptics."""
        return self in (HapticType.SUCCESS, HapticType.WARNING, HapticType.ERROR)


class TipRouting(str, Enum):
    """How the controller decides between wallet transfers and payment links."""
    HYBRID = "hybrid"
    LINK_ONLY = "link_only"
    WALLET_ETH = "wallet_eth"
