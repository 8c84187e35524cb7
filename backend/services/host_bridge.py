"""
Host bridge — Farcaster host context and haptics.

Two providers sit behind one interface:

    RealHostBridge:  wraps the host SDK object injected by the embedding app
    DemoHostBridge:  fixed demo identity, haptics are no-ops

select_host_bridge() is called once at startup. Any problem reaching the
host (no SDK, ready() failing, no signed-in user) degrades to demo mode;
it is never fatal.

The SDK object is duck-typed after the Farcaster mini-app SDK:
    sdk.actions.ready()                  (sync or async)
    sdk.context                          (object/dict, or awaitable)
    sdk.haptics.notificationOccurred(t)  success / warning / error
    sdk.haptics.impactOccurred(t)        light / medium / heavy
"""
import inspect
import logging
from typing import Any, Optional

from domain.enums import HapticType
from models import FarcasterClient, FarcasterContext, FarcasterLocation, FarcasterUser

logger = logging.getLogger(__name__)


DEMO_USER = FarcasterUser(
    fid=12345,
    username="tipjar_demo",
    display_name="Tip Jar Demo User",
    pfp_url=None,
)

DEMO_CONTEXT = FarcasterContext(
    user=DEMO_USER,
    client=FarcasterClient(platform_type="web", client_fid=0, added=False),
)


async def _maybe_await(value):
    if inspect.isawaitable(value):
        return await value
    return value


def _get(obj: Any, name: str, default=None):
    """Attribute-or-key lookup, for SDK payloads that arrive as dicts or objects."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


class HostBridge:
    """Interface shared by the real and demo host bridges."""

    is_demo: bool = False

    def __init__(self, context: FarcasterContext):
        self._context = context

    @property
    def context(self) -> FarcasterContext:
        return self._context

    @property
    def user(self) -> FarcasterUser:
        return self._context.user

    async def trigger_haptic(self, haptic: HapticType | str) -> None:
        raise NotImplementedError


class DemoHostBridge(HostBridge):
    """Fallback used outside a Farcaster host."""

    is_demo = True

    def __init__(self, context: FarcasterContext = DEMO_CONTEXT):
        super().__init__(context)

    async def trigger_haptic(self, haptic: HapticType | str) -> None:
        return None


class RealHostBridge(HostBridge):
    """Bridge backed by a live host SDK."""

    def __init__(self, sdk: Any, context: FarcasterContext):
        super().__init__(context)
        self._sdk = sdk

    async def trigger_haptic(self, haptic: HapticType | str) -> None:
        """Fire a haptic on the host. Failures are logged and ignored."""
        haptic = HapticType(haptic)
        haptics = _get(self._sdk, "haptics")
        method_name = "notificationOccurred" if haptic.is_notification else "impactOccurred"
        method = _get(haptics, method_name)
        if method is None:
            return
        try:
            await _maybe_await(method(haptic.value))
        except Exception as e:
            logger.debug(f"Haptic '{haptic.value}' not delivered: {e}")


def parse_host_context(raw: Any) -> Optional[FarcasterContext]:
    """
    Convert the SDK's context payload into a FarcasterContext.

    Returns None when there is no signed-in user (missing user or fid <= 0).
    """
    user = _get(raw, "user")
    fid = _get(user, "fid")
    if not isinstance(fid, int) or fid <= 0:
        return None

    client = _get(raw, "client")
    location = _get(raw, "location")
    platform_type = _get(client, "platformType")
    location_type = _get(location, "type")

    return FarcasterContext(
        user=FarcasterUser(
            fid=fid,
            username=_get(user, "username") or None,
            display_name=_get(user, "displayName") or None,
            pfp_url=_get(user, "pfpUrl") or None,
        ),
        client=FarcasterClient(
            platform_type=platform_type if platform_type in ("web", "mobile") else None,
            client_fid=_get(client, "clientFid") or 0,
            added=bool(_get(client, "added") or False),
        ),
        location=FarcasterLocation(type=location_type) if location_type else None,
    )


async def select_host_bridge(sdk: Any = None) -> HostBridge:
    """
    Pick the host bridge for this session.

    Args:
        sdk: Host SDK object, or None when running outside a host

    Returns:
        RealHostBridge when the host is ready and reports a signed-in user,
        otherwise DemoHostBridge.
    """
    if sdk is None:
        logger.info("No host SDK provided, using demo mode")
        return DemoHostBridge()

    try:
        ready = _get(_get(sdk, "actions"), "ready")
        if ready is None:
            raise AttributeError("host SDK has no actions.ready()")
        await _maybe_await(ready())
        raw_context = await _maybe_await(_get(sdk, "context"))
        context = parse_host_context(raw_context)
    except Exception as e:
        logger.warning(f"Farcaster SDK not available, using demo mode: {e}")
        return DemoHostBridge()

    if context is None:
        logger.info("Host context has no signed-in user, using demo mode")
        return DemoHostBridge()

    logger.info(f"Host bridge ready for fid={context.user.fid}")
    return RealHostBridge(sdk, context)
