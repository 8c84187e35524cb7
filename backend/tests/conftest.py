"""
Pytest configuration and shared fixtures for Tip Jar tests.

Provides an httpx client bound to the FastAPI app, a payment-link API stub,
and controller fixtures wired to recording fakes.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock

from httpx import ASGITransport, AsyncClient

from main import app
from services.tip_controller import TipController
from tests.fakes import (
    PAYMENT_URL,
    TEST_GUARD_RESET_DELAY,
    TEST_RESET_DELAY,
    FakeWallet,
    RecordingHostBridge,
    VALID_ADDRESS,
)


# ── HTTP Fixtures ────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def client():
    """httpx client talking to the FastAPI app in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ── Controller Fixtures ──────────────────────────────────────────────


@pytest.fixture
def host():
    return RecordingHostBridge()


@pytest.fixture
def api():
    """TipApiClient stand-in returning a fixed payment link."""
    stub = MagicMock()
    stub.create_payment_link = AsyncMock(return_value=PAYMENT_URL)
    return stub


@pytest.fixture
def opened_urls():
    return []


@pytest.fixture
def make_controller(api, host, opened_urls):
    """Factory for controllers with fast timers; closes them after the test."""
    created = []

    def _make(wallet=None, routing="hybrid", **kwargs):
        controller = TipController(
            api=kwargs.pop("api", api),
            host=kwargs.pop("host", host),
            wallet=wallet,
            routing=routing,
            target_address=kwargs.pop("target_address", VALID_ADDRESS),
            open_url=opened_urls.append,
            reset_delay=kwargs.pop("reset_delay", TEST_RESET_DELAY),
            guard_reset_delay=kwargs.pop("guard_reset_delay", TEST_GUARD_RESET_DELAY),
            **kwargs,
        )
        created.append(controller)
        return controller

    yield _make

    for controller in created:
        controller.close()


@pytest.fixture
def connected_wallet():
    return FakeWallet(connected=True)


@pytest.fixture
def disconnected_wallet():
    return FakeWallet(connected=False)
