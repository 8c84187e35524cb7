"""
Tests for the web3-backed wallet client.

Uses the fake AsyncWeb3 from tests.fakes, whose awaitable properties
(eth.accounts, eth.max_priority_fee) return a fresh coroutine per access.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from web3 import AsyncWeb3
from web3.exceptions import TimeExhausted

from config import Settings
from exceptions import TransactionFailedError, UserRejectedError, WalletNotConnectedError
from services.wallet_service import (
    BASE_CHAIN_ID,
    MAINNET_CHAIN_ID,
    Web3Wallet,
    build_wallet_config,
    classify_wallet_error,
    is_user_rejection,
)
from tests.fakes import SENDER_ADDRESS, TX_HASH, VALID_ADDRESS, fake_w3

# Well-known development key (Hardhat account #0)
LOCAL_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
LOCAL_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

@pytest.fixture
def wallet_config():
    return build_wallet_config(Settings(_env_file=None, walletconnect_project_id="demo-project"))

@pytest.fixture
def w3():
    return fake_w3()

@pytest.fixture
def factory(w3):
    return MagicMock(return_value=w3)

@pytest.fixture
def wallet(wallet_config, factory):
    return Web3Wallet(wallet_config, w3_factory=factory)

class TestWalletConfig:
    """Tests for build_wallet_config()."""

    @pytest.mark.unit
    def test_chains(self, wallet_config):
        assert [c.chain_id for c in wallet_config.chains] == [MAINNET_CHAIN_ID, BASE_CHAIN_ID]
        assert wallet_config.chain(BASE_CHAIN_ID).name == "Base"
        assert wallet_config.default_chain_id == MAINNET_CHAIN_ID
        assert wallet_config.walletconnect_project_id == "demo-project"

    @pytest.mark.unit
    def test_unknown_chain(self, wallet_config):
        with pytest.raises(ValueError):
            wallet_config.chain(137)

    @pytest.mark.unit
    def test_missing_walletconnect_id_warns(self, caplog):
        with caplog.at_level("WARNING"):
            build_wallet_config(Settings(_env_file=None, walletconnect_project_id=""))
        assert "WALLETCONNECT_PROJECT_ID is not set" in caplog.text

class TestErrorClassification:
    """Rejection detection by message substring."""

    @pytest.mark.unit
    @pytest.mark.parametrize("message", [
        "User rejected the request.",
        "MetaMask Tx Signature: User denied transaction signature.",
    ])
    def test_rejections(self, message):
        assert is_user_rejection(message)
        assert isinstance(classify_wallet_error(Exception(message)), UserRejectedError)

    @pytest.mark.unit
    def test_other_failures(self):
        error = classify_wallet_error(Exception("insufficient funds for gas"))
        assert isinstance(error, TransactionFailedError)

    @pytest.mark.unit
    def test_tip_errors_pass_through(self):
        original = WalletNotConnectedError("Please connect your wallet first")
        assert classify_wallet_error(original) is original

class TestConnection:
    """connect / disconnect / switch_chain."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_injected_connect(self, wallet, factory):
        address = await wallet.connect()
        assert address == SENDER_ADDRESS
        assert wallet.is_connected
        assert wallet.connector == "injected"
        factory.assert_called_once_with("https://eth.llamarpc.com")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_injected_connect_without_accounts(self, wallet_config):
        wallet = Web3Wallet(wallet_config, w3_factory=lambda url: fake_w3(accounts=()))
        with pytest.raises(WalletNotConnectedError):
            await wallet.connect()
        assert not wallet.is_connected

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_injected_connect_rejected(self, wallet, w3):
        w3.eth.accounts_error = Exception("User rejected the request.")
        with pytest.raises(UserRejectedError):
            await wallet.connect()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_local_connect(self, wallet, factory):
        address = await wallet.connect("local", private_key=LOCAL_KEY)
        assert address == LOCAL_ADDRESS
        assert wallet.connector == "local"
        factory.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_local_connect_needs_key(self, wallet):
        with pytest.raises(ValueError):
            await wallet.connect("local")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_connector(self, wallet):
        with pytest.raises(ValueError):
            await wallet.connect("walletconnect")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_disconnect_releases_provider(self, wallet, w3):
        await wallet.connect()
        await wallet.disconnect()
        w3.provider.disconnect.assert_awaited_once()
        assert not wallet.is_connected
        assert wallet.address is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_switch_chain_keeps_account(self, wallet, factory):
        await wallet.connect()
        chain = await wallet.switch_chain(BASE_CHAIN_ID)

        assert chain.name == "Base"
        assert wallet.address == SENDER_ADDRESS
        assert wallet.explorer_address_url() == f"https://basescan.org/address/{SENDER_ADDRESS}"

        await wallet.get_balance()
        assert factory.call_args_list[-1].args == ("https://mainnet.base.org",)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_switch_to_unconfigured_chain(self, wallet):
        with pytest.raises(ValueError):
            await wallet.switch_chain(10)

class TestBalance:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_balance_in_eth(self, wallet, w3):
        await wallet.connect()
        assert await wallet.get_balance() == Decimal("1.5")
        w3.eth.get_balance.assert_awaited_once_with(SENDER_ADDRESS)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_balance_requires_connection(self, wallet):
        with pytest.raises(WalletNotConnectedError):
            await wallet.get_balance()

    @pytest.mark.unit
    def test_explorer_url_requires_connection(self, wallet):
        with pytest.raises(WalletNotConnectedError):
            wallet.explorer_address_url()

class TestSendTransaction:
    """ETH transfers through the injected and local connectors."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_injected_transfer(self, wallet, w3):
        await wallet.connect()
        tx_hash = await wallet.send_transaction(VALID_ADDRESS, "0.01")

        assert tx_hash == TX_HASH
        tx = w3.eth.send_transaction.await_args.args[0]
        assert tx["from"] == SENDER_ADDRESS
        assert tx["to"] == AsyncWeb3.to_checksum_address(VALID_ADDRESS)
        assert tx["value"] == 10_000_000_000_000_000
        w3.eth.send_raw_transaction.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_local_transfer_is_signed(self, wallet, w3):
        await wallet.connect("local", private_key=LOCAL_KEY)
        tx_hash = await wallet.send_transaction(VALID_ADDRESS, "1")

        assert tx_hash == TX_HASH
        w3.eth.send_transaction.assert_not_called()
        raw = w3.eth.send_raw_transaction.await_args.args[0]
        assert isinstance(raw, (bytes, bytearray))
        estimated = w3.eth.estimate_gas.await_args.args[0]
        assert estimated["nonce"] == 7
        assert estimated["chainId"] == MAINNET_CHAIN_ID

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_requires_connection(self, wallet, w3):
        with pytest.raises(WalletNotConnectedError):
            await wallet.send_transaction(VALID_ADDRESS, "1")
        w3.eth.send_transaction.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_invalid_amount(self, wallet):
        await wallet.connect()
        with pytest.raises(TransactionFailedError):
            await wallet.send_transaction(VALID_ADDRESS, "abc")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_rejected_in_wallet(self, wallet, w3):
        await wallet.connect()
        w3.eth.send_transaction.side_effect = Exception("User denied transaction signature")
        with pytest.raises(UserRejectedError):
            await wallet.send_transaction(VALID_ADDRESS, "1")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_provider_failure(self, wallet, w3):
        await wallet.connect()
        w3.eth.send_transaction.side_effect = Exception("insufficient funds")
        with pytest.raises(TransactionFailedError):
            await wallet.send_transaction(VALID_ADDRESS, "1")

class TestReceipts:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_confirmed(self, wallet, w3):
        receipt = await wallet.wait_for_transaction_receipt(TX_HASH)
        assert receipt["blockNumber"] == 19_000_000
        kwargs = w3.eth.wait_for_transaction_receipt.await_args.kwargs
        assert kwargs["timeout"] == 120.0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_reverted(self, wallet, w3):
        w3.eth.wait_for_transaction_receipt.return_value = {"status": 0, "blockNumber": 1}
        with pytest.raises(TransactionFailedError, match="reverted"):
            await wallet.wait_for_transaction_receipt(TX_HASH)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout(self, wallet, w3):
        w3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted("timed out")
        with pytest.raises(TransactionFailedError, match="not confirmed"):
            await wallet.wait_for_transaction_receipt(TX_HASH)
