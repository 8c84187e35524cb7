"""
Wallet service — EVM wallet connection and ETH transfers via web3.py.

The wallet configuration (chains, connectors, app metadata) is an explicit
object built from settings and handed to whoever needs it; nothing here
reads global state at import time.

Connectors:
    injected: the JSON-RPC provider manages the account and signs
               (eth_accounts / eth_sendTransaction, like a browser wallet)
    local:    a private key held by eth_account signs locally
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional, Protocol

from eth_account import Account
from eth_account.signers.local import LocalAccount
from pydantic import BaseModel, Field
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import TimeExhausted

from config import Settings
from exceptions import (
    TipError,
    TransactionFailedError,
    UserRejectedError,
    WalletNotConnectedError,
)

logger = logging.getLogger(__name__)

MAINNET_CHAIN_ID = 1
BASE_CHAIN_ID = 8453

CONNECTOR_INJECTED = "injected"
CONNECTOR_LOCAL = "local"

_REJECTION_MARKERS = ("user rejected", "user denied")


# ════════════════════════════════════════════════════════════════════
# Configuration
# ════════════════════════════════════════════════════════════════════


class ChainConfig(BaseModel):
    """One supported EVM chain."""
    chain_id: int
    name: str
    rpc_url: str
    explorer_url: str


class WalletConfig(BaseModel):
    """Chains, connectors and app metadata for the wallet layer."""
    chains: list[ChainConfig]
    default_chain_id: int = MAINNET_CHAIN_ID
    connectors: list[str] = Field(default_factory=lambda: [CONNECTOR_INJECTED, CONNECTOR_LOCAL])
    app_name: str = "Tip Jar"
    app_description: str = ""
    app_url: str = ""
    walletconnect_project_id: str = ""
    receipt_timeout_seconds: float = 120.0
    receipt_poll_seconds: float = 1.0

    def chain(self, chain_id: int) -> ChainConfig:
        for c in self.chains:
            if c.chain_id == chain_id:
                return c
        raise ValueError(f"Chain {chain_id} is not configured")


def build_wallet_config(settings: Settings) -> WalletConfig:
    """Build the wallet configuration for Ethereum mainnet and Base."""
    if not settings.walletconnect_project_id:
        logger.warning(
            "WALLETCONNECT_PROJECT_ID is not set. Wallet connections may not work properly."
        )
    return WalletConfig(
        chains=[
            ChainConfig(
                chain_id=MAINNET_CHAIN_ID,
                name="Ethereum",
                rpc_url=settings.eth_rpc_url,
                explorer_url="https://etherscan.io",
            ),
            ChainConfig(
                chain_id=BASE_CHAIN_ID,
                name="Base",
                rpc_url=settings.base_rpc_url,
                explorer_url="https://basescan.org",
            ),
        ],
        app_name=settings.app_name,
        app_description=settings.app_description,
        app_url=settings.app_url,
        walletconnect_project_id=settings.walletconnect_project_id,
    )


# ════════════════════════════════════════════════════════════════════
# Error classification
# ════════════════════════════════════════════════════════════════════


def is_user_rejection(error: BaseException | str) -> bool:
    """True when a wallet failure message says the user rejected the request."""
    lower = str(error).lower()
    return any(marker in lower for marker in _REJECTION_MARKERS)


def classify_wallet_error(error: BaseException) -> TipError:
    """Map a raw wallet/provider exception onto the tip error hierarchy."""
    if isinstance(error, TipError):
        return error
    if is_user_rejection(error):
        return UserRejectedError(str(error))
    return TransactionFailedError(str(error))


# ════════════════════════════════════════════════════════════════════
# Wallet client
# ════════════════════════════════════════════════════════════════════


class WalletClient(Protocol):
    """What the tip controller needs from a wallet."""

    @property
    def is_connected(self) -> bool: ...

    @property
    def address(self) -> Optional[str]: ...

    async def send_transaction(self, to_address: str, amount_eth: str) -> str: ...

    async def wait_for_transaction_receipt(self, tx_hash: str) -> dict: ...


def _default_w3_factory(rpc_url: str) -> AsyncWeb3:
    return AsyncWeb3(AsyncHTTPProvider(rpc_url))


class Web3Wallet:
    """
    Connected-wallet session backed by AsyncWeb3.

    Not connected until connect() is called. Switching chains keeps the
    connected account.
    """

    def __init__(
        self,
        config: WalletConfig,
        w3_factory: Callable[[str], Any] = _default_w3_factory,
    ) -> None:
        self.config = config
        self._w3_factory = w3_factory
        self._chain = config.chain(config.default_chain_id)
        self._w3: Any = None
        self._account: LocalAccount | None = None
        self._address: Optional[str] = None
        self._connector: Optional[str] = None

    # ── Connection ───────────────────────────────────────────────

    def _get_w3(self) -> Any:
        if self._w3 is None:
            self._w3 = self._w3_factory(self._chain.rpc_url)
        return self._w3

    @property
    def is_connected(self) -> bool:
        return self._address is not None

    @property
    def address(self) -> Optional[str]:
        return self._address

    @property
    def connector(self) -> Optional[str]:
        return self._connector

    @property
    def chain(self) -> ChainConfig:
        return self._chain

    async def connect(
        self,
        connector: str = CONNECTOR_INJECTED,
        private_key: Optional[str] = None,
    ) -> str:
        """
        Connect an account.

        Args:
            connector: "injected" (provider-managed account) or "local"
            private_key: Required for the local connector

        Returns:
            The checksummed account address
        """
        if connector not in self.config.connectors:
            raise ValueError(f"Unknown connector: {connector}")

        if connector == CONNECTOR_LOCAL:
            if not private_key:
                raise ValueError("The local connector needs a private key")
            self._account = Account.from_key(private_key)
            address = self._account.address
        else:
            w3 = self._get_w3()
            try:
                accounts = await w3.eth.accounts
            except Exception as e:
                raise classify_wallet_error(e)
            if not accounts:
                raise WalletNotConnectedError("No accounts available from the wallet provider")
            address = accounts[0]

        self._address = AsyncWeb3.to_checksum_address(address)
        self._connector = connector
        logger.info(f"Wallet connected via {connector}: {self._address}")
        return self._address

    async def disconnect(self) -> None:
        """Forget the account and release the provider."""
        provider = getattr(self._w3, "provider", None)
        if provider is not None and hasattr(provider, "disconnect"):
            await provider.disconnect()
        self._w3 = None
        self._account = None
        self._address = None
        self._connector = None
        logger.info("Wallet disconnected")

    def _require_address(self) -> str:
        if self._address is None:
            raise WalletNotConnectedError("Please connect your wallet first")
        return self._address

    # ── Chain / balance ─────────────────────────────────────────

    async def switch_chain(self, chain_id: int) -> ChainConfig:
        """Move to another configured chain, keeping the account."""
        new_chain = self.config.chain(chain_id)
        if new_chain.chain_id == self._chain.chain_id:
            return new_chain
        provider = getattr(self._w3, "provider", None)
        if provider is not None and hasattr(provider, "disconnect"):
            await provider.disconnect()
        self._chain = new_chain
        self._w3 = None
        logger.info(f"Switched to {new_chain.name} (chain_id: {new_chain.chain_id})")
        return new_chain

    async def get_balance(self) -> Decimal:
        """Native balance of the connected account, in ETH."""
        address = self._require_address()
        wei = await self._get_w3().eth.get_balance(address)
        return Decimal(AsyncWeb3.from_wei(wei, "ether"))

    def explorer_address_url(self) -> str:
        """Block explorer page for the connected account on the current chain."""
        address = self._require_address()
        return f"{self._chain.explorer_url}/address/{address}"

    # ── Transfers ───────────────────────────────────────────────

    async def send_transaction(self, to_address: str, amount_eth: str) -> str:
        """
        Send ``amount_eth`` ETH to ``to_address``.

        Returns:
            The transaction hash (0x-prefixed hex)

        Raises:
            WalletNotConnectedError, UserRejectedError, TransactionFailedError
        """
        sender = self._require_address()
        try:
            value = AsyncWeb3.to_wei(Decimal(amount_eth), "ether")
        except (InvalidOperation, ValueError) as e:
            raise TransactionFailedError(f"Invalid amount: {amount_eth}") from e

        w3 = self._get_w3()
        tx: dict[str, Any] = {
            "from": sender,
            "to": AsyncWeb3.to_checksum_address(to_address),
            "value": value,
        }

        try:
            if self._account is not None:
                tx["nonce"] = await w3.eth.get_transaction_count(sender)
                tx["chainId"] = self._chain.chain_id
                tx["gas"] = await w3.eth.estimate_gas(tx)
                latest_block = await w3.eth.get_block("latest")
                max_priority_fee = await w3.eth.max_priority_fee
                tx["maxFeePerGas"] = latest_block["baseFeePerGas"] * 2 + max_priority_fee
                tx["maxPriorityFeePerGas"] = max_priority_fee
                signed = self._account.sign_transaction(tx)
                tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
            else:
                tx_hash = await w3.eth.send_transaction(tx)
        except Exception as e:
            logger.warning(f"Transaction submission failed: {e}")
            raise classify_wallet_error(e)

        tx_hash_hex = AsyncWeb3.to_hex(tx_hash)
        logger.info(f"Transaction submitted on {self._chain.name}: {tx_hash_hex}")
        return tx_hash_hex

    async def wait_for_transaction_receipt(self, tx_hash: str) -> dict:
        """
        Wait for one receipt and require a successful status.

        Raises:
            TransactionFailedError if the transaction reverted or the wait timed out
        """
        w3 = self._get_w3()
        try:
            receipt = await w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self.config.receipt_timeout_seconds,
                poll_latency=self.config.receipt_poll_seconds,
            )
        except TimeExhausted as e:
            raise TransactionFailedError(
                f"Transaction {tx_hash} not confirmed within {self.config.receipt_timeout_seconds}s"
            ) from e
        except Exception as e:
            raise classify_wallet_error(e)

        if receipt["status"] != 1:
            raise TransactionFailedError(f"Transaction {tx_hash} reverted")

        logger.info(f"Transaction {tx_hash} confirmed in block {receipt['blockNumber']}")
        return dict(receipt)
