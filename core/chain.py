import logging
from typing import Any, Dict, Optional, Union

from web3 import AsyncWeb3, Web3

from core.config import BotSettings
from core.results import ActionResult, ErrorType
from core.wallet_manager import Wallet

logger = logging.getLogger(__name__)


class ChainError(Exception):
    """RPC-side failure while building, sending or confirming a transaction."""

    error_type = ErrorType.CHAIN_ERROR


class TransactionReverted(ChainError):
    """A transaction was mined with ``status == 0``."""

    error_type = ErrorType.CHAIN_REVERTED

    def __init__(self, tx_hash: str):
        super().__init__(f"transaction {tx_hash} reverted")
        self.tx_hash = tx_hash


def parse_value(value: Union[None, int, str]) -> int:
    """
    Convert a payload ``value`` to wei.

    Accepts ``None``/empty (zero), integers, decimal strings and ``0x`` hex
    strings.
    """
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise ValueError(f"Invalid transaction value: {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.lower().startswith("0x"):
        return int(text, 16)
    return int(text)


class ChainClient:
    """
    Sends signed transactions to a single JSON-RPC endpoint.

    Every send waits for the receipt. There is no retry: a failure is final
    for that claim or purchase step, and is reported through
    :class:`ActionResult` rather than raised.
    """

    def __init__(self, settings: BotSettings, w3: Optional[AsyncWeb3] = None):
        """
        Args:
            settings: Supplies the RPC URL, faucet contract and timeouts.
            w3: Pre-built client (tests inject a mock here).
        """
        self.settings = settings
        self.w3 = w3 or AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(
                settings.rpc_url,
                request_kwargs={"timeout": settings.http_timeout_seconds},
            )
        )
        self._chain_id: Optional[int] = None

    async def _get_chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = await self.w3.eth.chain_id
        return self._chain_id

    async def build_transaction(self, wallet: Wallet, to: str, data: Optional[str], value: int) -> Dict[str, Any]:
        """Fill nonce, chain id, gas and gas price for a plain call."""
        tx: Dict[str, Any] = {
            "from": wallet.address,
            "to": Web3.to_checksum_address(to),
            "data": data or "0x",
            "value": value,
            "nonce": await self.w3.eth.get_transaction_count(wallet.address, "pending"),
            "chainId": await self._get_chain_id(),
        }
        tx["gas"] = await self.w3.eth.estimate_gas(tx)
        tx["gasPrice"] = await self.w3.eth.gas_price
        return tx

    async def send_and_confirm(self, wallet: Wallet, to: str, data: Optional[str], value: int) -> str:
        """
        Sign, broadcast and wait for one confirmation.

        Returns:
            The 0x-prefixed transaction hash.

        Raises:
            TransactionReverted: If the receipt status is not 1.
            Exception: Any RPC or signing error, unchanged.
        """
        tx = await self.build_transaction(wallet, to, data, value)
        signed = wallet.account.sign_transaction(tx)
        raw_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        tx_hash = Web3.to_hex(raw_hash)

        logger.info(f"⏳ Waiting for transaction confirmation: {tx_hash}")
        receipt = await self.w3.eth.wait_for_transaction_receipt(
            raw_hash, timeout=self.settings.tx_receipt_timeout
        )
        if receipt["status"] != 1:
            raise TransactionReverted(tx_hash)
        return tx_hash

    async def claim_faucet(self, wallet: Wallet, index: int, total: int) -> ActionResult:
        """
        Call ``claim()`` on the faucet contract for *wallet*.

        Failures are logged with the wallet address and returned; this
        method never raises.
        """
        contract = self.settings.faucet_contract
        logger.info(f"🚰 [{index}/{total}] Preparing on-chain faucet claim for wallet {wallet.address}...")
        try:
            logger.info(f"Sending claim transaction to contract: {contract}")
            tx_hash = await self.send_and_confirm(wallet, contract, self.settings.faucet_claim_data, 0)
        except Exception as e:
            result = ActionResult.from_exception(e, default=ErrorType.CHAIN_ERROR)
            logger.error(f"❌ [{index}/{total}] On-chain faucet claim failed for {wallet.address}: {result.status}")
            return result

        logger.info(f"✅ [{index}/{total}] Faucet claim transaction confirmed! Hash: {tx_hash}")
        return ActionResult.ok(value=tx_hash, status="confirmed")

    async def send_transaction(
        self,
        wallet: Wallet,
        to: str,
        data: Optional[str],
        value: Union[None, int, str] = None,
    ) -> ActionResult:
        """
        Execute one purchase step as instructed by the API.

        Returns:
            ``ok(value=tx_hash)`` once confirmed, or a failed result.
        """
        try:
            tx_hash = await self.send_and_confirm(wallet, to, data, parse_value(value))
        except Exception as e:
            return ActionResult.from_exception(e, default=ErrorType.CHAIN_ERROR)
        return ActionResult.ok(value=tx_hash, status="confirmed")

    async def close(self):
        await self.w3.provider.disconnect()
