import pytest
from unittest.mock import AsyncMock, MagicMock

from eth_account import Account

from core.config import BotSettings
from core.wallet_manager import Wallet

# Well-known local development keys (Hardhat / Anvil accounts 0-2)
TEST_KEYS = [
    "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80",
    "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d",
    "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a",
]
TEST_ADDRESSES = [
    "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
    "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
    "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
]


class AwaitableValue:
    """Stand-in for awaitable web3 properties such as ``w3.eth.gas_price``."""

    def __init__(self, value):
        self.value = value

    def __await__(self):
        async def _value():
            return self.value
        return _value().__await__()


def make_wallet(index: int = 0) -> Wallet:
    return Wallet(source=f"PRIVATE_KEY_{index + 1}", account=Account.from_key(TEST_KEYS[index]))


def make_session(status: int = 200, text: str = "{}"):
    """aiohttp-like session whose ``request()`` yields one canned response."""
    response = AsyncMock()
    response.status = status
    response.text.return_value = text

    request_ctx = AsyncMock()
    request_ctx.__aenter__.return_value = response
    request_ctx.__aexit__.return_value = None

    session = MagicMock()
    session.closed = False
    session.request = MagicMock(return_value=request_ctx)
    session.close = AsyncMock()
    return session


@pytest.fixture
def settings(monkeypatch):
    for name in ("LOG_LEVEL", "RPC_URL", "API_BASE_URL", "CLAIM_DELAY_SECONDS", "TX_RECEIPT_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    return BotSettings(_env_file=None)


@pytest.fixture
def wallet():
    return make_wallet(0)


@pytest.fixture
def wallets():
    return [make_wallet(i) for i in range(len(TEST_KEYS))]
