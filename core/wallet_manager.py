import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from web3 import Web3

logger = logging.getLogger(__name__)


class WalletLoadError(Exception):
    """Raised when no usable signing keys can be read from the environment."""


@dataclass(frozen=True)
class Wallet:
    """
    A signing identity loaded from one ``PRIVATE_KEY_<n>`` entry.

    The private key lives only inside ``account`` and is excluded from
    ``repr()`` so it never reaches the logs.
    """

    source: str
    account: LocalAccount = field(repr=False, compare=False)

    @property
    def address(self) -> str:
        return self.account.address

    def sign_message(self, text: str) -> str:
        """Personal-sign (EIP-191) *text* and return a 0x-prefixed signature."""
        signed = self.account.sign_message(encode_defunct(text=text))
        return Web3.to_hex(signed.signature)

    def __str__(self) -> str:
        return self.address


def _sort_key(name: str, prefix: str) -> Tuple[int, int, str]:
    suffix = name[len(prefix):]
    if suffix.isdigit():
        return (0, int(suffix), suffix)
    return (1, 0, suffix)


def load_wallets(
    environ: Optional[Mapping[str, str]] = None,
    prefix: str = "PRIVATE_KEY_",
) -> List[Wallet]:
    """
    Build one :class:`Wallet` per ``<prefix><n>`` environment entry.

    Entries are ordered by their numeric suffix (``PRIVATE_KEY_2`` before
    ``PRIVATE_KEY_10``); non-numeric suffixes follow in name order.
    Blank values are skipped.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.
        prefix: Variable name prefix.

    Returns:
        The wallets, in load order.

    Raises:
        WalletLoadError: If no entry is found or a value is not a valid key.
    """
    env = os.environ if environ is None else environ
    names = sorted(
        (name for name, value in env.items() if name.startswith(prefix) and value.strip()),
        key=lambda name: _sort_key(name, prefix),
    )
    if not names:
        raise WalletLoadError(f"No {prefix}* entries found in the environment or .env file.")

    wallets = []
    for name in names:
        try:
            account = Account.from_key(env[name].strip())
        except (ValueError, TypeError) as e:
            # The key itself must never be echoed back
            raise WalletLoadError(f"{name} does not hold a valid private key: {type(e).__name__}") from None
        wallets.append(Wallet(source=name, account=account))
        logger.debug(f"Loaded {name} -> {account.address}")

    return wallets
