"""Nonce/signature login against the Novastro API."""

import logging
from typing import Optional

from core.results import ActionResult, describe_error
from core.wallet_manager import Wallet
from novastro.base import NovastroApi, unwrap

logger = logging.getLogger(__name__)


class AuthClient:
    """
    Sign-in flow: request nonce, sign it locally, submit the signature.

    Only the signature and the original message leave the process; the
    private key stays in the :class:`Wallet`.
    """

    def __init__(self, api: NovastroApi):
        self.api = api

    async def get_nonce(self, address: str) -> Optional[str]:
        """Fetch the server-issued message to sign, or ``None`` on failure."""
        try:
            body = await self.api.get(f"auth/nonce/{address}")
            return unwrap(body, "message")
        except Exception as e:
            logger.error(f"Failed to get nonce for {address}: {describe_error(e)}")
            return None

    async def login(self, wallet: Wallet) -> ActionResult:
        """
        Log in with *wallet*.

        Returns:
            ``ActionResult.ok(value=access_token)`` on success, otherwise a
            failed result. Never raises.
        """
        logger.info(f"🔐 Attempting to log in with wallet: {wallet.address}")
        message = await self.get_nonce(wallet.address)
        if not message:
            logger.error(f"Could not retrieve nonce for {wallet.address}. Login aborted.")
            return ActionResult.failed("nonce unavailable")

        try:
            signature = wallet.sign_message(message)
            body = await self.api.post(
                "auth/login",
                {
                    "walletAddress": wallet.address,
                    "signature": signature,
                    "message": message,
                },
            )
            token = unwrap(body, "accessToken")
        except Exception as e:
            result = ActionResult.from_exception(e)
            logger.error(f"Login failed for {wallet.address}: {result.status}")
            return result

        logger.info(f"✅ Successfully logged in with wallet: {wallet.address}")
        return ActionResult.ok(value=token, status="authenticated")
