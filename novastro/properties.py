"""Property listing and the three-step purchase protocol.

A purchase is:

1. ``POST /properties/{id}/purchase/prepare`` with the amount, which returns
   a :class:`PurchaseIntent` listing the on-chain transactions to run.
2. Every payload entry is sent and confirmed, in order.
3. ``POST /properties/{id}/purchase/submit`` with the intent id and the last
   transaction hash.

A failed step aborts the purchase before submission.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.chain import ChainClient
from core.results import ActionResult, ErrorType
from core.wallet_manager import Wallet
from novastro.base import ApiError, NovastroApi, unwrap

logger = logging.getLogger(__name__)

Identifier = Union[int, str]
Amount = Union[int, float, str]


class PropertyToken(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    minimum_investment: Optional[Amount] = Field(default=None, alias="minimumInvestment")


class Property(BaseModel):
    """A purchasable listing as returned by ``GET /properties``.

    Attributes:
        id: Server identifier used in purchase URLs.
        title: Display name.
        token: Token terms; only ``minimumInvestment`` is used.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Identifier
    title: Optional[str] = None
    token: Optional[PropertyToken] = None

    def purchase_amount(self, default: str = "100.00") -> str:
        """Amount to buy: the token's minimum investment, else *default*."""
        if self.token and self.token.minimum_investment:
            return str(self.token.minimum_investment)
        return default

    def __str__(self) -> str:
        return self.title or str(self.id)


class PayloadEntry(BaseModel):
    """One on-chain transaction requested by the server."""

    model_config = ConfigDict(extra="ignore")

    type: str = "transaction"
    to: str
    data: Optional[str] = None
    value: Optional[Union[int, str]] = None


class PurchaseIntent(BaseModel):
    """Single-use instruction set returned by the prepare call."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    transaction_event_id: Identifier = Field(alias="transactionEventId")
    payload: List[PayloadEntry] = Field(default_factory=list)


class PropertyClient:
    """
    Lists properties and executes purchases for one bearer token at a time.

    Args:
        api: Shared REST session.
        chain: Client used to run the intent's on-chain steps.
    """

    def __init__(self, api: NovastroApi, chain: ChainClient):
        self.api = api
        self.chain = chain
        self.page_size = api.settings.properties_page_size

    async def list_properties(self, token: str) -> List[Property]:
        """
        Fetch the first page of properties.

        Listings that do not fit :class:`Property` are logged and skipped; a
        failed request yields an empty list.
        """
        logger.info("📋 Fetching properties list...")
        try:
            body = await self.api.get("properties", token=token, params={"page": 1, "limit": self.page_size})
            items = unwrap(body, "properties")
        except Exception as e:
            logger.error(f"Failed to get properties list: {e}")
            return []

        if not isinstance(items, list):
            logger.error(f"Failed to get properties list: expected a list, got {type(items).__name__}")
            return []

        properties = []
        for item in items:
            try:
                properties.append(Property.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping unusable property listing: {e.error_count()} invalid field(s) in {item!r:.200}")
        logger.info(f"Properties list fetched successfully ({len(properties)} found).")
        return properties

    async def prepare_purchase(self, token: str, prop: Property, amount: str) -> PurchaseIntent:
        """
        Ask the server for the transactions needed to buy *amount* of *prop*.

        Raises:
            ApiError: On HTTP errors or a response without a usable intent.
        """
        body = await self.api.post(
            f"properties/{prop.id}/purchase/prepare",
            {"purchaseAmount": amount},
            token=token,
        )
        try:
            return PurchaseIntent.model_validate(unwrap(body))
        except ValidationError as e:
            raise ApiError(
                f"Invalid purchase intent for property {prop.id}",
                body=str(e),
                error_type=ErrorType.MALFORMED_RESPONSE,
            ) from None

    async def submit_purchase(self, token: str, prop: Property, intent: PurchaseIntent, tx_hash: str) -> Dict[str, Any]:
        """Report the final transaction hash for *intent*. Returns the raw body."""
        return await self.api.post(
            f"properties/{prop.id}/purchase/submit",
            {
                "transactionEventId": intent.transaction_event_id,
                "transactionHash": tx_hash,
            },
            token=token,
        )

    async def purchase(self, wallet: Wallet, token: str, prop: Property, amount: str) -> ActionResult:
        """
        Run prepare → on-chain steps → submit for one property.

        Returns:
            ``ok(value=tx_hash)`` when the server confirms the purchase,
            otherwise a failed result describing the step that broke.
        """
        logger.info(f"Preparing purchase for {amount} USD for property ID: {prop.id}")
        try:
            intent = await self.prepare_purchase(token, prop, amount)
        except Exception as e:
            return ActionResult.from_exception(e)

        if not intent.payload:
            return ActionResult.failed(
                f"purchase intent {intent.transaction_event_id} has no transactions",
                ErrorType.MALFORMED_RESPONSE,
            )

        final_tx_hash = ""
        for entry in intent.payload:
            logger.info(f"Sending on-chain transaction type: {entry.type} for property {prop}...")
            step = await self.chain.send_transaction(wallet, entry.to, entry.data, entry.value)
            if not step.success:
                return ActionResult.failed(f"{entry.type} transaction failed: {step.status}", step.error_type)
            logger.info(f"✅ Transaction for {entry.type} confirmed! Hash: {step.value}")
            final_tx_hash = step.value

        logger.info("Submitting transaction hash to the API...")
        try:
            body = await self.submit_purchase(token, prop, intent, final_tx_hash)
        except Exception as e:
            return ActionResult.from_exception(e)

        if not isinstance(body, dict) or body.get("success") is not True:
            return ActionResult.failed(f"submit rejected: {body}", ErrorType.API_REJECTED)
        return ActionResult.ok(value=final_tx_hash, status="purchased")
