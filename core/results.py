"""Result and error classification types shared by every client.

Client operations return an :class:`ActionResult` instead of raising, and
the task runner inspects ``success`` to decide between moving on and
counting the unit of work as done.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import aiohttp


class ErrorType(Enum):
    """Classification of failures for logging and run summaries.

    Nothing is retried based on this value; it only labels why a unit of
    work was skipped.
    """
    NETWORK = "network"  # Connection errors, timeouts
    API_REJECTED = "api_rejected"  # HTTP >= 400 or success: false
    MALFORMED_RESPONSE = "malformed_response"  # Missing fields, bad JSON
    CHAIN_REVERTED = "chain_reverted"  # Receipt status 0
    CHAIN_ERROR = "chain_error"  # RPC, gas estimation, signing
    UNKNOWN = "unknown"


@dataclass
class ActionResult:
    """Outcome of a single client operation.

    Attributes:
        success: Whether the operation completed.
        status: Human-readable status or failure reason.
        value: Operation payload on success (token, tx hash, ...).
        error_type: Classification of the failure, ``None`` on success.
    """

    success: bool
    status: str
    value: Any = None
    error_type: Optional[ErrorType] = None

    @classmethod
    def ok(cls, value: Any = None, status: str = "ok") -> 'ActionResult':
        return cls(success=True, status=status, value=value)

    @classmethod
    def failed(cls, reason: str, error_type: ErrorType = ErrorType.UNKNOWN) -> 'ActionResult':
        return cls(success=False, status=reason, error_type=error_type)

    @classmethod
    def from_exception(cls, exc: BaseException, default: ErrorType = ErrorType.UNKNOWN) -> 'ActionResult':
        """Build a failed result from *exc*, classifying it."""
        return cls.failed(describe_error(exc), classify_error(exc, default))


def classify_error(exc: BaseException, default: ErrorType = ErrorType.UNKNOWN) -> ErrorType:
    """Map an exception raised by a client call to an :class:`ErrorType`.

    Exceptions carrying their own ``error_type`` attribute win; transport
    errors are ``NETWORK``; lookup and decoding errors are
    ``MALFORMED_RESPONSE``; anything else is *default*.
    """
    error_type = getattr(exc, "error_type", None)
    if isinstance(error_type, ErrorType):
        return error_type
    if isinstance(exc, (aiohttp.ClientError, asyncio.TimeoutError, ConnectionError)):
        return ErrorType.NETWORK
    if isinstance(exc, (KeyError, TypeError)):
        return ErrorType.MALFORMED_RESPONSE
    return default


def describe_error(exc: BaseException) -> str:
    """Short operator-facing description of *exc*."""
    # web3 ContractLogicError and friends carry the revert reason in .message
    reason = getattr(exc, "message", None)
    if isinstance(reason, str) and reason:
        return reason
    text = str(exc)
    return text if text else type(exc).__name__
