"""Shared REST session for the Novastro API clients.

:class:`NovastroApi` is the aiohttp session wrapper that the auth and
property clients share.  It provides:

    * A lazily created :class:`aiohttp.ClientSession` with a total timeout.
    * A fresh random ``User-Agent`` on every request plus the fixed
      ``Referer`` the web app sends.
    * Optional bearer authentication.
    * :class:`ApiError` for HTTP errors and unparseable bodies, carrying the
      response text for diagnosis.

Response bodies wrap their payload in a ``data`` envelope; :func:`unwrap`
walks it.
"""

import json
import logging
from typing import Any, Dict, Optional

import aiohttp
from fake_useragent import UserAgent

from core.config import BotSettings
from core.results import ErrorType

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Error raised for a failed or unusable REST response.

    Attributes:
        status: HTTP status code, or ``None`` when the failure happened
            after a successful status (e.g. a missing field).
        body: Raw response text, if any.
        error_type: Classification picked up by
            :func:`core.results.classify_error`.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
        error_type: ErrorType = ErrorType.API_REJECTED,
    ):
        super().__init__(message)
        self.status = status
        self.body = body
        self.error_type = error_type

    def __str__(self) -> str:
        text = super().__str__()
        if self.body:
            return f"{text}: {self.body[:500]}"
        return text


def unwrap(body: Any, *keys: str) -> Any:
    """Walk the ``data`` envelope of a response body.

    ``unwrap(body, "accessToken")`` returns ``body["data"]["accessToken"]``.

    Raises:
        ApiError: With :attr:`ErrorType.MALFORMED_RESPONSE` if any level is
            missing or ``None``.
    """
    node = body
    path = ("data",) + keys
    for key in path:
        if not isinstance(node, dict) or node.get(key) is None:
            raise ApiError(
                f"Response is missing '{'.'.join(path)}'",
                body=json.dumps(body, default=str) if body is not None else None,
                error_type=ErrorType.MALFORMED_RESPONSE,
            )
        node = node[key]
    return node


class NovastroApi:
    """
    Thin aiohttp wrapper around the Novastro REST API.

    One instance is shared by :class:`~novastro.auth.AuthClient` and
    :class:`~novastro.properties.PropertyClient`; call :meth:`close` on
    shutdown.
    """

    def __init__(
        self,
        settings: BotSettings,
        session: Optional[aiohttp.ClientSession] = None,
        user_agent: Optional[UserAgent] = None,
    ):
        self.settings = settings
        self.base_url = settings.api_base_url.rstrip("/")
        self._session = session
        self._user_agent = user_agent

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.settings.http_timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    def random_user_agent(self) -> str:
        if self._user_agent is None:
            self._user_agent = UserAgent(browsers=self.settings.user_agent_browsers)
        return self._user_agent.random

    def build_headers(self, token: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "User-Agent": self.random_user_agent(),
            "Referer": self.settings.referer,
            "Accept": "application/json, text/plain, */*",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Raises:
            ApiError: On HTTP status >= 400 or a body that is not JSON.
            aiohttp.ClientError / asyncio.TimeoutError: On transport failures.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        session = await self._get_session()
        logger.debug(f"{method} {url}")
        async with session.request(
            method,
            url,
            params=params,
            json=payload,
            headers=self.build_headers(token),
        ) as response:
            text = await response.text()
            if response.status >= 400:
                raise ApiError(f"{method} {path} returned HTTP {response.status}", status=response.status, body=text)
            try:
                return json.loads(text) if text else {}
            except ValueError:
                raise ApiError(
                    f"{method} {path} returned a non-JSON body",
                    status=response.status,
                    body=text,
                    error_type=ErrorType.MALFORMED_RESPONSE,
                ) from None

    async def get(self, path: str, token: Optional[str] = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, token=token, params=params)

    async def post(self, path: str, payload: Dict[str, Any], token: Optional[str] = None) -> Any:
        return await self.request("POST", path, token=token, payload=payload)

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()
