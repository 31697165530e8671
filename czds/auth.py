"""Authentication against the ICANN accounts API.

CzdsAuth plugs into ``httpx.AsyncClient(auth=...)`` and makes sure every
request leaving the client carries a valid bearer token:

1. read the token from the token store;
2. if it is missing or expired, exchange the credentials for a new one,
   check that the new token is itself valid and save it;
3. attach ``Authorization: Bearer <token>`` and send the request.

Refresh is purely reactive and nothing is retried. Two concurrent requests
may both see an expired token and both authenticate; the second save simply
overwrites the first. This is accepted rather than coordinated.
"""

import json
import logging
from collections.abc import AsyncGenerator, Generator

import httpx

from czds.errors import AuthenticationError, InvalidTokenError, TokenStoreError
from czds.token_store import TokenStore
from czds.tokens import is_token_valid
from czds.types import AuthResponse

logger = logging.getLogger(__name__)


async def fetch_access_token(
    client: httpx.AsyncClient,
    accounts_api_base_url: str,
    email: str,
    password: str,
) -> str:
    """Exchange email and password for an access token.

    Raises:
        AuthenticationError: On transport failure, a non-200 status, or a body
            that is not ``{"accessToken": str, "message": str}``.
    """
    url = f"{accounts_api_base_url}/authenticate"
    try:
        response = await client.post(
            url,
            json={"username": email, "password": password},
            headers={"Content-Type": "application/json"},
        )
    except httpx.RequestError as exc:
        raise AuthenticationError(f"authentication request failed: {exc}") from exc

    if response.status_code != 200:
        raise AuthenticationError(
            f"authentication failed: expected HTTP 200 response, got {response.status_code}",
            status_code=response.status_code,
        )

    try:
        body: AuthResponse = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise AuthenticationError(f"failed to decode auth response body: {exc}") from exc

    if not isinstance(body, dict) or not isinstance(body.get("accessToken"), str):
        raise AuthenticationError("failed to decode auth response body: missing accessToken")

    logger.debug("Authenticated as %s: %s", email, body.get("message", ""))
    return body["accessToken"]


class CzdsAuth(httpx.Auth):
    """Attach a CZDS bearer token to each request, refreshing it on demand.

    The token lives only in ``token_store``; the auth object keeps no copy.
    Authentication requests go through ``auth_client``, a separate client
    without this auth attached.
    """

    def __init__(
        self,
        email: str,
        password: str,
        token_store: TokenStore,
        accounts_api_base_url: str,
        auth_client: httpx.AsyncClient,
    ):
        self._email = email
        self._password = password
        self._token_store = token_store
        self._accounts_api_base_url = accounts_api_base_url
        self._auth_client = auth_client

    async def _load_token(self) -> str:
        try:
            return await self._token_store.get()
        except Exception as exc:
            raise TokenStoreError(f"failed to read JWT from token store: {exc}") from exc

    async def _refresh_token(self) -> str:
        try:
            token = await fetch_access_token(
                self._auth_client, self._accounts_api_base_url, self._email, self._password
            )
        except AuthenticationError as exc:
            raise AuthenticationError(f"failed to fetch JWT: {exc}", exc.status_code) from exc

        if not is_token_valid(token):
            raise InvalidTokenError("fetched JWT is not valid")

        try:
            await self._token_store.save(token)
        except Exception as exc:
            raise TokenStoreError(f"failed to store JWT: {exc}") from exc

        logger.debug("Stored refreshed JWT")
        return token

    async def ensure_token(self) -> str:
        """Return a valid token, fetching and storing a new one if needed."""
        token = await self._load_token()
        if is_token_valid(token):
            logger.debug("Reusing stored JWT")
            return token

        logger.debug("Stored JWT missing or expired, authenticating")
        return await self._refresh_token()

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        token = await self.ensure_token()
        request.headers["Authorization"] = f"Bearer {token}"
        yield request

    def sync_auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        raise RuntimeError("CzdsAuth requires an httpx.AsyncClient")
