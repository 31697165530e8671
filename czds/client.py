"""Async client for the ICANN Centralized Zone Data Service (CZDS).

The client authenticates with the ICANN accounts API on demand: the access
token is kept in a TokenStore (in memory unless another store is passed) and
fetched again whenever it is missing or expired. Callers never deal with
tokens directly.

Example::

    async with CzdsClient(email, password) as client:
        for tld in await client.list_tlds():
            print(tld.tld, tld.current_status)
        records = await client.get_zone_file("dev")

Every operation can be cancelled, or bounded with ``asyncio.timeout()``; the
deadline covers the token refresh as well as the API call.
"""

import json
import logging
from types import TracebackType
from typing import Self

import httpx

from czds.auth import CzdsAuth
from czds.errors import (
    CzdsRequestError,
    ResponseDecodeError,
    UnexpectedStatusError,
    ZoneFileParseError,
)
from czds.token_store import InMemoryTokenStore, TokenStore
from czds.types import Tld, ZoneRecordMap
from czds.zone_file import ZoneFileParser, is_gzip_content_type

logger = logging.getLogger(__name__)

ACCOUNTS_API_BASE_URL = "https://account-api.icann.org/api"
CZDS_API_BASE_URL = "https://czds-api.icann.org/czds"
DEFAULT_TIMEOUT = 60.0


class CzdsClient:
    """Client for downloading zone files and listing TLDs from CZDS.

    Args:
        email: ICANN account email, sent as the ``username``.
        password: ICANN account password.
        token_store: Where the access token is cached. Defaults to a new
            InMemoryTokenStore.
        accounts_api_base_url: Base URL of the authentication service.
        czds_api_base_url: Base URL of the zone data service.
        timeout: httpx timeout applied to every network operation.
        transport: Optional httpx transport shared by the API and
            authentication clients.
    """

    def __init__(
        self,
        email: str,
        password: str,
        *,
        token_store: TokenStore | None = None,
        accounts_api_base_url: str = ACCOUNTS_API_BASE_URL,
        czds_api_base_url: str = CZDS_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token_store = token_store if token_store is not None else InMemoryTokenStore()
        self.accounts_api_base_url = accounts_api_base_url.rstrip("/")
        self.czds_api_base_url = czds_api_base_url.rstrip("/")

        self._auth_client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._http = httpx.AsyncClient(
            auth=CzdsAuth(
                email=email,
                password=password,
                token_store=self.token_store,
                accounts_api_base_url=self.accounts_api_base_url,
                auth_client=self._auth_client,
            ),
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()
        await self._auth_client.aclose()

    async def get_zone_file(self, tld: str) -> ZoneRecordMap:
        """Download and parse the zone file of ``tld``.

        Gzip bodies (``Content-Type: application/x-gzip``) are decompressed
        while streaming. Returns a mapping of domain name to its records, each
        record being the remaining tab-separated fields joined with commas.

        Raises:
            CzdsRequestError: The request could not be sent.
            UnexpectedStatusError: The API did not answer 200.
            ZoneFileDecompressionError: The gzip stream is corrupt or truncated.
            ZoneFileParseError: Reading the body failed partway through.
            AuthenticationError, InvalidTokenError, TokenStoreError: No usable
                token could be obtained.
        """
        url = f"{self.czds_api_base_url}/downloads/{tld}.zone"
        try:
            async with self._http.stream("GET", url) as response:
                if response.status_code != 200:
                    raise UnexpectedStatusError(
                        f"get zone file request for {tld} TLD failed: "
                        f"expected HTTP 200 response, got {response.status_code}",
                        response.status_code,
                    )

                content_type = response.headers.get("Content-Type")
                parser = ZoneFileParser(compressed=is_gzip_content_type(content_type))
                try:
                    async for chunk in response.aiter_bytes():
                        parser.feed(chunk)
                except httpx.RequestError as exc:
                    raise ZoneFileParseError(f"failed to scan zone file: {exc}") from exc
                records = parser.close()
        except httpx.RequestError as exc:
            raise CzdsRequestError(f"get zone file request for {tld} TLD failed: {exc}") from exc

        logger.info("Parsed %s zone file: %d domains", tld, len(records))
        return records

    async def list_tlds(self) -> list[Tld]:
        """List the TLDs visible to the account, in the order the API returns them.

        Raises:
            CzdsRequestError: The request could not be sent.
            UnexpectedStatusError: The API did not answer 200.
            ResponseDecodeError: The body is not a JSON array of TLD objects.
            AuthenticationError, InvalidTokenError, TokenStoreError: No usable
                token could be obtained.
        """
        url = f"{self.czds_api_base_url}/tlds"
        try:
            response = await self._http.get(url, headers={"Content-Type": "application/json"})
        except httpx.RequestError as exc:
            raise CzdsRequestError(f"list TLDs request failed: {exc}") from exc

        if response.status_code != 200:
            raise UnexpectedStatusError(
                f"list TLDs request failed: expected HTTP 200 response, got {response.status_code}",
                response.status_code,
            )

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ResponseDecodeError(f"failed to decode list TLDs response body: {exc}") from exc

        if data is None:
            return []
        if not isinstance(data, list):
            raise ResponseDecodeError(
                f"failed to decode list TLDs response body: expected an array, got {type(data).__name__}"
            )

        try:
            tlds = [Tld.from_json(item) for item in data]
        except ResponseDecodeError as exc:
            raise ResponseDecodeError(f"failed to decode list TLDs response body: {exc}") from exc

        logger.info("Listed %d TLDs", len(tlds))
        return tlds
