import io
import json
from datetime import UTC, datetime, timedelta

import httpx
import jwt
from rich.console import Console

from czds.client import CzdsClient

ACCOUNTS_URL = "https://accounts.test/api"
CZDS_URL = "https://czds.test/czds"
TEST_EMAIL = "test-email"
TEST_PASSWORD = "test-password"
SIGNING_KEY = "test-signing-key-long-enough-for-hs256"

# exp 88888888888 (year 4786) and exp 88888888 (1972)
GOOD_TOKEN = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9.eyJzdWIiOiIxMjM0NTY3ODkwIiwibmFtZSI6Ik1hcnRpbnMgSXJiZSIsImlhdCI6"
    "MTUxNjIzOTAyMiwiZXhwIjo4ODg4ODg4ODg4OH0.NPp6gHGl-DFrD6Bk5VGd2VcTFCcKztecm4d3U2AR_yk"
)
EXPIRED_TOKEN = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9.eyJzdWIiOiIxMjM0NTY3ODkwIiwibmFtZSI6Ik1hcnRpbnMgSXJiZSIsImlhdCI6"
    "MTUxNjIzOTAyMiwiZXhwIjo4ODg4ODg4OH0.f1MBGBBvza_-DLyoXv_oujVZfQWoOEFyC4-I0_0MZQQ"
)


def make_token(expires_in: timedelta | None = None, **claims) -> str:
    """Sign a token with an ``exp`` claim relative to now."""
    if expires_in is not None:
        claims["exp"] = int((datetime.now(UTC) + expires_in).timestamp())
    return jwt.encode(claims, SIGNING_KEY, algorithm="HS256")


def auth_ok(token: str = GOOD_TOKEN):
    def respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"accessToken": token, "message": "Authentication Successful"}
        )

    return respond


class FakeCzds:
    """Stands in for both the accounts API and the CZDS API."""

    def __init__(self, auth_response=None, api_response=None):
        self.auth_response = auth_response or auth_ok()
        self.api_response = api_response or (lambda request: httpx.Response(200, json=[]))
        self.auth_requests: list[httpx.Request] = []
        self.api_requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request):
        if request.url.host == "accounts.test":
            self.auth_requests.append(request)
            return self.auth_response(request)
        self.api_requests.append(request)
        return self.api_response(request)

    @property
    def auth_bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.auth_requests]

    def client(self, **kwargs) -> CzdsClient:
        return CzdsClient(
            TEST_EMAIL,
            TEST_PASSWORD,
            accounts_api_base_url=ACCOUNTS_URL,
            czds_api_base_url=CZDS_URL,
            transport=httpx.MockTransport(self.handle),
            **kwargs,
        )


def _capture_console() -> tuple[Console, io.StringIO]:
    """Create a Console that writes to a StringIO for test capturing."""
    buf = io.StringIO()
    return Console(file=buf, force_terminal=True, width=120), buf
