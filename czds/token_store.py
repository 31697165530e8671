"""Token stores used by the client to cache the CZDS access token.

A store holds exactly one token. The client calls ``save`` whenever it had to
fetch a new token because the stored one was missing or expired, and ``get``
before every request. Implementations must be safe to call from concurrent
requests.
"""

import asyncio
import threading
from abc import ABC, abstractmethod
from pathlib import Path


class TokenStore(ABC):
    """Storage for the bearer token shared by all requests of a client."""

    @abstractmethod
    async def save(self, token: str) -> None:
        """Persist ``token``, replacing any previous value.

        Raising aborts the request that triggered the refresh.
        """

    @abstractmethod
    async def get(self) -> str:
        """Return the stored token, or an empty string if none was saved."""


class InMemoryTokenStore(TokenStore):
    """Keeps the token in process memory behind a lock."""

    def __init__(self) -> None:
        self._token = ""
        self._lock = threading.Lock()

    async def save(self, token: str) -> None:
        with self._lock:
            self._token = token

    async def get(self) -> str:
        with self._lock:
            return self._token


class FileTokenStore(TokenStore):
    """Keeps the token in a plain text file so it survives restarts.

    Useful for short-lived processes such as the CLI, which would otherwise
    authenticate on every invocation.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _write(self, token: str) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch(mode=0o600, exist_ok=True)
            self.path.chmod(0o600)
            self.path.write_text(token)

    def _read(self) -> str:
        with self._lock:
            if not self.path.exists():
                return ""
            return self.path.read_text().strip()

    async def save(self, token: str) -> None:
        await asyncio.to_thread(self._write, token)

    async def get(self) -> str:
        return await asyncio.to_thread(self._read)
