"""Exceptions raised by the CZDS client."""


class CzdsError(Exception):
    """Base class for every error raised by the CZDS client."""


class CzdsRequestError(CzdsError):
    """The request could not be sent or the response could not be read."""


class UnexpectedStatusError(CzdsError):
    """The API answered with a status other than 200."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class ResponseDecodeError(CzdsError):
    """The response body did not have the expected shape."""


class ZoneFileDecompressionError(CzdsError):
    """A gzip zone file could not be decompressed."""


class ZoneFileParseError(CzdsError):
    """The zone file stream failed partway through."""


class AuthenticationError(CzdsError):
    """The accounts API did not hand out an access token."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidTokenError(CzdsError):
    """A freshly fetched token is already expired or cannot be decoded."""


class TokenStoreError(CzdsError):
    """The token store failed to read or persist a token."""
