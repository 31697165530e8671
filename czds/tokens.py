"""Expiry checks for CZDS access tokens.

Tokens are decoded WITHOUT verifying their signature. The accounts API is the
authority on whether a token is authentic; the client only reads the ``exp``
claim to decide when to fetch a new one, and it holds no key to verify with.
"""

from datetime import UTC, datetime

import jwt

ZERO_TIME = datetime.min.replace(tzinfo=UTC)

_DECODE_OPTIONS = {
    "verify_signature": False,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}


def token_expiry(token: str) -> datetime:
    """Return the ``exp`` claim of ``token`` as a UTC datetime.

    Falls back to ZERO_TIME, which is always in the past, when the token is
    empty, does not decode, or has no usable numeric ``exp`` claim.
    """
    if not token:
        return ZERO_TIME
    try:
        claims = jwt.decode(token, options=_DECODE_OPTIONS)
    except jwt.PyJWTError:
        return ZERO_TIME

    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return ZERO_TIME
    try:
        return datetime.fromtimestamp(int(exp), tz=UTC)
    except (OverflowError, OSError, ValueError):
        return ZERO_TIME


def is_token_valid(token: str, now: datetime | None = None) -> bool:
    """Check whether ``token`` can still be sent.

    Valid means decodable and strictly before its expiry. A token expiring
    exactly at ``now`` is invalid.
    """
    current = now or datetime.now(UTC)
    return current.astimezone(UTC) < token_expiry(token)
