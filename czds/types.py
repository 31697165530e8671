"""Shared types for CZDS API payloads."""

from dataclasses import dataclass
from typing import Any, Self, TypeAlias, TypedDict

from czds.errors import ResponseDecodeError


ZoneRecordMap: TypeAlias = dict[str, list[str]]


class AuthResponse(TypedDict):
    accessToken: str
    message: str


def _field(data: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    # bool is an int subclass, so check the exact type
    if type(value) is not kind:
        raise ResponseDecodeError(
            f"field {key!r} must be {kind.__name__}, got {type(value).__name__}"
        )
    return value


@dataclass(frozen=True)
class Tld:
    """A TLD visible to the account and its zone file access status."""

    tld: str
    ulable: str
    current_status: str
    sftp: bool

    @classmethod
    def from_json(cls, data: Any) -> Self:
        """Build a Tld from one element of the ``/tlds`` response.

        Missing fields fall back to empty values; fields of the wrong type
        raise ResponseDecodeError.
        """
        if not isinstance(data, dict):
            raise ResponseDecodeError(f"TLD entry must be an object, got {type(data).__name__}")
        return cls(
            tld=_field(data, "tld", str, ""),
            ulable=_field(data, "ulable", str, ""),
            current_status=_field(data, "currentStatus", str, ""),
            sftp=_field(data, "sftp", bool, False),
        )
