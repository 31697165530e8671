"""Parse CZDS zone files into a domain -> records mapping.

Zone files are tab-separated, one record per line::

    example.com.	172800	in	ns	a.iana-servers.net.

Each line becomes ``records["example.com."].append("172800,in,ns,a.iana-servers.net.")``.
Lines without a tab are ignored.
"""

import zlib
from collections.abc import Iterable

from czds.errors import ZoneFileDecompressionError
from czds.types import ZoneRecordMap

GZIP_CONTENT_TYPES = frozenset({"application/x-gzip", "application/gzip"})
_GZIP_WBITS = zlib.MAX_WBITS | 16


def is_gzip_content_type(content_type: str | None) -> bool:
    """Return True if a Content-Type header announces a gzip body."""
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type in GZIP_CONTENT_TYPES


def add_zone_line(records: ZoneRecordMap, line: str) -> None:
    """Add one zone file line to ``records``, skipping lines with a single field."""
    fields = line.split("\t")
    if len(fields) < 2:
        return
    records.setdefault(fields[0], []).append(",".join(fields[1:]))


def parse_zone_lines(lines: Iterable[str]) -> ZoneRecordMap:
    records: ZoneRecordMap = {}
    for line in lines:
        add_zone_line(records, line.rstrip("\r\n"))
    return records


class ZoneFileParser:
    """Incremental zone file parser fed with raw response chunks.

    Usage::

        parser = ZoneFileParser(compressed=True)
        async for chunk in response.aiter_bytes():
            parser.feed(chunk)
        records = parser.close()
    """

    def __init__(self, *, compressed: bool = False):
        self._decompressor = zlib.decompressobj(_GZIP_WBITS) if compressed else None
        self._buffer = bytearray()
        self.records: ZoneRecordMap = {}

    def _decompress(self, chunk: bytes) -> bytes:
        out = []
        try:
            while chunk:
                # A gzip file may hold several members back to back
                if self._decompressor.eof:
                    self._decompressor = zlib.decompressobj(_GZIP_WBITS)
                out.append(self._decompressor.decompress(chunk))
                chunk = self._decompressor.unused_data
        except zlib.error as exc:
            raise ZoneFileDecompressionError(f"failed to decompress zone file: {exc}") from exc
        return b"".join(out)

    def _add_raw_line(self, raw: bytes) -> None:
        # Undecodable bytes survive as surrogates so the line round-trips
        line = raw.decode("utf-8", errors="surrogateescape")
        add_zone_line(self.records, line.removesuffix("\r"))

    def feed(self, chunk: bytes) -> None:
        if self._decompressor is not None:
            chunk = self._decompress(chunk)
        self._buffer.extend(chunk)

        start = 0
        while (end := self._buffer.find(b"\n", start)) != -1:
            self._add_raw_line(bytes(self._buffer[start:end]))
            start = end + 1
        del self._buffer[:start]

    def close(self) -> ZoneRecordMap:
        """Flush the final line and return the parsed records."""
        if self._decompressor is not None and not self._decompressor.eof:
            raise ZoneFileDecompressionError(
                "failed to decompress zone file: unexpected end of gzip stream"
            )
        if self._buffer:
            self._add_raw_line(bytes(self._buffer))
            self._buffer.clear()
        return self.records
