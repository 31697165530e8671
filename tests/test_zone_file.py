"""Tests for zone file parsing and gzip handling."""

import gzip

import pytest

from czds.errors import ZoneFileDecompressionError
from czds.zone_file import (
    ZoneFileParser,
    add_zone_line,
    is_gzip_content_type,
    parse_zone_lines,
)

SAMPLE_ZONE = "a.com.\t10800\tin\tns\tx.\na.com.\t10800\tin\tns\ty.\nb.com.\t1\tin\tns\tz."
SAMPLE_RECORDS = {
    "a.com.": ["10800,in,ns,x.", "10800,in,ns,y."],
    "b.com.": ["1,in,ns,z."],
}


def _feed_in_chunks(parser: ZoneFileParser, data: bytes, size: int) -> dict:
    for i in range(0, len(data), size):
        parser.feed(data[i:i + size])
    return parser.close()


# --- Line parsing ---

def test_parse_zone_lines_accumulates_per_domain():
    """Lines for the same domain should accumulate under one key."""
    assert parse_zone_lines(SAMPLE_ZONE.splitlines()) == SAMPLE_RECORDS


def test_parse_zone_lines_preserves_record_order():
    """Records should keep their encounter order."""
    records = parse_zone_lines(SAMPLE_ZONE.splitlines())
    assert records["a.com."] == ["10800,in,ns,x.", "10800,in,ns,y."]


def test_line_without_tab_is_skipped():
    """Lines without a tab should contribute nothing."""
    records = parse_zone_lines(["no-tabs-here", "", "; comment", "c.com.\tA\t1.2.3.4"])
    assert records == {"c.com.": ["A,1.2.3.4"]}


def test_domain_is_kept_verbatim():
    """Domains should keep their case and trailing dot."""
    records = parse_zone_lines(["Example.COM.\tns\tx.", "example.com\tns\ty."])
    assert list(records) == ["Example.COM.", "example.com"]


def test_duplicate_records_are_kept():
    """Duplicate records should not be collapsed."""
    records = parse_zone_lines(["d.com.\tns\tx.", "d.com.\tns\tx."])
    assert records == {"d.com.": ["ns,x.", "ns,x."]}


def test_empty_fields_are_preserved():
    """Empty tab-separated fields should survive the comma join."""
    records: dict[str, list[str]] = {}
    add_zone_line(records, "e.com.\t\tns")
    assert records == {"e.com.": [",ns"]}


def test_trailing_carriage_return_is_dropped():
    """CRLF line endings should not leak into records."""
    assert parse_zone_lines(["f.com.\tns\tx.\r\n"]) == {"f.com.": ["ns,x."]}


# --- Content type detection ---

@pytest.mark.parametrize(
    "content_type, expected",
    [
        ("application/x-gzip", True),
        ("application/gzip", True),
        ("Application/X-Gzip; charset=binary", True),
        ("text/plain", False),
        ("application/octet-stream", False),
        ("", False),
        (None, False),
    ],
)
def test_is_gzip_content_type(content_type, expected):
    """Only gzip media types should be detected, ignoring case and parameters."""
    assert is_gzip_content_type(content_type) is expected


# --- Incremental parser ---

@pytest.mark.parametrize("chunk_size", [1, 3, 7, 1024])
def test_parser_handles_lines_split_across_chunks(chunk_size):
    """Lines split across chunks should be reassembled."""
    parser = ZoneFileParser()
    assert _feed_in_chunks(parser, SAMPLE_ZONE.encode(), chunk_size) == SAMPLE_RECORDS


@pytest.mark.parametrize("chunk_size", [1, 5, 64, 4096])
def test_gzip_body_matches_plain_body(chunk_size):
    """Gzip input fed in any chunk size should match the plain result."""
    parser = ZoneFileParser(compressed=True)
    assert _feed_in_chunks(parser, gzip.compress(SAMPLE_ZONE.encode()), chunk_size) == SAMPLE_RECORDS


def test_gzip_multi_member_stream():
    """Concatenated gzip members should all be decompressed."""
    first, second = SAMPLE_ZONE.split("b.com.")
    data = gzip.compress(first.encode()) + gzip.compress(("b.com." + second).encode())
    parser = ZoneFileParser(compressed=True)
    parser.feed(data)
    assert parser.close() == SAMPLE_RECORDS


def test_corrupt_gzip_raises():
    """Non-gzip bytes should raise ZoneFileDecompressionError."""
    parser = ZoneFileParser(compressed=True)
    with pytest.raises(ZoneFileDecompressionError):
        parser.feed(b"definitely not gzip data")


def test_truncated_gzip_raises():
    """A truncated gzip stream should raise on close."""
    data = gzip.compress(SAMPLE_ZONE.encode())
    parser = ZoneFileParser(compressed=True)
    parser.feed(data[: len(data) // 2])
    with pytest.raises(ZoneFileDecompressionError, match="unexpected end"):
        parser.close()


def test_empty_gzip_body_raises():
    """An empty gzip body should raise on close."""
    parser = ZoneFileParser(compressed=True)
    with pytest.raises(ZoneFileDecompressionError):
        parser.close()


def test_empty_plain_body_yields_empty_map():
    """An empty plain body should parse to an empty map."""
    assert ZoneFileParser().close() == {}


def test_non_utf8_line_is_kept_verbatim():
    """Non-UTF-8 bytes should be kept losslessly without dropping other lines."""
    parser = ZoneFileParser()
    parser.feed(b"a.com.\tns\tx.\ncaf\xe9.com.\tns\ty.\nb.com.\tns\tz.\n")
    records = parser.close()

    odd_domain = b"caf\xe9.com.".decode("utf-8", errors="surrogateescape")
    assert list(records) == ["a.com.", odd_domain, "b.com."]
    assert records[odd_domain] == ["ns,y."]
    assert odd_domain.encode("utf-8", errors="surrogateescape") == b"caf\xe9.com."
