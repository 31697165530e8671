"""Export zone records and TLD listings to JSON, JSONL or CSV files."""

import csv
import json
from pathlib import Path

from czds.types import Tld, ZoneRecordMap

ZONE_FIELDS = ("domain", "record")
TLD_FIELDS = ("tld", "ulable", "current_status", "sftp")

SUPPORTED_EXTENSIONS = (".json", ".jsonl", ".csv")


def _zone_rows(records: ZoneRecordMap) -> list[dict]:
    return [
        {"domain": domain, "record": record}
        for domain, domain_records in records.items()
        for record in domain_records
    ]


def _tld_rows(tlds: list[Tld]) -> list[dict]:
    return [
        {
            "tld": t.tld,
            "ulable": t.ulable,
            "current_status": t.current_status,
            "sftp": t.sftp,
        }
        for t in tlds
    ]


def _write_rows(rows: list[dict], fieldnames: tuple[str, ...], output_path: str) -> None:
    """Write rows to a file. Format is auto-detected from extension.

    Raises:
        ValueError: If the file extension is not .json, .jsonl, or .csv.
    """
    path = Path(output_path)
    ext = path.suffix.lower()

    if ext == ".json":
        path.write_text(json.dumps(rows, indent=2) + "\n")
    elif ext == ".jsonl":
        lines = [json.dumps(row) for row in rows]
        path.write_text("\n".join(lines) + "\n" if lines else "")
    elif ext == ".csv":
        with path.open("w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(fieldnames))
            writer.writeheader()
            writer.writerows(rows)
    else:
        raise ValueError(f"Unsupported file format '{ext}'. Use .json, .jsonl, or .csv.")


def export_zone_records(records: ZoneRecordMap, output_path: str) -> None:
    """Export a zone record map, one row per (domain, record) pair."""
    _write_rows(_zone_rows(records), ZONE_FIELDS, output_path)


def export_tlds(tlds: list[Tld], output_path: str) -> None:
    """Export a TLD listing, one row per TLD in listing order."""
    _write_rows(_tld_rows(tlds), TLD_FIELDS, output_path)
