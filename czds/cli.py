"""CZDS CLI - list TLDs and download zone files from ICANN CZDS."""

import argparse
import asyncio
import logging
import os
from collections import Counter
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from czds.client import ACCOUNTS_API_BASE_URL, CZDS_API_BASE_URL, CzdsClient
from czds.errors import CzdsError
from czds.exporter import SUPPORTED_EXTENSIONS, export_tlds, export_zone_records
from czds.token_store import FileTokenStore, TokenStore
from czds.types import Tld, ZoneRecordMap

console = Console()

ENV_EMAIL = "CZDS_EMAIL"
ENV_PASSWORD = "CZDS_PASSWORD"
ENV_ACCOUNTS_API_URL = "CZDS_ACCOUNTS_API_URL"
ENV_CZDS_API_URL = "CZDS_API_URL"
DEFAULT_TOKEN_FILE = Path.home() / ".cache" / "czds" / "token"

STATUS_STYLES = {
    "approved": "bold green",
    "pending": "yellow",
    "denied": "red",
    "expired": "red",
    "revoked": "red",
}


def configure_logging(level: str = "WARNING") -> None:
    """Route log records through rich so they interleave with console output."""
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s | %(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def sort_tlds(tlds: list[Tld]) -> list[Tld]:
    """Sort TLDs by status (approved first), then alphabetically."""
    return sorted(tlds, key=lambda t: (t.current_status.lower() != "approved", t.tld))


def display_tlds(tlds: list[Tld], output_console: Console | None = None) -> None:
    """Display TLDs as a rich table followed by a per-status summary."""
    out = output_console or console

    table = Table(title="CZDS TLDs", show_lines=False)
    table.add_column("TLD", style="bold")
    table.add_column("U-label")
    table.add_column("Status")
    table.add_column("SFTP")

    for t in sort_tlds(tlds):
        style = STATUS_STYLES.get(t.current_status.lower(), "")
        table.add_row(
            t.tld,
            t.ulable,
            Text(t.current_status, style=style),
            "yes" if t.sftp else "no",
        )

    out.print(table)

    counts = Counter(t.current_status.lower() for t in tlds)
    summary = Text()
    summary.append(f"Total: {len(tlds)}", style="bold")
    for status, count in sorted(counts.items()):
        summary.append(" | ")
        summary.append(f"{status.capitalize()}: {count}", style=STATUS_STYLES.get(status, ""))
    out.print(summary)


def display_zone_summary(
    tld: str,
    records: ZoneRecordMap,
    output_console: Console | None = None,
) -> None:
    out = output_console or console
    total_records = sum(len(r) for r in records.values())
    summary = Text()
    summary.append(f"{tld} zone", style="bold")
    summary.append(" | ")
    summary.append(f"Domains: {len(records):,}", style="bold green")
    summary.append(" | ")
    summary.append(f"Records: {total_records:,}")
    out.print(summary)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="List TLDs and download zone files from ICANN CZDS.",
        epilog=f"Credentials are read from {ENV_EMAIL} and {ENV_PASSWORD}.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--token-file",
        metavar="PATH",
        default=str(DEFAULT_TOKEN_FILE),
        help=f"File caching the access token between runs (default: {DEFAULT_TOKEN_FILE})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    tlds_parser = subparsers.add_parser("tlds", help="List TLDs and their approval status")
    tlds_parser.add_argument(
        "--status",
        help="Only show TLDs with this status (e.g., approved, pending)",
    )
    tlds_parser.add_argument(
        "--output",
        metavar="FILE",
        help="Export TLDs to a file (supports .json, .jsonl, and .csv)",
    )

    zone_parser = subparsers.add_parser("zone", help="Download and parse a TLD zone file")
    zone_parser.add_argument("tld", help="TLD to download (e.g., dev)")
    zone_parser.add_argument(
        "--output",
        metavar="FILE",
        help="Export records to a file (supports .json, .jsonl, and .csv)",
    )
    return parser


async def run(args: argparse.Namespace, email: str, password: str, token_store: TokenStore) -> None:
    async with CzdsClient(
        email,
        password,
        token_store=token_store,
        accounts_api_base_url=os.environ.get(ENV_ACCOUNTS_API_URL, ACCOUNTS_API_BASE_URL),
        czds_api_base_url=os.environ.get(ENV_CZDS_API_URL, CZDS_API_BASE_URL),
    ) as client:
        if args.command == "tlds":
            tlds = await client.list_tlds()
            if args.status:
                tlds = [t for t in tlds if t.current_status.lower() == args.status.lower()]
            display_tlds(tlds)
            if args.output:
                export_tlds(tlds, args.output)
                console.print(f"TLDs exported to {args.output}")
        else:
            with console.status(f"[bold blue]Downloading {args.tld} zone file"):
                records = await client.get_zone_file(args.tld)
            display_zone_summary(args.tld, records)
            if args.output:
                export_zone_records(records, args.output)
                console.print(f"Records exported to {args.output}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    email = os.environ.get(ENV_EMAIL)
    password = os.environ.get(ENV_PASSWORD)
    if not email or not password:
        parser.error(f"{ENV_EMAIL} and {ENV_PASSWORD} must be set")

    if args.output and Path(args.output).suffix.lower() not in SUPPORTED_EXTENSIONS:
        parser.error(f"--output must end in one of: {', '.join(SUPPORTED_EXTENSIONS)}")

    configure_logging(args.log_level)

    try:
        asyncio.run(run(args, email, password, FileTokenStore(args.token_file)))
    except CzdsError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
