"""
Command line entry point.

    gpass lookup https://github.com/login
    gpass list [--search github] [--reveal]
    gpass add https://example.com alice [--password secret]
    gpass tui
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.table import Table

from .client import CredentialClient
from .config import GPassConfig
from .credentials import BasicAuthCredentials, resolve_credentials
from .errors import ConfigError, GPassError
from .flows.extension import ExtensionLookupFlow, LookupOutcome, LookupResult, StaticTabSource
from .models import Credential, NewCredential

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gpass", description="GPass credential store client")
    parser.add_argument("--api-url", help="Backend URL (default: $GPASS_API_URL)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    lookup = sub.add_parser("lookup", help="Show logins for the domain of a page URL")
    lookup.add_argument("url")

    listing = sub.add_parser("list", help="List stored logins")
    listing.add_argument("--search", default="", help="Server-side search string")
    listing.add_argument("--reveal", action="store_true", help="Show passwords")

    add = sub.add_parser("add", help="Store a new login")
    add.add_argument("url")
    add.add_argument("username")
    add.add_argument("--password", default="", help="Leave empty to let the server generate one")

    sub.add_parser("tui", help="Open the interactive login table")
    return parser


def _print_logins(logins: tuple[Credential, ...], reveal: bool) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="dim")
    table.add_column("Url")
    table.add_column("Username")
    table.add_column("Password")
    for login in logins:
        password = login.reveal() if reveal else "••••••••"
        table.add_row(str(login.id), login.url, login.username, password)
    console.print(table)


def _render_lookup(result: LookupResult) -> None:
    outcome = result.outcome
    if outcome is LookupOutcome.MATCHES:
        console.print(f"[bold]{result.key}[/bold]")
        _print_logins(result.credentials, reveal=True)
    elif outcome is LookupOutcome.NO_MATCH:
        console.print(f"[yellow]No logins stored for[/yellow] [bold]{result.key or '-'}[/bold]")
    else:
        err_console.print(f"[red]Lookup failed:[/red] {result.error}")


async def _run(
    args: argparse.Namespace, config: GPassConfig, credentials: BasicAuthCredentials
) -> int:
    async with CredentialClient(config, credentials) as client:
        if args.command == "lookup":
            flow = ExtensionLookupFlow(client, StaticTabSource(args.url), render=_render_lookup)
            result = await flow.run()
            return 1 if result.error is not None else 0

        if args.command == "list":
            logins = await (client.list_by_key(args.search) if args.search else client.list())
            _print_logins(logins, reveal=args.reveal)
            return 0

        if args.command == "add":
            record = NewCredential(url=args.url, username=args.username, password=args.password)
            created = await client.create(record)
            console.print(f"[green]Saved:[/green] {created.url} (id {created.id})")
            return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = GPassConfig.from_env()
        if args.api_url:
            config = GPassConfig(
                base_url=args.api_url, timeout=config.timeout, page_size=config.page_size
            )
        credentials = resolve_credentials()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        return 2

    if args.command == "tui":
        from .tui.app import GPassTUI

        GPassTUI(CredentialClient(config, credentials)).run()
        return 0

    try:
        return asyncio.run(_run(args, config, credentials))
    except GPassError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
