#!/usr/bin/env python3
"""
Unified CLI for Raffle Toolkit.

Examples:
  - Networks
    raffles networks

  - Addresses
    raffles addresses --chain-id 84532

  - Raffles
    raffles list --chain-id 84532 [--mobile] [--max 10] [--no-cache]
    raffles list --chain-id 84532 --json --output output/raffles.json

  - Search
    raffles search "genesis" --chain-id 84532
"""

import argparse
import asyncio
from typing import List, Optional

from raffle_toolkit.raffles.models import RaffleRecord
from raffle_toolkit.raffles.service import RaffleService
from raffle_toolkit.shared.constants import NETWORKS, GlobalConstants
from raffle_toolkit.shared.error_messages import describe_error
from raffle_toolkit.shared.exceptions import (
    AddressDiscoveryException,
    ContractsNotAvailableException,
)
from raffle_toolkit.utils.formatters import (
    add_raffle_to_table,
    console,
    create_raffles_table,
    format_address,
    save_json_output,
)


def validate_chain_id(chain_id: int) -> None:
    """Validate chain ID against the network table"""
    if GlobalConstants.get_network(chain_id) is None:
        raise ValueError(
            f"Invalid chain_id: {chain_id}. Must be one of {sorted(NETWORKS)}"
        )


def _print_raffles(args: argparse.Namespace, raffles: List[RaffleRecord]) -> None:
    if args.json:
        data = {
            "chain_id": args.chain_id,
            "count": len(raffles),
            "raffles": [r.to_dict() for r in raffles],
        }
        filename = args.output or f"output/raffles_{args.chain_id}.json"
        save_json_output(data, filename)
        return

    table = create_raffles_table()
    for raffle in raffles:
        add_raffle_to_table(table, raffle)
    console.print(table)


def _print_summary(service: RaffleService) -> None:
    summary = service.last_summary
    if summary is None:
        return
    if summary.from_cache:
        console.print("[dim]Served from cache[/dim]")
    elif summary.is_partial:
        console.print(
            f"[yellow]{summary.dropped} of {summary.requested} raffles "
            f"could not be read[/yellow]"
        )
        for address in summary.dropped_addresses:
            console.print(f"  [dim]- {address}[/dim]")


def cmd_networks(args: argparse.Namespace) -> None:
    for chain_id, network in sorted(NETWORKS.items()):
        if network.has_raffle_contracts:
            status = (
                f"[green]manager {format_address(network.raffle_manager)}[/green]"
            )
        else:
            status = "[dim]not deployed[/dim]"
        console.print(f"- {chain_id:>9} | {network.name:<26} | {status}")


def cmd_addresses(args: argparse.Namespace) -> None:
    async def run():
        validate_chain_id(args.chain_id)
        service = RaffleService.for_chain(args.chain_id)
        addresses = await service.get_all_raffle_addresses()
        console.print(
            f"Raffles on chain {args.chain_id}: {len(addresses)} (newest first)"
        )
        for address in addresses:
            console.print(f"- {address}")

    asyncio.run(run())


def cmd_list(args: argparse.Namespace) -> None:
    async def run():
        validate_chain_id(args.chain_id)
        service = RaffleService.for_chain(args.chain_id)

        with console.status("Fetching raffles...") as status:

            def on_progress(completed: int, total: int) -> None:
                status.update(f"Fetched {completed}/{total} raffles...")

            raffles = await service.fetch_all_raffles(
                is_constrained=args.mobile,
                use_cache=not args.no_cache,
                max_raffles=args.max,
                on_progress=on_progress,
            )

        console.print(f"Raffles: {len(raffles)}")
        _print_raffles(args, raffles)
        _print_summary(service)

    asyncio.run(run())


def cmd_search(args: argparse.Namespace) -> None:
    async def run():
        validate_chain_id(args.chain_id)
        service = RaffleService.for_chain(args.chain_id)
        raffles = await service.search_raffles(
            args.term,
            is_constrained=args.mobile,
            use_cache=not args.no_cache,
            max_raffles=args.max,
        )
        console.print(f"Matches for '{args.term}': {len(raffles)}")
        _print_raffles(args, raffles)

    asyncio.run(run())


def _add_fetch_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--chain-id", type=int, required=True)
    parser.add_argument(
        "--mobile",
        action="store_true",
        help="Use the constrained (mobile) fetch profile",
    )
    parser.add_argument("--max", type=int, help="Maximum raffles to fetch")
    parser.add_argument(
        "--no-cache", action="store_true", help="Bypass the result cache"
    )
    parser.add_argument("--json", action="store_true", help="Output JSON")
    parser.add_argument("--output", type=str, help="Output filename")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="raffles",
        description="Unified CLI for Raffle Toolkit",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # networks
    p_net = sub.add_parser("networks", help="List supported networks")
    p_net.set_defaults(func=cmd_networks)

    # addresses
    p_addr = sub.add_parser("addresses", help="List raffle addresses")
    p_addr.add_argument("--chain-id", type=int, required=True)
    p_addr.set_defaults(func=cmd_addresses)

    # list
    p_list = sub.add_parser("list", help="Fetch and display raffles")
    _add_fetch_arguments(p_list)
    p_list.set_defaults(func=cmd_list)

    # search
    p_search = sub.add_parser("search", help="Search raffles by name or address")
    p_search.add_argument("term", type=str)
    _add_fetch_arguments(p_search)
    p_search.set_defaults(func=cmd_search)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except (ContractsNotAvailableException, AddressDiscoveryException) as e:
        console.print(f"[yellow]Unable to load raffles on this network:[/yellow] {e}")
        raise SystemExit(1)
    except Exception as e:
        description = describe_error(e, "load raffles")
        console.print(f"[red]Error:[/red] {description.message}")
        if description.suggested_action:
            console.print(f"[dim]{description.suggested_action}[/dim]")
        raise


if __name__ == "__main__":
    main()
