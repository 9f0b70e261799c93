"""Shared formatting and file utilities for the CLI."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from raffle_toolkit.raffles.models import RaffleRecord, RaffleState

# Shared console instance
console = Console()

STATE_STYLES = {
    RaffleState.PENDING: "yellow",
    RaffleState.ACTIVE: "green",
    RaffleState.DRAWING: "magenta",
    RaffleState.COMPLETED: "cyan",
    RaffleState.ENDED: "dim",
}

WEI_PER_ETHER = 10**18


def format_address(address: str, length: int = 10) -> str:
    """
    Format an Ethereum address to show first and last characters.

    Args:
        address: Ethereum address
        length: Total visible characters (default: 10)

    Returns:
        Formatted address like "0x1234...5678"
    """
    if not address:
        return "N/A"
    if len(address) <= length:
        return address
    return f"{address[:6]}...{address[-4:]}"


def format_timestamp(
    timestamp: int, format_str: str = "%Y-%m-%d %H:%M"
) -> str:
    """Format a Unix timestamp (UTC) to a readable date string."""
    dt = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return dt.strftime(format_str)


def format_ether(wei: int, decimals: int = 4) -> str:
    return f"{wei / WEI_PER_ETHER:.{decimals}f}"


def format_state(state: RaffleState) -> str:
    style = STATE_STYLES.get(state, "white")
    return f"[{style}]{state.value}[/{style}]"


def save_json_output(
    data: Any,
    filename: str,
    print_path: bool = True,
) -> str:
    """
    Save data to a JSON file, creating parent directories.

    Returns:
        Full path to saved file
    """
    filepath = Path(filename)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)

    if print_path:
        console.print(f"[cyan]Data saved to:[/cyan] {filepath}")

    return str(filepath)


def create_raffles_table() -> Table:
    """
    Create a Rich table with standard raffle columns.

    Returns:
        Configured Rich Table for raffle display
    """
    table = Table(
        show_header=True,
        header_style="bold cyan",
        show_lines=False,
        pad_edge=False,
        box=None,
    )
    table.add_column("Address", width=14)
    table.add_column("Name", width=24)
    table.add_column("State", width=10, justify="center")
    table.add_column("Start", width=16)
    table.add_column("Slots", width=7, justify="right")
    table.add_column("Fee", width=10, justify="right")
    table.add_column("Winners", width=7, justify="right")
    table.add_column("Prize", width=8, justify="center")
    return table


def add_raffle_to_table(table: Table, raffle: RaffleRecord) -> None:
    """Add a raffle row to the raffles table."""
    table.add_row(
        format_address(raffle.address),
        raffle.name or "[dim]unnamed[/dim]",
        format_state(raffle.state),
        format_timestamp(raffle.start_time),
        str(raffle.slot_limit),
        format_ether(raffle.slot_fee),
        str(raffle.winners_count),
        "[green]yes[/green]" if raffle.is_prized else "[dim]no[/dim]",
    )
