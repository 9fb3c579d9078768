#!/usr/bin/env python3
"""
Broker CSV Import Report

Parses a broker or journal export and prints what would be imported:
- one row per normalized trade with derived R metrics
- journal statistics over the closed trades
- warnings (unmatched fills) and row errors

Usage:
    python tools/import_report.py path/to/export.csv [--broker ibkr] [--stats] [--json]
"""

import argparse
import json
import sys
from datetime import timedelta
from pathlib import Path

from rich.console import Console
from rich.table import Table

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from core.config import settings
from core.logging_utils import setup_logging
from core.trade_analytics import calculate_stats, format_duration
from importers import available_brokers, parse_broker_csv_bytes

console = Console()


def _fmt(value, pattern: str = "{:.2f}") -> str:
    return "-" if value is None else pattern.format(value)


def trades_table(trades) -> Table:
    table = Table(title=f"Trades ({len(trades)})", show_lines=False)
    table.add_column("Open", style="dim")
    table.add_column("Symbol", style="cyan")
    table.add_column("Side")
    table.add_column("Qty", justify="right")
    table.add_column("Entry", justify="right")
    table.add_column("Exit", justify="right")
    table.add_column("Fees", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("R", justify="right")
    table.add_column("Class", style="dim")

    for t in trades:
        pnl_style = "green" if (t.pnl or 0) > 0 else "red" if (t.pnl or 0) < 0 else ""
        table.add_row(
            t.open_at.strftime("%Y-%m-%d %H:%M") if t.open_at else "-",
            t.symbol,
            t.side.value,
            f"{t.quantity:g}",
            _fmt(t.entry_price, "{:g}"),
            _fmt(t.exit_price, "{:g}"),
            _fmt(t.fees),
            f"[{pnl_style}]{_fmt(t.pnl, '{:+.2f}')}[/]" if pnl_style else _fmt(t.pnl, "{:+.2f}"),
            _fmt(t.result_r, "{:+.2f}"),
            t.asset_class.value if t.asset_class else "-",
        )
    return table


def stats_table(trades) -> Table:
    stats = calculate_stats(trades)
    table = Table(title="Statistics", show_header=False)
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")
    table.add_row("Closed / Open", f"{stats.closed_trades} / {stats.open_trades}")
    table.add_row("Win rate", f"{stats.win_rate:.1f}%")
    table.add_row("Total P&L", f"${stats.total_pnl:+,.2f}")
    table.add_row("Expectancy", f"{stats.expectancy:+.2f}R")
    table.add_row("Profit factor", f"{stats.profit_factor:.2f}")
    table.add_row("Max drawdown", f"${stats.max_drawdown:,.2f}")
    table.add_row("Sharpe (R)", f"{stats.sharpe_ratio:.2f}")
    table.add_row("Avg hold", format_duration(timedelta(hours=stats.avg_duration_hours)))
    return table


def messages_table(title: str, messages, style: str) -> Table:
    table = Table(title=f"{title} ({len(messages)})", show_header=False, title_style=style)
    table.add_column("Message")
    for message in messages:
        table.add_row(message)
    return table


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Preview a broker CSV import")
    parser.add_argument("path", type=Path, help="CSV export to parse")
    parser.add_argument("--broker", choices=available_brokers(), help="Force a parser instead of detecting it")
    parser.add_argument("--stats", action="store_true", help="Show journal statistics")
    parser.add_argument("--json", action="store_true", help="Print trade payloads as JSON")
    parser.add_argument("--log-level", default=settings.log_level)
    parser.add_argument("--log-file", type=Path, help="Append import log records to this file")
    args = parser.parse_args(argv)

    setup_logging(args.log_level, log_file=args.log_file)

    if not args.path.exists():
        console.print(f"[red]File not found: {args.path}[/red]")
        return 2

    result = parse_broker_csv_bytes(args.path.read_bytes(), broker=args.broker)

    if args.json:
        print(json.dumps([t.to_payload() for t in result.trades], indent=2))
    elif result.trades:
        console.print(trades_table(result.trades))
        if args.stats:
            console.print(stats_table(result.trades))

    if result.warnings:
        console.print(messages_table("Warnings", result.warnings, "yellow"))
    if result.errors:
        console.print(messages_table("Errors", result.errors, "red"))

    return 0 if result.trades or not result.errors else 1


if __name__ == "__main__":
    sys.exit(main())
