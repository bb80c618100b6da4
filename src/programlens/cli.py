"""
CLI entry point for programlens.

Usage:
    programlens analyze PROGRAM_ID --network mainnet
    programlens analyze PROGRAM_ID --rpc-url http://127.0.0.1:8899 -l 10 -o report.json
    programlens ping --network devnet
    programlens budget 185000 --price 5000
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .config import MAX_TX_LIMIT, AnalyzerConfig, load_env, resolve_rpc_url

console = Console()

PRIORITY_STYLES = {
    "high": ("red", "High Priority"),
    "medium": ("yellow", "Medium Priority"),
    "low": ("green", "Low Priority"),
}


def _build_config(args: argparse.Namespace) -> AnalyzerConfig:
    rpc_url = args.rpc_url or (resolve_rpc_url(args.network) if args.network else None)
    return AnalyzerConfig.from_env(
        rpc_url=rpc_url,
        tx_limit=args.limit,
        timeout=args.timeout,
        max_concurrency=args.concurrency,
    )


def display_metrics(report) -> None:
    """Render the metrics table for an analysis report."""
    from .scoring import rating

    metrics = report.metrics
    table = Table(title="Program Performance Metrics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    sample = f"{metrics.transaction_count} of {report.requested_limit} requested"
    table.add_row("Transactions analyzed", sample)
    if report.skipped_signatures:
        table.add_row("Transactions skipped", str(len(report.skipped_signatures)))
    table.add_row("Compute units used", f"{metrics.compute_units_used:,}")
    table.add_row("Compute unit limit", f"{metrics.compute_units_limit:,}")
    table.add_row("Average CU per tx", f"{metrics.average_cu_per_tx:,.0f} (n={metrics.transaction_count})")
    table.add_row(
        "Account data size",
        f"{metrics.account_data_size_bytes:,} bytes ({metrics.account_data_size_bytes / 1024:.2f} KB)",
    )
    if report.rent_exempt_lamports is not None:
        table.add_row(
            "Balance / rent-exempt minimum",
            f"{report.snapshot.lamport_balance:,} / {report.rent_exempt_lamports:,} lamports",
        )
    table.add_row("Max CPI depth", str(metrics.cpi_depth))
    table.add_row("Max writes to one account", str(metrics.max_lock_count))
    table.add_row("Instructions", f"{metrics.instruction_count:,}")
    table.add_row("Est. reads / writes", f"{metrics.data_reads_bytes:,} / {metrics.data_writes_bytes:,} bytes")
    console.print(table)

    score_value = metrics.optimization_score
    label = rating(score_value)
    style = "green" if score_value >= 80 else "yellow" if score_value >= 60 else "red"
    console.print(f"\n[bold]Optimization Score: [{style}]{score_value:.0f}/100[/{style}][/bold] ({label})")


def display_recommendations(recommendations) -> None:
    """Render recommendations grouped by priority."""
    from .scoring import group_by_priority

    if not recommendations:
        console.print("\n[green]✓ No optimization recommendations[/green]")
        return

    console.print("\n[bold]Optimization Recommendations[/bold]")
    for priority, items in group_by_priority(recommendations).items():
        if not items:
            continue
        color, title = PRIORITY_STYLES[priority.value]
        console.print(f"\n  [{color}]{title}:[/{color}]")
        for rec in items:
            console.print(f"    • [{color}]{rec.category}[/{color}]: {rec.description}")
            console.print(f"      [dim]Impact:[/dim] [green]{rec.estimated_improvement}[/green]")


def run_analyze(args: argparse.Namespace) -> int:
    """Analyze a program's recent transactions and print recommendations."""
    load_env()

    try:
        config = _build_config(args)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    program = args.program
    console.print()
    console.print(Panel(
        f"[bold cyan]{program}[/bold cyan]\n\n"
        f"[dim]RPC: {config.rpc_url}[/dim]\n"
        f"[dim]Sample: {config.tx_limit} recent transactions[/dim]",
        title="[bold]Program Performance Analysis[/bold]",
    ))
    console.print()

    # Import here to avoid slow startup
    from .core.analyzer import AnalysisError, ProgramAnalyzer

    async def _run():
        analyzer = ProgramAnalyzer(config)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Fetching transactions...", total=None)
            report = await analyzer.analyze_report(program)
            progress.update(task, description="Analysis complete!")
        return report

    try:
        report = asyncio.run(_run())
    except AnalysisError as e:
        console.print(f"[red]✗ Analysis failed: {e}[/red]")
        if e.__cause__ is not None:
            console.print(f"[dim]  cause: {e.__cause__}[/dim]")
        return 1

    display_metrics(report)
    display_recommendations(report.recommendations)

    if args.output:
        with open(args.output, "w") as f:
            json.dump(report.to_dict(), f, indent=2)
        console.print(f"\n[dim]Report exported to: {args.output}[/dim]")

    return 0


def run_ping(args: argparse.Namespace) -> int:
    """Check that the RPC endpoint is reachable."""
    from .core.rpc import RpcError, check_rpc_health

    load_env()
    rpc_url = args.rpc_url or resolve_rpc_url(args.network)
    console.print(f"[bold]Checking {rpc_url}[/bold]")

    try:
        status = check_rpc_health(rpc_url, timeout=args.timeout)
    except RpcError as e:
        console.print(f"[red]✗ {e}[/red]")
        return 1

    if status["healthy"]:
        console.print("[green]✓ Node healthy[/green]")
    else:
        console.print(f"[yellow]Node unhealthy: {status['error']}[/yellow]")
    if status["version"]:
        console.print(f"  [dim]solana-core {status['version']}[/dim]")
    return 0 if status["healthy"] else 1


def run_budget(args: argparse.Namespace) -> int:
    """Print the compute budget to request for a measured average usage."""
    from .tuning import calculate_optimal_cu_limit, create_compute_budget_instructions

    try:
        cu_limit = calculate_optimal_cu_limit(args.average_cu)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    instructions = create_compute_budget_instructions(cu_limit, args.price)
    console.print(f"[bold]Recommended CU limit:[/bold] {cu_limit:,}")
    console.print(f"[bold]CU price:[/bold] {args.price:,} micro-lamports")
    for ix in instructions:
        console.print(f"  [dim]{ix.program_id} data={bytes(ix.data).hex()}[/dim]")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="programlens",
        description="Performance analyzer for on-chain Solana programs",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Analyze a program's recent transactions")
    analyze_parser.add_argument("program", type=str, help="Program account address")
    analyze_parser.add_argument(
        "--network", "-n",
        type=str,
        choices=["devnet", "testnet", "mainnet"],
        help="Network to use (default: devnet, or PROGRAMLENS_RPC_URL)"
    )
    analyze_parser.add_argument("--rpc-url", type=str, help="Custom RPC endpoint")
    analyze_parser.add_argument(
        "--limit", "-l",
        type=int,
        help=f"Recent transactions to sample, 1-{MAX_TX_LIMIT} (default: {MAX_TX_LIMIT})"
    )
    analyze_parser.add_argument("--timeout", type=float, help="Seconds per RPC call (default: 30)")
    analyze_parser.add_argument("--concurrency", type=int, help="Parallel transaction fetches (default: 4)")
    analyze_parser.add_argument(
        "--output", "-o",
        type=str,
        help="Output file for JSON report"
    )

    # ping command
    ping_parser = subparsers.add_parser("ping", help="Check RPC connectivity")
    ping_parser.add_argument(
        "--network", "-n",
        type=str,
        choices=["devnet", "testnet", "mainnet"],
        default="devnet",
        help="Network to use (default: devnet)"
    )
    ping_parser.add_argument("--rpc-url", type=str, help="Custom RPC endpoint")
    ping_parser.add_argument("--timeout", type=float, default=10.0, help="Seconds (default: 10)")

    # budget command
    budget_parser = subparsers.add_parser("budget", help="Suggest a compute budget from average CU usage")
    budget_parser.add_argument("average_cu", type=float, help="Average compute units per transaction")
    budget_parser.add_argument(
        "--price", "-p",
        type=int,
        default=0,
        help="Priority fee in micro-lamports per CU (default: 0)"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command == "analyze":
        return run_analyze(args)
    elif args.command == "ping":
        return run_ping(args)
    elif args.command == "budget":
        return run_budget(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
