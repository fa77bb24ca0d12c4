"""
Trader's Journal CLI Application.

Command-line interface for running the API and inspecting the journal.
"""

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tradersjournal.config import CONFIG_FILE, settings, get_llm_api_key, get_turnstile_secret_key
from tradersjournal.logging_utils import configure_logging

# Initialize CLI app
app = typer.Typer(
    name="tradersjournal",
    help="Trader's Journal - forex trading journal API",
    add_completion=False,
)

# Sub-command groups
stats_app = typer.Typer(help="Statistics and analytics commands")
config_app = typer.Typer(help="Configuration commands")

app.add_typer(stats_app, name="stats")
app.add_typer(config_app, name="config")

console = Console()

# Configure logging
configure_logging(logging.INFO)


def _status(ok: bool, missing_hint: str) -> str:
    return "[green]✓ Configured[/green]" if ok else f"[red]✗ {missing_hint}[/red]"


# ==================== STATS COMMANDS ====================


@stats_app.command("summary")
def stats_summary(
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Only this user's trades (user id)"),
):
    """Show overall performance summary."""
    from tradersjournal.db.supabase_client import get_service_client, is_supabase_configured
    from tradersjournal.errors import AppError
    from tradersjournal.journal.analytics import medal_for, summarize_journal
    from tradersjournal.journal.trades import SUMMARY_COLUMNS, iter_trades

    if not is_supabase_configured():
        console.print("[red]Supabase is not configured. Set SUPABASE_URL and SUPABASE_SERVICE_KEY.[/red]")
        raise typer.Exit(1)

    try:
        summary = summarize_journal(iter_trades(get_service_client(), user, columns=SUMMARY_COLUMNS))
    except AppError as e:
        console.print(f"[red]{e.error}: {e.message or ''}[/red]")
        raise typer.Exit(1)

    overall = summary.overall
    if overall.total_trades == 0:
        console.print("[yellow]No trades recorded yet[/yellow]")
        return

    emoji = "🟢" if overall.total_profit >= 0 else "🔴"
    medal = medal_for(overall) or "-"
    console.print(
        Panel(
            f"[bold]{'User ' + user if user else 'All Users'}[/bold]\n\n"
            f"Total Trades: {overall.total_trades}\n"
            f"Winners: {overall.profitable_trades} | Losers: {overall.losing_trades}\n"
            f"Win Rate: {overall.win_rate:.1f}%  Medal: {medal}\n"
            f"\n"
            f"[bold]Total P/L: {overall.total_profit:+,.2f} {emoji}[/bold]\n"
            f"Avg P/L per Trade: {overall.average_profit:+,.2f}\n"
            f"Risk/Reward: {overall.risk_reward_ratio:.2f}",
            title="📊 Performance Summary",
            border_style="blue",
        )
    )

    table = Table(title="Performance by Pair")
    table.add_column("Pair", style="cyan")
    table.add_column("Trades", justify="right")
    table.add_column("Win%", justify="right")
    table.add_column("Total P/L", justify="right")
    table.add_column("Avg P/L", justify="right")

    for row in summary.pair_performance():
        pnl_style = "green" if row["total_profit"] >= 0 else "red"
        table.add_row(
            row["currency_pair"],
            str(row["total_trades"]),
            f"{row['win_rate']:.1f}%",
            f"[{pnl_style}]{row['total_profit']:+,.2f}[/{pnl_style}]",
            f"{row['average_profit']:+,.2f}",
        )

    console.print(table)


# ==================== CONFIG COMMANDS ====================


@config_app.command("show")
def config_show():
    """Show current configuration and service availability."""
    from tradersjournal.db.supabase_client import is_supabase_configured
    from tradersjournal.notify.email import is_email_configured

    console.print(Panel("[bold]Configuration[/bold]", border_style="blue"))

    console.print("\n[bold cyan]📁 Files:[/bold cyan]")
    console.print(f"  Config:      [green]{CONFIG_FILE}[/green]{'' if CONFIG_FILE.exists() else ' (defaults)'}")
    console.print("  Env vars:    .env")

    console.print("\n[bold cyan]⚙️  Settings:[/bold cyan]")
    console.print(f"  Page size:         {settings.page_size}")
    console.print(f"  Trades per page:   {settings.trades_per_page}")
    console.print(f"  Session timeout:   {settings.session_timeout_seconds}s")
    console.print(f"  Secure cookies:    {settings.secure_cookies}")
    console.print(f"  Announcement batch: {settings.announcement_batch_size}")

    console.print("\n[bold cyan]🔌 Services:[/bold cyan]")
    console.print(f"  Supabase:  {_status(is_supabase_configured(), 'Set SUPABASE_URL / SUPABASE_ANON_KEY')}")
    console.print(f"  LLM:       {_status(get_llm_api_key() is not None, 'Set LLM_API_KEY')}")
    console.print(f"  Turnstile: {_status(get_turnstile_secret_key() is not None, 'CAPTCHA disabled')}")
    console.print(f"  SMTP:      {_status(is_email_configured(), 'Set SMTP_USER / SMTP_PASSWORD')}")


# ==================== WEB SERVER ====================


@app.command("web")
def run_web(
    host: str = typer.Option("127.0.0.1", "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
):
    """Start the API server."""
    url_host = host
    if url_host in {"0.0.0.0", "::"}:
        url_host = "127.0.0.1"
    url = f"http://{url_host}:{port}"

    console.print(
        Panel(
            f"[bold]🚀 {settings.app_name} API[/bold]\n\n"
            f"Serving at: [cyan]{url}[/cyan]\n\n"
            f"Press Ctrl+C to stop the server",
            title="Web Server",
            border_style="green",
        )
    )

    from tradersjournal.web.server import run_server

    run_server(host=host, port=port)


if __name__ == "__main__":
    app()
