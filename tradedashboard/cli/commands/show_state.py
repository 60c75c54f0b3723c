"""show-state command.

"""
from pathlib import Path
from typing import Optional

from tabulate import tabulate
from typer import Option

from . import shared_options
from .app import app
from ..bootstrap import create_state_resolver
from ..log import setup_logging
from ...analysis.display import display_metrics, display_traders, display_trades
from ...statistics.history import assemble_trade_history
from ...statistics.metrics import calculate_portfolio_metrics
from ...utils.timestamp import format_timestamp


@app.command()
def show_state(
    blob_token: Optional[str] = shared_options.blob_token,
    use_local_state: bool = shared_options.use_local_state,
    state_file: Path = shared_options.state_file,
    blob_name: str = shared_options.blob_name,
    blob_timeout: float = shared_options.blob_timeout,
    log_level: Optional[str] = Option("warning", envvar="LOG_LEVEL", help="The Python default logging level."),
    symbol: Optional[str] = Option(None, "--symbol", help="Only show trades of this symbol"),
    trade_count: int = Option(20, "--trade-count", help="How many latest trades to display"),
):
    """Display the portfolio metrics and trade history of the trading bot.

    - Reads the same state source as the web API

    - Useful to check the dashboard numbers from the console
    """

    setup_logging(log_level)

    resolver = create_state_resolver(
        blob_token=blob_token,
        use_local_state=use_local_state,
        state_file=state_file,
        blob_name=blob_name,
        blob_timeout=blob_timeout,
    )

    doc = resolver.resolve()

    print(f"State last updated: {format_timestamp(doc.last_updated_at) or doc.timestamp}")
    print(f"Session started: {doc.session_start_time}")
    print(f"Initial balance per symbol: ${doc.initial_balance:,.2f}")

    if doc.emergency_stopped:
        print(f"EMERGENCY STOPPED: {doc.emergency_reason}")

    print()
    print("Portfolio")
    df = display_metrics(calculate_portfolio_metrics(doc))
    print(tabulate(df, headers='keys', tablefmt='rounded_outline'))
    print()

    print("Traders")
    if doc.is_empty():
        print("No traders")
    else:
        df = display_traders(doc)
        print(tabulate(df, headers='keys', tablefmt='rounded_outline'))
    print()

    history = assemble_trade_history(doc, symbol)
    print(f"Latest trades, {history.total_count:,} total")
    df = display_trades(history.trades[0:trade_count])
    if len(df) > 0:
        # rounded_outline does not support newlines in cells
        print(tabulate(df, headers='keys', tablefmt="fancy_grid"))
    else:
        print("No trades")
