"""Display dashboard data as Pandas tables for console output."""
import textwrap
from typing import Iterable

import pandas as pd

from tradedashboard.state.document import StateDocument, TradeRecord
from tradedashboard.statistics.metrics import PortfolioMetrics, calculate_symbol_metrics
from tradedashboard.utils.timestamp import format_timestamp


def display_metrics(metrics: PortfolioMetrics) -> pd.DataFrame:
    """Format summary metrics as a two column table."""
    rows = {
        "Total value": f"${metrics.total_value:,.2f}",
        "Total return": f"{metrics.total_return:.2f}%",
        "Average return": f"{metrics.avg_return:.2f}%",
        "Return std dev": f"{metrics.std_dev:.2f}%",
        "Sharpe": f"{metrics.sharpe:.2f}",
        "Drawdown": f"{metrics.drawdown:.2f}%",
        "Total fees": f"${metrics.total_fees:,.2f}",
        "Total trades": f"{metrics.total_trades:,}",
        "Symbols": f"{metrics.symbol_count}",
    }
    df = pd.DataFrame(list(rows.items()), columns=["Metric", "Value"])
    return df.set_index("Metric")


def display_traders(doc: StateDocument) -> pd.DataFrame:
    """Format per-symbol state for table output.

    :return:
        DataFrame indexed by symbol, values as string formatted
    """
    symbol_metrics = calculate_symbol_metrics(doc)

    items = []
    idx = []
    for symbol, trader in doc.traders.items():
        m = symbol_metrics[symbol]
        idx.append(symbol)
        items.append({
            "Side": m.side,
            "Position": f"{abs(trader.position):,.2f}",
            "Value": f"${m.portfolio_value:,.2f}",
            "Return": f"{m.return_pct:.2f}%",
            "Drawdown": f"{m.drawdown:.2f}%",
            "Price": f"${trader.current_price:,.2f}",
            "Fees": f"${trader.total_fees:,.2f}",
            "Trades": m.trade_count,
            "Max loss": "Yes" if trader.max_loss_reached else "",
        })

    df = pd.DataFrame(items, index=idx)
    return df


def display_trades(trades: Iterable[TradeRecord]) -> pd.DataFrame:
    """Format trade history for table output."""

    items = []
    for t in trades:
        reasoning = "\n".join(textwrap.wrap(t.reasoning[0:100], width=30))  # Limit to 100 characters
        items.append({
            "At": format_timestamp(t.timestamp_at) or (t.timestamp or ""),
            "Symbol": t.symbol,
            "Action": t.action_type_raw or t.action_type.value,
            "Change": f"{t.position_change:,.4f}",
            "Price": f"${t.price:,.2f}",
            "Value": f"${t.trade_value:,.2f}",
            "Fee": f"${t.fee:,.2f}",
            "Portfolio after": f"${t.portfolio_value_after:,.2f}",
            "Reasoning": reasoning,
        })

    return pd.DataFrame(items)
