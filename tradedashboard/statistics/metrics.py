"""Portfolio level metrics for the dashboard summary cards.

All calculations are pure and total: every state document,
including one with zero symbols, produces finite numbers.

.. note ::

    The Sharpe ratio here is the mean of the per-symbol returns divided by
    their population standard deviation. It measures dispersion across symbols,
    it is not an annualised time-series Sharpe.
"""
from dataclasses import dataclass
from typing import Dict, List

import numpy as np
from dataclasses_json import dataclass_json, LetterCase

from tradedashboard.state.document import StateDocument, TraderRecord
from tradedashboard.state.types import Percent, USDollarAmount, Symbol


#: Floor for the summed peak value, so drawdown is never a division by zero
PEAK_EPSILON: USDollarAmount = 1e-6


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class PortfolioMetrics:
    """Aggregates across all symbols.

    Serialised with camelCase keys the dashboard frontend expects.
    """

    #: Sum of cash and position values
    total_value: USDollarAmount = 0.0

    #: Return against the initial balance of all symbols combined
    total_return: Percent = 0.0

    total_fees: USDollarAmount = 0.0

    #: Number of trades in the trade logs
    total_trades: int = 0

    #: Mean of per-symbol returns
    avg_return: Percent = 0.0

    #: Population standard deviation of per-symbol returns
    std_dev: Percent = 0.0

    sharpe: float = 0.0

    #: Decline of the total value from the summed peaks, zero or negative normally
    drawdown: Percent = 0.0

    symbol_count: int = 0


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class SymbolMetrics:
    """Per-symbol figures shown in the trader table."""

    portfolio_value: USDollarAmount
    return_pct: Percent
    peak_value: USDollarAmount
    drawdown: Percent

    #: LONG, SHORT or FLAT
    side: str

    #: Number of trades in the trade log
    trade_count: int

    #: Legacy counter as written by the bot
    num_trades: int


def calculate_symbol_return(trader: TraderRecord, initial_balance: USDollarAmount) -> Percent:
    """Return of one symbol against the initial balance, in percents."""
    if initial_balance <= 0:
        return 0.0
    return (trader.portfolio_value / initial_balance - 1) * 100


def calculate_drawdown(value: USDollarAmount, peak: USDollarAmount) -> Percent:
    """Decline from the peak, in percents.

    The peak is floored to :py:data:`PEAK_EPSILON`, so a zero or negative peak
    gives a large but finite number.
    """
    return (value / max(peak, PEAK_EPSILON) - 1) * 100


def calculate_portfolio_metrics(doc: StateDocument) -> PortfolioMetrics:
    """Calculate the summary metrics of a state snapshot.

    - Trade counts are taken from the trade logs, never from the legacy `num_trades`

    - A symbol without recorded peak value is assumed to be at its peak
    """

    traders: List[TraderRecord] = list(doc.traders.values())
    n = len(traders)

    if n == 0:
        return PortfolioMetrics()

    initial_balance = doc.initial_balance

    total_value = sum(t.portfolio_value for t in traders)
    total_fees = sum(t.total_fees for t in traders)
    total_trades = sum(t.get_trade_count() for t in traders)

    returns = np.array([calculate_symbol_return(t, initial_balance) for t in traders])

    if initial_balance > 0:
        total_return = (total_value / (initial_balance * n) - 1) * 100
    else:
        total_return = 0.0

    avg_return = float(np.mean(returns))

    if n > 1:
        std_dev = float(np.std(returns, ddof=0))
    else:
        std_dev = 0.0

    sharpe = avg_return / std_dev if std_dev > 0 else 0.0

    total_peak = sum(t.peak_value for t in traders)
    drawdown = calculate_drawdown(total_value, total_peak)

    metrics = PortfolioMetrics(
        total_value=total_value,
        total_return=total_return,
        total_fees=total_fees,
        total_trades=total_trades,
        avg_return=avg_return,
        std_dev=std_dev,
        sharpe=sharpe,
        drawdown=drawdown,
        symbol_count=n,
    )

    return metrics


def calculate_symbol_metrics(doc: StateDocument) -> Dict[Symbol, SymbolMetrics]:
    """Per-symbol breakdown of the snapshot."""
    return {
        symbol: SymbolMetrics(
            portfolio_value=trader.portfolio_value,
            return_pct=calculate_symbol_return(trader, doc.initial_balance),
            peak_value=trader.peak_value,
            drawdown=calculate_drawdown(trader.portfolio_value, trader.peak_value),
            side=trader.side.value,
            trade_count=trader.get_trade_count(),
            num_trades=trader.num_trades,
        ) for symbol, trader in doc.traders.items()
    }


def build_state_view(doc: StateDocument) -> dict:
    """The state document with the metrics attached.

    The original fields are passed through untouched for the frontend.
    """
    data = dict(doc.raw)
    data["metrics"] = calculate_portfolio_metrics(doc).to_dict()
    data["symbol_metrics"] = {
        symbol: m.to_dict() for symbol, m in calculate_symbol_metrics(doc).items()
    }
    return data
