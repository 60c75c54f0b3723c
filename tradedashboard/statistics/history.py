"""Combined trade history across all symbols.

The bot keeps a separate append-only trade log per symbol,
without the symbol on the entries. Here we tag, merge and sort them
into one list, newest first.
"""
import datetime
from dataclasses import dataclass
from typing import Optional, Tuple

from tradedashboard.state.document import StateDocument, TradeRecord
from tradedashboard.state.types import Symbol


@dataclass(frozen=True)
class TradeHistory:
    """Trade history view served to the dashboard."""

    #: Trades, the most recent first
    trades: Tuple[TradeRecord, ...]

    #: Number of trades after filtering
    total_count: int

    #: Snapshot timestamp, verbatim
    last_updated: Optional[str]

    def to_json_dict(self) -> dict:
        return {
            "trades": [t.to_json_dict() for t in self.trades],
            "total_count": self.total_count,
            "last_updated": self.last_updated,
        }


def _sort_key(trade: TradeRecord) -> Tuple[bool, datetime.datetime]:
    # Trades with unparseable timestamps sort last in the descending order
    if trade.timestamp_at is None:
        return False, datetime.datetime.min
    return True, trade.timestamp_at


def assemble_trade_history(doc: StateDocument, symbol: Optional[Symbol] = None) -> TradeHistory:
    """Merge per-symbol trade logs into one history.

    - Every trade is tagged with its owning symbol, overriding any stored value

    - Sorted newest first. The sort is stable, so trades with the same
      timestamp keep their original relative order.

    - Filtering by `symbol` happens after sorting

    The input document is not modified.

    :param symbol:
        Only return trades of this symbol
    """

    trades = [
        trade.with_symbol(owner)
        for owner, trader in doc.traders.items()
        for trade in trader.trade_history
    ]

    trades.sort(key=_sort_key, reverse=True)

    if symbol:
        trades = [t for t in trades if t.symbol == symbol]

    return TradeHistory(
        trades=tuple(trades),
        total_count=len(trades),
        last_updated=doc.raw.get("timestamp"),
    )
