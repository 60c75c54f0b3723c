"""State snapshot data structures.

The trading bot periodically writes its whole state as a JSON document.
Here we parse that document into immutable dataclasses.

Optional field policy:

- Fields missing from older snapshots get an explicit default,
  or `None` when "missing" must be distinguishable from zero
  (see :py:attr:`TraderRecord.highest_value`)

- Fields of wrong type raise :py:class:`~tradedashboard.state.errors.StateParseError`

- Unknown fields are ignored by the parser, but the raw JSON object
  is retained so the web API can echo it back as is
"""
import datetime
import enum
import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from collections.abc import Mapping
from typing import Optional, Tuple

from tradedashboard.state.errors import StateParseError
from tradedashboard.state.types import USDollarAmount, USDollarPrice, PositionSize, Symbol
from tradedashboard.utils.timestamp import parse_iso_timestamp


#: The reference capital per symbol if the snapshot does not tell it
DEFAULT_INITIAL_BALANCE: USDollarAmount = 10_000.0

#: Positions smaller than this in absolute terms are considered flat
FLAT_POSITION_THRESHOLD: PositionSize = 0.1


class TradeActionType(enum.Enum):
    """What kind of trade the bot made."""

    buy = "BUY"
    sell = "SELL"
    short = "SHORT"
    cover = "COVER"
    stop_loss = "STOP_LOSS"
    take_profit = "TAKE_PROFIT"

    #: The bot wrote an action we do not recognise
    unknown = "UNKNOWN"

    @classmethod
    def parse(cls, value: str | None) -> "TradeActionType":
        try:
            return cls(value)
        except ValueError:
            return cls.unknown


class PositionSide(enum.Enum):
    """Direction of the current position of a symbol."""

    long = "LONG"
    short = "SHORT"
    flat = "FLAT"


def _get_float(data: Mapping, key: str, default: float = 0.0, finite=True) -> float:
    """Read a numeric field.

    :param finite:
        Reject NaN and Infinity, which :py:func:`json.loads` accepts.
        Only display fields may carry them, the JSON renderer outputs them as null.
    """
    value = data.get(key)
    if value is None:
        return default

    if isinstance(value, bool):
        raise StateParseError(f"Field {key} must be a number, got {value!r}")

    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise StateParseError(f"Field {key} must be a number, got {value!r}") from e

    if finite and not math.isfinite(result):
        raise StateParseError(f"Field {key} must be a finite number, got {value!r}")

    return result


def _get_display_float(data: Mapping, key: str) -> float:
    return _get_float(data, key, finite=False)


def _get_optional_float(data: Mapping, key: str) -> Optional[float]:
    if data.get(key) is None:
        return None
    return _get_float(data, key)


def _get_optional_int(data: Mapping, key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, float) and not math.isfinite(value):
        # Display only, output as null from the raw record
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise StateParseError(f"Field {key} must be an integer, got {value!r}") from e


def _get_object(data: Mapping, key: str) -> Mapping:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise StateParseError(f"Field {key} must be an object, got {type(value).__name__}")
    return value


@dataclass(frozen=True, slots=True)
class TradeRecord:
    """One entry in the trade log of a symbol.

    Immutable. Use :py:meth:`with_symbol` to get a copy tagged with its owning symbol.
    """

    #: When the trade happened, ISO-8601 as written by the bot
    timestamp: Optional[str]

    #: Parsed :py:attr:`timestamp`, naive UTC.
    #:
    #: `None` if the bot wrote something we cannot parse.
    timestamp_at: Optional[datetime.datetime]

    #: What kind of trade this was
    action_type: TradeActionType

    #: The action type string as written by the bot
    action_type_raw: Optional[str] = None

    old_position: PositionSize = 0.0
    new_position: PositionSize = 0.0
    position_change: PositionSize = 0.0

    price: USDollarPrice = 0.0
    trade_value: USDollarAmount = 0.0
    fee: USDollarAmount = 0.0
    slippage: USDollarAmount = 0.0
    total_cost: USDollarAmount = 0.0

    balance_before: USDollarAmount = 0.0
    balance_after: USDollarAmount = 0.0

    portfolio_value_before: USDollarAmount = 0.0
    portfolio_value_after: USDollarAmount = 0.0

    #: Free text explanation from the model
    reasoning: str = ""

    #: Model output action code
    model_action: Optional[int] = None

    #: Owning symbol.
    #:
    #: Not stored by the bot in its per-symbol logs,
    #: set by the trade history assembler.
    symbol: Optional[Symbol] = None

    #: The JSON object this record was parsed from
    raw: Mapping = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def parse(cls, data: Mapping) -> "TradeRecord":
        if not isinstance(data, Mapping):
            raise StateParseError(f"Trade history entries must be objects, got {type(data).__name__}")

        action_type_raw = data.get("action_type")
        timestamp = data.get("timestamp")
        symbol = data.get("symbol")

        return cls(
            timestamp=timestamp if isinstance(timestamp, str) else None,
            timestamp_at=parse_iso_timestamp(timestamp),
            action_type=TradeActionType.parse(action_type_raw),
            action_type_raw=action_type_raw,
            old_position=_get_display_float(data, "old_position"),
            new_position=_get_display_float(data, "new_position"),
            position_change=_get_display_float(data, "position_change"),
            price=_get_display_float(data, "price"),
            trade_value=_get_display_float(data, "trade_value"),
            fee=_get_display_float(data, "fee"),
            slippage=_get_display_float(data, "slippage"),
            total_cost=_get_display_float(data, "total_cost"),
            balance_before=_get_display_float(data, "balance_before"),
            balance_after=_get_display_float(data, "balance_after"),
            portfolio_value_before=_get_display_float(data, "portfolio_value_before"),
            portfolio_value_after=_get_display_float(data, "portfolio_value_after"),
            reasoning=str(data.get("reasoning") or ""),
            model_action=_get_optional_int(data, "model_action"),
            symbol=symbol if isinstance(symbol, str) else None,
            raw=MappingProxyType(dict(data)),
        )

    def with_symbol(self, symbol: Symbol) -> "TradeRecord":
        """Copy of this record owned by `symbol`, whatever was stored before."""
        return replace(self, symbol=symbol)

    def to_json_dict(self) -> dict:
        """Export as the original JSON object with the symbol overridden."""
        data = dict(self.raw)
        data["symbol"] = self.symbol
        return data


@dataclass(frozen=True, slots=True)
class TraderRecord:
    """State of the trader bot instance of one symbol."""

    #: Cash
    balance: USDollarAmount = 0.0

    #: Signed position size, see :py:attr:`side`
    position: PositionSize = 0.0

    #: Current value of the position
    position_value: USDollarAmount = 0.0

    entry_price: USDollarPrice = 0.0
    current_price: USDollarPrice = 0.0

    #: Fees paid over the lifetime of the trader
    total_fees: USDollarAmount = 0.0

    #: Legacy trade counter.
    #:
    #: May disagree with :py:attr:`trade_history`. Only displayed, never used for totals.
    num_trades: int = 0

    #: Peak portfolio value ever observed.
    #:
    #: `None` on snapshots written before the bot tracked it.
    highest_value: Optional[USDollarAmount] = None

    max_loss_reached: bool = False

    #: Trade log in the order the bot appended it
    trade_history: Tuple[TradeRecord, ...] = ()

    @classmethod
    def parse(cls, data: Mapping) -> "TraderRecord":
        if not isinstance(data, Mapping):
            raise StateParseError(f"Trader entries must be objects, got {type(data).__name__}")

        history = data.get("trade_history")
        if history is None:
            history = []
        elif not isinstance(history, list):
            raise StateParseError(f"trade_history must be a list, got {type(history).__name__}")

        return cls(
            balance=_get_float(data, "balance"),
            position=_get_float(data, "position"),
            position_value=_get_float(data, "position_value"),
            entry_price=_get_display_float(data, "entry_price"),
            current_price=_get_display_float(data, "current_price"),
            total_fees=_get_float(data, "total_fees"),
            num_trades=_get_optional_int(data, "num_trades") or 0,
            highest_value=_get_optional_float(data, "highest_value"),
            max_loss_reached=bool(data.get("max_loss_reached", False)),
            trade_history=tuple(TradeRecord.parse(t) for t in history),
        )

    @property
    def portfolio_value(self) -> USDollarAmount:
        """Cash plus position value."""
        return self.balance + self.position_value

    @property
    def peak_value(self) -> USDollarAmount:
        """Highest portfolio value.

        If the bot has not recorded a peak, assume we are at the peak now.
        """
        if self.highest_value is None:
            return self.portfolio_value
        return self.highest_value

    @property
    def side(self) -> PositionSide:
        if self.position > FLAT_POSITION_THRESHOLD:
            return PositionSide.long
        elif self.position < -FLAT_POSITION_THRESHOLD:
            return PositionSide.short
        return PositionSide.flat

    def get_trade_count(self) -> int:
        return len(self.trade_history)


@dataclass(frozen=True, slots=True)
class StateDocument:
    """One snapshot of the trading bot state.

    Replaced wholesale when a new snapshot is read, never patched.
    """

    #: When the bot wrote this snapshot, verbatim
    timestamp: Optional[str] = None

    #: When the bot session started, verbatim
    session_start_time: Optional[str] = None

    #: Reference capital per symbol
    initial_balance: USDollarAmount = DEFAULT_INITIAL_BALANCE

    emergency_stopped: bool = False

    #: Set when :py:attr:`emergency_stopped`
    emergency_reason: Optional[str] = None

    #: Symbol -> trader state
    traders: Mapping[Symbol, TraderRecord] = field(default_factory=dict)

    #: The JSON object this document was parsed from
    raw: Mapping = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def parse(cls, data: object) -> "StateDocument":
        """Parse a decoded JSON snapshot.

        :raise StateParseError:
            If the data does not look like a state snapshot
        """
        if not isinstance(data, Mapping):
            raise StateParseError(f"State must be a JSON object, got {type(data).__name__}")

        traders = {}
        for symbol, trader_data in _get_object(data, "traders").items():
            try:
                traders[symbol] = TraderRecord.parse(trader_data)
            except StateParseError as e:
                raise StateParseError(f"Trader {symbol}: {e}") from e

        timestamp = data.get("timestamp")
        session_start_time = data.get("session_start_time")
        emergency_reason = data.get("emergency_reason")

        return cls(
            timestamp=timestamp if isinstance(timestamp, str) else None,
            session_start_time=session_start_time if isinstance(session_start_time, str) else None,
            initial_balance=_get_float(data, "initial_balance", DEFAULT_INITIAL_BALANCE),
            emergency_stopped=bool(data.get("emergency_stopped", False)),
            emergency_reason=str(emergency_reason) if emergency_reason is not None else None,
            traders=MappingProxyType(traders),
            raw=MappingProxyType(dict(data)),
        )

    @property
    def last_updated_at(self) -> Optional[datetime.datetime]:
        return parse_iso_timestamp(self.timestamp)

    def get_symbols(self) -> list[Symbol]:
        return list(self.traders.keys())

    def get_symbol_count(self) -> int:
        return len(self.traders)

    def is_empty(self) -> bool:
        return len(self.traders) == 0
