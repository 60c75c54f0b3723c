"""Type aliases for state data structures."""
from typing import TypeAlias


#: Dollar amount, floating point is accurate enough for display
#:
#: The bot exports balances and values as JSON floats.
USDollarAmount: TypeAlias = float

#: Asset price in dollars
USDollarPrice: TypeAlias = float

#: Percent expressed as float, 100 = 100 %
#:
#: Unlike in most statistics code, dashboard returns
#: are already multiplied by 100.
Percent: TypeAlias = float

#: Signed quantity of the traded asset
#:
#: Positive is long, negative is short.
PositionSize: TypeAlias = float

#: Trading symbol as used as the key of the traders mapping, e.g. `BTC`
Symbol: TypeAlias = str
