"""Timestamp helpers"""
import datetime
from typing import Optional

import pandas as pd


def parse_iso_timestamp(value: str | None) -> Optional[datetime.datetime]:
    """Parse an ISO-8601 timestamp written by the trading bot.

    - The bot writes both naive and timezone aware timestamps

    - Internally we use `datetime.datetime`, no timezone, all UTC.
      Naive input is assumed to be UTC already.

    :return:
        Naive UTC datetime, or `None` if the value is missing or cannot be parsed
    """
    if not value or not isinstance(value, str):
        return None

    # pd.Timestamp also understands words like "now" and "today"
    value = value.strip()
    if not value[:1].isdigit():
        return None

    try:
        ts = pd.Timestamp(value)
    except ValueError:
        return None

    if pd.isna(ts):
        return None

    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)

    return ts.to_pydatetime()


def format_timestamp(v: Optional[datetime.datetime]) -> str:
    """Format times for console output"""
    if not v:
        return ""
    return v.strftime('%Y-%m-%d %H:%M:%S')
