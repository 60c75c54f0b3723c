from logging import Logger
from pathlib import Path

import pytest

from tradedashboard.cli.log import setup_pytest_logging
from tradedashboard.testing.state import make_state, make_trade, make_trader, write_state_file


@pytest.fixture()
def logger() -> Logger:
    return setup_pytest_logging()


@pytest.fixture()
def state_data() -> dict:
    """Two symbol bot state.

    - BTC has two trades and a recorded peak

    - ETH has one trade, no peak recorded (older snapshot format)
      and a stale legacy trade counter
    """
    return make_state({
        "BTC": make_trader(
            5000.0,
            5500.0,
            position=0.5,
            entry_price=60000.0,
            current_price=66000.0,
            total_fees=12.5,
            highest_value=11000.0,
            trade_history=[
                make_trade("2024-05-01T09:00:00", "BUY"),
                make_trade("2024-05-01T11:00:00", "SELL"),
            ],
        ),
        "ETH": make_trader(
            9000.0,
            0.0,
            position=-0.05,
            current_price=3000.0,
            total_fees=7.5,
            num_trades=99,
            trade_history=[
                make_trade("2024-05-01T10:00:00", "SHORT", symbol="STALE"),
            ],
        ),
    })


@pytest.fixture()
def state_file(tmp_path, state_data) -> Path:
    return write_state_file(tmp_path / "state.json", state_data)
