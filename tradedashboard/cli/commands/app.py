"""Typer app all commands register to."""

import shutil

import typer


app = typer.Typer(
    name="Trade Dashboard",
    help="Backend for the trading bot dashboard.",
    context_settings={
        # Wide tables in help output
        "max_content_width": shutil.get_terminal_size().columns
    },
    # Show our own error messages and tracebacks, not the Rich ones
    pretty_exceptions_enable=False,
    pretty_exceptions_show_locals=False,
)
