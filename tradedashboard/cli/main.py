"""Command-line entry point for the dashboard built on the top of Typer."""

from .commands.app import app
from .commands.show_state import show_state
from .commands.upload_state import upload_state
from .commands.webapi import webapi

# Dummy export commands even though they are already registered
# to make the linter happy
__all__ = [
    app, show_state, upload_state, webapi,
]
