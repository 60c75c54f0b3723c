"""Backend for the multi-symbol trading bot dashboard."""
