"""Helpers for unit tests."""
