"""Trading bot state snapshots: parsing, reading and caching."""
