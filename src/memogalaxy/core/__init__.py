"""Shared infrastructure: config, events, storage, logging and errors."""
