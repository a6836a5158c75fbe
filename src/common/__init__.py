"""Shared helpers: logging, errors and HTTP transport."""
