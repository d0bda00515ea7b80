"""Shared helpers: formatting, validation, rate limiting and env handling."""
