"""Structured logging utilities."""

from .runlog import JsonlRunLogger, RunEvent, sanitize_arguments, utc_timestamp

__all__ = ["JsonlRunLogger", "RunEvent", "sanitize_arguments", "utc_timestamp"]
