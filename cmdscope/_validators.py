"""Shared validation helpers."""

from __future__ import annotations


def validate_call_count(times: int) -> None:
    """Ensure *times* is usable as an expected invocation count."""
    if isinstance(times, bool) or not isinstance(times, int):
        msg = "times must be an integer"
        raise TypeError(msg)

    if times < 0:
        msg = "times must be >= 0"
        raise ValueError(msg)


def validate_command_name(name: str) -> None:
    """Ensure *name* is a non-empty command name."""
    if not isinstance(name, str):
        msg = "command name must be a string"
        raise TypeError(msg)

    if not name.strip():
        msg = "command name must not be empty"
        raise ValueError(msg)
