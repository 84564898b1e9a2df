"""Numeric one-time code generation."""

from __future__ import annotations

import secrets

DEFAULT_CODE_LENGTH = 6


def generate_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """Return a random numeric code of exactly *length* digits.

    The value is drawn uniformly from ``[10**(length-1), 10**length - 1]``,
    so it never has a leading zero and never needs padding.
    """
    if length < 1:
        raise ValueError(f"code length must be at least 1, got {length}")
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(10**length - low))
