"""Strict text-to-number parsing shared by the input DTOs."""

from __future__ import annotations

import re

INTEGER_TEXT = re.compile(r"-?[0-9]+")


def parse_int(text: str) -> int:
    """Parse an ASCII base-10 integer, optionally negative.

    Rejects what ``int`` alone would accept: underscores, a leading ``+``
    and non-ASCII digits.
    """
    text = text.strip()
    if not INTEGER_TEXT.fullmatch(text):
        raise ValueError("Value must be a base-10 integer.")
    return int(text, 10)
