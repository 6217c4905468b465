"""
Cash Counter

Counts a drawer by banknote denomination. Counts arrive from text
inputs, so digit-only strings are accepted and an empty string means
zero. Anything else is rejected rather than silently read as zero.
"""

from typing import Mapping, Union

from labcash.engine.constants import DENOMINATIONS
from labcash.models.statement import CashCount, CashCountLine


class CashCountError(ValueError):
    """A denomination or count could not be used."""
    pass


def _parse_count(denomination: int, raw: Union[int, str, None]) -> int:
    if raw is None:
        return 0
    if isinstance(raw, bool):
        raise CashCountError(f"Invalid count for {denomination}: {raw!r}")
    if isinstance(raw, int):
        if raw < 0:
            raise CashCountError(f"Count for {denomination} cannot be negative")
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if text == "":
            return 0
        if not text.isdigit():
            raise CashCountError(
                f"Count for {denomination} must be a whole number, got {raw!r}"
            )
        return int(text)
    raise CashCountError(f"Invalid count for {denomination}: {raw!r}")


def count_cash(
    counts: Mapping[int, Union[int, str, None]],
    denominations: tuple[int, ...] = DENOMINATIONS,
) -> CashCount:
    """
    Total a set of banknote counts.

    Args:
        counts: denomination -> number of notes (missing means zero)
        denominations: accepted denominations, largest first

    Returns:
        CashCount with one line per denomination, in the given order

    Raises:
        CashCountError: unknown denomination or unreadable count
    """
    unknown = set(counts) - set(denominations)
    if unknown:
        raise CashCountError(
            f"Unknown denominations: {sorted(unknown, reverse=True)}"
        )

    lines = tuple(
        CashCountLine(
            denomination=denomination,
            count=_parse_count(denomination, counts.get(denomination)),
        )
        for denomination in denominations
    )
    return CashCount(lines=lines)
