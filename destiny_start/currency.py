"""Currency amounts embedded in item descriptions, and money formatting."""

import math
import re
from collections.abc import Iterable
from typing import NamedTuple

CURRENCY_ITEM_TYPE = "货币"

_GOLD_RE = re.compile(r"([0-9]+)金币")
_SILVER_RE = re.compile(r"([0-9]+)银币")
_COPPER_RE = re.compile(r"([0-9]+)铜币")

# (threshold/divisor, suffix), largest first
_NUMBER_UNITS = [
    (1_0000_0000_0000, "兆"),
    (1_0000_0000, "亿"),
    (1_0000, "万"),
]


class CurrencyAmount(NamedTuple):
    gold: int = 0
    silver: int = 0
    copper: int = 0


def _first_amount(pattern: re.Pattern, text: str) -> int:
    match = pattern.search(text)
    return int(match.group(1)) if match else 0


def parse_currency(description: str) -> CurrencyAmount:
    """Read gold/silver/copper counts from free text.

    Only the first match per unit is used; absent units are 0.
    "袋中有12金币和30铜币" → CurrencyAmount(12, 0, 30)
    """
    return CurrencyAmount(
        gold=_first_amount(_GOLD_RE, description),
        silver=_first_amount(_SILVER_RE, description),
        copper=_first_amount(_COPPER_RE, description),
    )


def sum_currency(amounts: Iterable[CurrencyAmount]) -> CurrencyAmount:
    gold = silver = copper = 0
    for amount in amounts:
        gold += amount.gold
        silver += amount.silver
        copper += amount.copper
    return CurrencyAmount(gold, silver, copper)


def format_money(value: float) -> str:
    """Format money for display.

    Below 10000: thousands separators only ("1,234").
    10000 and up: shortened with a unit, original in parentheses
    ("1.5万 (15,000)").
    """
    if not math.isfinite(value):
        return "0"
    original = f"{value:,}"
    magnitude = abs(value)
    sign = "-" if value < 0 else ""
    for divisor, suffix in _NUMBER_UNITS:
        if magnitude >= divisor:
            short = f"{magnitude / divisor:.2f}"
            if "." in short:
                short = short.rstrip("0").rstrip(".")
            return f"{sign}{short}{suffix} ({original})"
    return original
