from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any, Optional

from .models import ZERO


# Leading decimal literal; trailing junk is ignored ("12abc" -> 12).
_AMOUNT_RE = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")

_CENTS = Decimal("0.01")

# Largest magnitude accepted as an amount. Keeps ledger arithmetic, cent
# rounding and JSON floats finite.
MAX_AMOUNT = Decimal("1e15")

_MAX_DISPLAY_DIGITS = 1000


def _to_decimal(raw: Any) -> Optional[Decimal]:
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, int):
        value = Decimal(raw)
    elif isinstance(raw, float):
        value = Decimal(str(raw))
    elif isinstance(raw, str):
        match = _AMOUNT_RE.match(raw)
        if not match:
            return None
        try:
            value = Decimal(match.group(1))
        except InvalidOperation:
            return None
    else:
        return None

    if not value.is_finite():
        return None
    return value


def _parse(raw: Any) -> Optional[Decimal]:
    value = _to_decimal(raw)
    if value is None or abs(value) > MAX_AMOUNT:
        return None
    return value


def parse_amount(raw: Any) -> Decimal:
    """
    Parse user input into an amount.

    Parsing is permissive on purpose: anything that does not start with a
    number (including None and empty input), or whose magnitude exceeds
    `MAX_AMOUNT`, becomes zero instead of raising.
    """

    value = _parse(raw)
    return ZERO if value is None else value


def is_valid_amount(raw: Any) -> bool:
    """Return True when `raw` starts with a non-negative number within range."""

    value = _parse(raw)
    return value is not None and value >= 0


def _round_cents(value: Any) -> Decimal:
    amount = _to_decimal(value)
    if amount is None:
        return ZERO.quantize(_CENTS)

    # Totals can exceed MAX_AMOUNT; widen the context so quantize never traps.
    digits = amount.adjusted() + 4
    if digits > _MAX_DISPLAY_DIGITS:
        return amount
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, digits)
        return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_profit_loss(value: Any) -> str:
    """
    Render a profit/loss amount with two decimals.

    Winners get a leading '+', losers keep their minus sign, and anything
    that rounds to zero is shown as plain '0.00'.
    """

    rounded = _round_cents(value)
    if rounded > 0:
        return f"+{rounded}"
    if rounded < 0:
        return str(rounded)
    return "0.00"


def format_amount(value: Any) -> str:
    rounded = _round_cents(value)
    return "0.00" if rounded == 0 else str(rounded)


def profit_loss_status(value: Any) -> str:
    rounded = _round_cents(value)
    if rounded > 0:
        return "positive"
    if rounded < 0:
        return "negative"
    return "zero"
