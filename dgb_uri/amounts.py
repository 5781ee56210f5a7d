"""Exact fixed-point conversion between DigiByte amounts and decimal text.

Every amount handled by the library is an integer count of the smallest
currency unit (1 DGB = 100,000,000 units). Text is interpreted through
:class:`decimal.Decimal` digit tuples so no float rounding and no decimal
context rounding is ever introduced.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

DECIMALS = 8
COIN = 10**DECIMALS
CENT = 10**(DECIMALS - 2)

# Upper bound on the number of integer digits an amount may expand to.
_MAX_UNIT_DIGITS = 40

_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class InvalidAmountError(ValueError):
    """Raised when decimal text cannot be represented as an exact amount."""


def parse_decimal(text: str) -> int:
    """Return the number of smallest units described by decimal ``text``.

    Accepts an optional sign, a fractional part (``"1.5"``, ``".12345678"``)
    and scientific notation (``"1E-2"``). Inputs carrying more than eight
    fractional digits are refused even when the excess digits are zero, so
    ``"1.000000000"`` and ``"2E-20"`` both raise :class:`InvalidAmountError`.
    """

    if not isinstance(text, str) or not _DECIMAL_RE.fullmatch(text):
        raise InvalidAmountError(f"not a decimal number: {text!r}")
    try:
        value = Decimal(text)
    except InvalidOperation as exc:  # pragma: no cover - regex admits only valid literals
        raise InvalidAmountError(f"not a decimal number: {text!r}") from exc

    sign, digits, exponent = value.as_tuple()
    shift = exponent + DECIMALS
    if shift < 0:
        raise InvalidAmountError(
            f"{text!r} has more than {DECIMALS} fractional digits"
        )
    if len(digits) + shift > _MAX_UNIT_DIGITS:
        raise InvalidAmountError(f"{text!r} is too large")

    units = int("".join(str(digit) for digit in digits)) * 10**shift
    return -units if sign else units


def combine(whole: int, cents: int) -> int:
    """Return ``whole`` coins plus ``cents`` hundredths of a coin in units.

    ``cents`` is not sign-checked: ``combine(1, -1)`` yields one coin minus a
    cent. This mirrors long-standing behaviour that callers rely on and should
    be considered deprecated rather than relied upon in new code.
    """

    if cents >= 100:
        raise ValueError(f"cents must be below 100, got {cents}")
    return whole * COIN + cents * CENT


def _split(amount: int) -> tuple[str, int, str]:
    whole, fraction = divmod(abs(amount), COIN)
    sign = "-" if amount < 0 else ""
    return sign, whole, f"{fraction:0{DECIMALS}d}".rstrip("0")


def format_friendly(amount: int) -> str:
    """Render ``amount`` with at least two fractional digits.

    More digits are shown only when needed to represent the value exactly,
    e.g. a thousandth of a coin renders as ``"0.001"``.
    """

    sign, whole, fraction = _split(amount)
    return f"{sign}{whole}.{fraction.ljust(2, '0')}"


def format_plain(amount: int | None) -> str:
    """Render ``amount`` exactly, without trailing zeros or a bare separator."""

    if amount is None:
        raise ValueError("Value cannot be None")
    sign, whole, fraction = _split(amount)
    if not fraction:
        return f"{sign}{whole}"
    return f"{sign}{whole}.{fraction}"


def to_decimal(amount: int) -> Decimal:
    """Return ``amount`` as an exact coin-denominated :class:`Decimal`."""

    return Decimal(format_plain(amount))
