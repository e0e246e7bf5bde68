# Copyright (c) 2026 The bolt11-forge developers
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
# THE SOFTWARE.

"""
Invoice amounts.

The HRP carries the amount in bitcoin, optionally followed by a multiplier
letter: m (milli), u (micro), n (nano), p (pico). Amounts are Decimals
throughout; 1 BTC is 10**11 millisatoshi.

Arithmetic on amounts goes through Fraction so that no Decimal context
precision can round away a remainder.
"""

import re
from decimal import Decimal
from fractions import Fraction
from typing import Union

from .errors import InvalidAmount, TooManyDecimalPlaces


MSAT_PER_BTC = 10**11
PICO_PER_BTC = 10**12

# multiplier letter -> power of ten it divides by
UNITS = {
    "p": 12,
    "n": 9,
    "u": 6,
    "m": 3,
}

_AMOUNT_RE = re.compile(r"(\d+)([pnum]?)")

AmountLike = Union[Decimal, int, str]


def to_decimal(amount: AmountLike) -> Decimal:
    if isinstance(amount, float):
        # floats would smuggle binary rounding error into the invoice
        raise InvalidAmount("pass amounts as Decimal, int or str, not float")
    try:
        return Decimal(amount)
    except ArithmeticError as exc:
        raise InvalidAmount("invalid amount {!r}".format(amount)) from exc


def to_pico(amount: Decimal) -> int:
    """
    Exact amount in pico-bitcoin.

    Raises:
        InvalidAmount:        not a positive finite number.
        TooManyDecimalPlaces: not a whole number of millisatoshi.
    """
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmount("amount must be positive, got {}".format(amount))
    pico = Fraction(amount) * PICO_PER_BTC
    if pico.denominator != 1 or pico.numerator % 10:
        raise TooManyDecimalPlaces("cannot encode {}: too many decimal places".format(amount))
    return pico.numerator


def check_amount(amount: Decimal) -> None:
    """Raise unless `amount` is a positive whole number of millisatoshi."""
    to_pico(amount)


def shorten_amount(amount: AmountLike) -> str:
    """
    Given an amount in bitcoin, shorten it.

    The amount is taken to pico-bitcoin first, then divided by 1000 for as
    long as that is exact, picking the multiplier letter of the last step.

    >>> shorten_amount(Decimal("0.025"))
    '25m'
    """
    pico = to_pico(to_decimal(amount))
    unit = ""
    for unit in ("p", "n", "u", "m", ""):
        if unit and pico % 1000 == 0:
            pico //= 1000
        else:
            break
    return str(pico) + unit


def unshorten_amount(amount: str) -> Decimal:
    """
    Given a shortened amount, convert it into a Decimal number of bitcoin.

    Raises:
        InvalidAmount: not digits plus an optional multiplier, or a pico
                       amount that is not a whole millisatoshi.
    """
    match = _AMOUNT_RE.fullmatch(amount)
    if not match:
        raise InvalidAmount("invalid amount {!r}".format(amount))
    digits, unit = match.groups()
    if unit == "p" and not digits.endswith("0"):
        raise InvalidAmount("{!r} is not a whole number of millisatoshi".format(amount))
    # built from text so the exponent shift never rounds
    return Decimal("{}E-{}".format(digits, UNITS[unit])) if unit else Decimal(digits)


def btc_to_msat(amount: AmountLike) -> int:
    return to_pico(to_decimal(amount)) // (PICO_PER_BTC // MSAT_PER_BTC)


def msat_to_btc(amount_msat: int) -> Decimal:
    if amount_msat <= 0:
        raise InvalidAmount("amount must be positive, got {} msat".format(amount_msat))
    return Decimal("{}E-11".format(int(amount_msat)))
