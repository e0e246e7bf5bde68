# Copyright (c) 2017 Pieter Wuille
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

"""Bit-width re-packing and the 5-bit symbol type."""

from typing import Iterable, List, Sequence

from .errors import InvalidInputValue, InvalidPadding


class U5(int):
    """
    A single bech32 symbol.

    Behaves exactly like an int, but can only hold values in [0, 31].
    Anything else raises InvalidInputValue at construction time.
    """

    __slots__ = ()

    def __new__(cls, value: int) -> "U5":
        value = int(value)
        if value < 0 or value > 31:
            raise InvalidInputValue("value {} does not fit in 5 bits".format(value))
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return "U5({})".format(int(self))


def to_u5(values: Iterable[int]) -> List[U5]:
    """Validate a whole sequence of symbols."""
    return [U5(v) for v in values]


def convertbits(data: Iterable[int], frombits: int, tobits: int, pad: bool = True) -> List[int]:
    """
    General power-of-2 base conversion.

    Args:
        data:     Values, each below 2**frombits.
        frombits: Width of the input values.
        tobits:   Width of the output values.
        pad:      Zero-fill a trailing partial group. When False, leftover
                  bits must be fewer than `frombits` and all zero.

    Raises:
        InvalidInputValue: an input value does not fit in `frombits`.
        InvalidPadding:    `pad` is False and the trailing bits are not
                           canonical zero padding.
    """
    acc = 0
    bits = 0
    ret = []
    maxv = (1 << tobits) - 1
    max_acc = (1 << (frombits + tobits - 1)) - 1
    for value in data:
        if value < 0 or (value >> frombits):
            raise InvalidInputValue("value {} does not fit in {} bits".format(value, frombits))
        acc = ((acc << frombits) | value) & max_acc
        bits += frombits
        while bits >= tobits:
            bits -= tobits
            ret.append((acc >> bits) & maxv)
    if pad:
        if bits:
            ret.append((acc << (tobits - bits)) & maxv)
    elif bits >= frombits:
        raise InvalidPadding("{} leftover bits is more than padding".format(bits))
    elif (acc << (tobits - bits)) & maxv:
        raise InvalidPadding("non-zero padding bits")
    return ret


def u5_to_int(groups: Sequence[int]) -> int:
    """Read symbols as a big-endian base-32 number."""
    value = 0
    for group in groups:
        value = (value << 5) | U5(group)
    return value


def int_to_u5(value: int) -> List[U5]:
    """Minimal big-endian 5-bit groups for a non-negative integer; 0 is [0]."""
    if value < 0:
        raise InvalidInputValue("cannot encode negative value {}".format(value))
    groups = []
    while True:
        groups.append(U5(value & 31))
        value >>= 5
        if not value:
            break
    groups.reverse()
    return groups
