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

"""
Bech32 string codec (BIP-173 checksum) as used by BOLT-11 invoices.

Unlike segwit addresses, invoices have no 90 character cap, so length
checking is opt-in through `max_length`.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from .bits import to_u5
from .errors import (
    InvalidCharacter,
    InvalidCharacterInData,
    InvalidChecksum,
    InvalidLength,
    InvalidSeparatorPosition,
    MixedCase,
    NoSeparator,
)


CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
CHARSET_INVERSE: Dict[str, int] = {c: i for i, c in enumerate(CHARSET)}

SEPARATOR = "1"
CHECKSUM_LENGTH = 6


def bech32_polymod(values: Iterable[int]) -> int:
    """Internal function that computes the Bech32 checksum."""
    generator = [0x3b6a57b2, 0x26508e6d, 0x1ea119fa, 0x3d4233dd, 0x2a1462b3]
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i in range(5):
            chk ^= generator[i] if ((top >> i) & 1) else 0
    return chk


def bech32_hrp_expand(hrp: str) -> List[int]:
    """Expand the HRP into values for checksum computation."""
    return [ord(x) >> 5 for x in hrp] + [0] + [ord(x) & 31 for x in hrp]


def bech32_verify_checksum(hrp: str, data: Iterable[int]) -> bool:
    """Verify a checksum given HRP and converted data characters."""
    return bech32_polymod(bech32_hrp_expand(hrp) + list(data)) == 1


def bech32_create_checksum(hrp: str, data: Iterable[int]) -> List[int]:
    """Compute the six checksum values given HRP and data."""
    values = bech32_hrp_expand(hrp) + list(data)
    polymod = bech32_polymod(values + [0] * CHECKSUM_LENGTH) ^ 1
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(CHECKSUM_LENGTH)]


def bech32_encode(hrp: str, data: Iterable[int]) -> str:
    """
    Compute a Bech32 string given HRP and data values.

    Args:
        hrp:  The human-readable part (e.g. "lnbc25m").
        data: The payload as 5-bit values.

    Raises:
        InvalidInputValue: a data value is outside [0, 31].
    """
    symbols = to_u5(data)
    combined = symbols + bech32_create_checksum(hrp, symbols)
    return hrp + SEPARATOR + "".join([CHARSET[d] for d in combined])


def bech32_decode(bech: str, max_length: Optional[int] = None) -> Tuple[str, List[int]]:
    """
    Validate a Bech32 string and split it into HRP and data.

    Args:
        bech:       The Bech32-encoded string to decode.
        max_length: Maximum allowed string length, unlimited when None.

    Returns:
        (hrp, data) with the HRP lower-cased and the checksum removed.

    Raises:
        Bech32Error subclasses naming the first rule the string breaks.
    """
    if max_length is not None and len(bech) > max_length:
        raise InvalidLength("{} characters exceeds limit of {}".format(len(bech), max_length))
    if any(ord(x) < 33 or ord(x) > 126 for x in bech):
        raise InvalidCharacter("character outside printable ASCII")
    if bech.lower() != bech and bech.upper() != bech:
        raise MixedCase("mixed upper and lower case")

    bech = bech.lower()
    pos = bech.rfind(SEPARATOR)
    if pos < 0:
        raise NoSeparator("no '{}' separator".format(SEPARATOR))

    # HRP must be at least 1 char, and data+checksum at least 6 chars
    if pos < 1 or pos + CHECKSUM_LENGTH + 1 > len(bech):
        raise InvalidSeparatorPosition("separator at position {} of {}".format(pos, len(bech)))

    hrp = bech[:pos]
    try:
        data = [CHARSET_INVERSE[x] for x in bech[pos + 1:]]
    except KeyError as exc:
        raise InvalidCharacterInData("{!r} is not a bech32 character".format(exc.args[0])) from exc

    if not bech32_verify_checksum(hrp, data):
        raise InvalidChecksum("checksum mismatch")

    return (hrp, data[:-CHECKSUM_LENGTH])
