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
BOLT-11 tagged fields.

Each field is serialized as one tag symbol, a 10-bit length counted in
5-bit groups (two symbols, high first), and that many value symbols.

Every field type the codec understands is a frozen dataclass below; any
other tag comes back as UnknownField so newer invoices still decode.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Type, Union

from .bech32 import CHARSET, CHARSET_INVERSE
from .bits import U5, convertbits, int_to_u5, to_u5, u5_to_int
from .errors import ConversionError, InvalidFieldValue, UnknownTagOnEncode


log = logging.getLogger(__name__)

MAX_FIELD_LENGTH = 1023
HEADER_LENGTH = 3


def _bytes_to_u5(value: bytes) -> List[U5]:
    return to_u5(convertbits(value, 8, 5, True))


def _u5_to_bytes(data: Sequence[int], size: Optional[int] = None) -> Optional[bytes]:
    try:
        value = bytes(convertbits(data, 5, 8, False))
    except ConversionError:
        return None
    if size is not None and len(value) != size:
        return None
    return value


def _check_size(name: str, value: bytes, size: int) -> None:
    if len(value) != size:
        raise InvalidFieldValue("{} must be {} bytes, got {}".format(name, size, len(value)))


def _check_uint(name: str, value: int) -> None:
    if value < 0:
        raise InvalidFieldValue("{} must not be negative".format(name))


@dataclass(frozen=True)
class PaymentHash:
    tag: ClassVar[str] = "p"
    value: bytes

    def __post_init__(self) -> None:
        _check_size("payment hash", self.value, 32)

    def to_u5(self) -> List[U5]:
        return _bytes_to_u5(self.value)

    @classmethod
    def from_u5(cls, data: Sequence[int]) -> Optional["PaymentHash"]:
        value = _u5_to_bytes(data, 32) if len(data) == 52 else None
        return cls(value) if value is not None else None


@dataclass(frozen=True)
class PaymentSecret:
    tag: ClassVar[str] = "s"
    value: bytes

    def __post_init__(self) -> None:
        _check_size("payment secret", self.value, 32)

    def to_u5(self) -> List[U5]:
        return _bytes_to_u5(self.value)

    @classmethod
    def from_u5(cls, data: Sequence[int]) -> Optional["PaymentSecret"]:
        value = _u5_to_bytes(data, 32) if len(data) == 52 else None
        return cls(value) if value is not None else None


@dataclass(frozen=True)
class Description:
    tag: ClassVar[str] = "d"
    text: str

    def to_u5(self) -> List[U5]:
        return _bytes_to_u5(self.text.encode("utf-8"))

    @classmethod
    def from_u5(cls, data: Sequence[int]) -> Optional["Description"]:
        value = _u5_to_bytes(data)
        if value is None:
            return None
        try:
            return cls(value.decode("utf-8"))
        except UnicodeDecodeError:
            return None


@dataclass(frozen=True)
class DescriptionHash:
    tag: ClassVar[str] = "h"
    value: bytes

    def __post_init__(self) -> None:
        _check_size("description hash", self.value, 32)

    def to_u5(self) -> List[U5]:
        return _bytes_to_u5(self.value)

    @classmethod
    def from_u5(cls, data: Sequence[int]) -> Optional["DescriptionHash"]:
        value = _u5_to_bytes(data, 32)
        return cls(value) if value is not None else None


@dataclass(frozen=True)
class Expiry:
    """Seconds after the invoice timestamp until it expires."""

    tag: ClassVar[str] = "x"
    seconds: int

    def __post_init__(self) -> None:
        _check_uint("expiry", self.seconds)

    def to_u5(self) -> List[U5]:
        return int_to_u5(self.seconds)

    @classmethod
    def from_u5(cls, data: Sequence[int]) -> Optional["Expiry"]:
        return cls(u5_to_int(data))


@dataclass(frozen=True)
class MinFinalCltvExpiry:
    tag: ClassVar[str] = "c"
    blocks: int

    def __post_init__(self) -> None:
        _check_uint("min final cltv expiry", self.blocks)

    def to_u5(self) -> List[U5]:
        return int_to_u5(self.blocks)

    @classmethod
    def from_u5(cls, data: Sequence[int]) -> Optional["MinFinalCltvExpiry"]:
        return cls(u5_to_int(data))


def features_to_bytes(bits: Iterable[int]) -> bytes:
    """Minimal big-endian byte string with bit i (from the low end) set for each i in `bits`."""
    value = 0
    for bit in bits:
        if bit < 0:
            raise InvalidFieldValue("feature bits must not be negative")
        value |= 1 << bit
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def features_from_bytes(data: bytes) -> FrozenSet[int]:
    value = int.from_bytes(data, "big")
    return frozenset(i for i in range(value.bit_length()) if value >> i & 1)


@dataclass(frozen=True)
class Features:
    """
    Feature bit indices.

    On the wire the feature bytes are read as one big-endian integer and
    written right-aligned in as few 5-bit groups as possible, so bit i of
    the field is feature i.
    """

    tag: ClassVar[str] = "9"
    bits: FrozenSet[int]

    def __post_init__(self) -> None:
        if any(bit < 0 for bit in self.bits):
            raise InvalidFieldValue("feature bits must not be negative")

    @property
    def value(self) -> int:
        return int.from_bytes(features_to_bytes(self.bits), "big")

    def to_u5(self) -> List[U5]:
        return int_to_u5(self.value)

    @classmethod
    def from_u5(cls, data: Sequence[int]) -> Optional["Features"]:
        value = u5_to_int(data)
        return cls(features_from_bytes(value.to_bytes((value.bit_length() + 7) // 8, "big")))


@dataclass(frozen=True)
class PayeeNodeKey:
    """Explicit 33-byte payee public key; used to verify instead of recover."""

    tag: ClassVar[str] = "n"
    pubkey: bytes

    def __post_init__(self) -> None:
        _check_size("payee node key", self.pubkey, 33)

    def to_u5(self) -> List[U5]:
        return _bytes_to_u5(self.pubkey)

    @classmethod
    def from_u5(cls, data: Sequence[int]) -> Optional["PayeeNodeKey"]:
        value = _u5_to_bytes(data, 33) if len(data) == 53 else None
        return cls(value) if value is not None else None


@dataclass(frozen=True)
class UnknownField:
    tag: str
    data: Tuple[U5, ...]

    def to_u5(self) -> List[U5]:
        return list(self.data)


KnownField = Union[
    PaymentHash,
    PaymentSecret,
    Description,
    DescriptionHash,
    Expiry,
    MinFinalCltvExpiry,
    Features,
    PayeeNodeKey,
]
TaggedField = Union[KnownField, UnknownField]

KNOWN_FIELDS: Tuple[Type[KnownField], ...] = (
    PaymentHash,
    PaymentSecret,
    Description,
    DescriptionHash,
    Expiry,
    MinFinalCltvExpiry,
    Features,
    PayeeNodeKey,
)
_FIELD_BY_TAG = {cls.tag: cls for cls in KNOWN_FIELDS}

# A writer must not repeat these
SINGLE_INSTANCE_TAGS = frozenset("psdhnx")


def encode_field(field: TaggedField) -> List[U5]:
    """Serialize one field as [tag, length high, length low, *value]."""
    if isinstance(field, UnknownField):
        raise UnknownTagOnEncode("unknown tag {!r}".format(field.tag))
    data = field.to_u5()
    length = len(data)
    if length > MAX_FIELD_LENGTH:
        raise InvalidFieldValue("'{}' field is {} groups, limit is {}".format(field.tag, length, MAX_FIELD_LENGTH))
    return [U5(CHARSET_INVERSE[field.tag]), U5(length >> 5), U5(length & 31)] + data


def encode_fields(fields: Iterable[TaggedField]) -> List[U5]:
    ret: List[U5] = []
    for field in fields:
        ret.extend(encode_field(field))
    return ret


def decode_field(tag: str, data: Sequence[int]) -> Optional[TaggedField]:
    """
    Interpret the value of one field.

    Returns None for a known tag whose value is malformed; the caller drops
    it, as a reader must skip such fields.
    """
    cls = _FIELD_BY_TAG.get(tag)
    if cls is None:
        return UnknownField(tag, tuple(to_u5(data)))
    return cls.from_u5(data)


def decode_fields(data: Sequence[int]) -> List[TaggedField]:
    """
    Walk the tagged fields of a payload that has had its timestamp and
    signature removed.

    A trailing header or value cut short ends the walk instead of failing.
    """
    fields: List[TaggedField] = []
    pos = 0
    while pos < len(data):
        if pos + HEADER_LENGTH > len(data):
            log.debug("ignoring %d trailing symbols", len(data) - pos)
            break
        tag = CHARSET[data[pos]]
        length = data[pos + 1] * 32 + data[pos + 2]
        pos += HEADER_LENGTH
        if pos + length > len(data):
            log.debug("'%s' field claims %d groups, only %d left", tag, length, len(data) - pos)
            break
        value = data[pos:pos + length]
        pos += length

        field = decode_field(tag, value)
        if field is None:
            log.debug("dropping malformed '%s' field of %d groups", tag, length)
            continue
        fields.append(field)
    return fields
