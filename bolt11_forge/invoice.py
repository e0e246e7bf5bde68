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
In-memory invoice.

An Invoice is either built up with the `with_*` / `add_*` methods (each
returns the invoice, so calls chain) and handed to `encode`, or produced
by `decode`.

Optional attributes live in `tags`, in wire order. Repeats are allowed
here; `encode` rejects them. The accessors return the last occurrence.
"""

import re
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import FrozenSet, Iterable, List, Optional, Tuple, Type, TypeVar

from . import amount as amounts
from .errors import InvalidAmount, InvalidFieldValue, UnknownPrefix
from .fields import (
    Description,
    DescriptionHash,
    Expiry,
    Features,
    MinFinalCltvExpiry,
    PayeeNodeKey,
    PaymentSecret,
    TaggedField,
    UnknownField,
)


DEFAULT_CURRENCY = "bc"
# BOLT-11 defaults when the field is absent
DEFAULT_EXPIRY = 3600
DEFAULT_MIN_FINAL_CLTV_EXPIRY = 18

TIMESTAMP_BITS = 35
TIMESTAMP_LENGTH = TIMESTAMP_BITS // 5

_HRP_RE = re.compile(r"([a-z]+)(.*)")

F = TypeVar("F")


def _now() -> int:
    return int(time.time())


@dataclass
class Invoice:
    currency: str = DEFAULT_CURRENCY
    amount: Optional[Decimal] = None
    timestamp: int = field(default_factory=_now)
    payment_hash: bytes = b""
    tags: List[TaggedField] = field(default_factory=list)
    unknown_fields: List[UnknownField] = field(default_factory=list)
    signature: Optional[bytes] = None
    recovery_id: Optional[int] = None
    pubkey: Optional[bytes] = None

    # -- builder ------------------------------------------------------------

    def with_currency(self, currency: str) -> "Invoice":
        if not re.fullmatch(r"[a-z]+", currency):
            raise InvalidFieldValue("currency must be lowercase letters, got {!r}".format(currency))
        self.currency = currency
        return self

    def with_amount(self, amount: amounts.AmountLike) -> "Invoice":
        """Set the amount in bitcoin."""
        value = amounts.to_decimal(amount)
        amounts.check_amount(value)
        self.amount = value
        return self

    def with_amount_msat(self, amount_msat: int) -> "Invoice":
        self.amount = amounts.msat_to_btc(amount_msat)
        return self

    def with_timestamp(self, timestamp: int) -> "Invoice":
        self.timestamp = int(timestamp)
        return self

    def with_payment_hash(self, payment_hash: bytes) -> "Invoice":
        if len(payment_hash) != 32:
            raise InvalidFieldValue("payment hash must be 32 bytes, got {}".format(len(payment_hash)))
        self.payment_hash = bytes(payment_hash)
        return self

    def add_field(self, tagged: TaggedField) -> "Invoice":
        self.tags.append(tagged)
        return self

    def with_payment_secret(self, secret: bytes) -> "Invoice":
        return self.add_field(PaymentSecret(bytes(secret)))

    def add_description(self, description: str) -> "Invoice":
        return self.add_field(Description(description))

    def add_description_hash(self, description_hash: bytes) -> "Invoice":
        return self.add_field(DescriptionHash(bytes(description_hash)))

    def add_expiry(self, seconds: int) -> "Invoice":
        return self.add_field(Expiry(seconds))

    def add_min_final_cltv_expiry(self, blocks: int) -> "Invoice":
        return self.add_field(MinFinalCltvExpiry(blocks))

    def with_features(self, bits: Iterable[int]) -> "Invoice":
        return self.add_field(Features(frozenset(bits)))

    def add_payee_node_key(self, pubkey: bytes) -> "Invoice":
        return self.add_field(PayeeNodeKey(bytes(pubkey)))

    # -- accessors ----------------------------------------------------------

    def _last(self, kind: Type[F]) -> Optional[F]:
        for tagged in reversed(self.tags):
            if isinstance(tagged, kind):
                return tagged
        return None

    @property
    def description(self) -> Optional[str]:
        found = self._last(Description)
        return found.text if found else None

    @property
    def description_hash(self) -> Optional[bytes]:
        found = self._last(DescriptionHash)
        return found.value if found else None

    @property
    def expiry(self) -> Optional[int]:
        found = self._last(Expiry)
        return found.seconds if found else None

    @property
    def min_final_cltv_expiry(self) -> Optional[int]:
        found = self._last(MinFinalCltvExpiry)
        return found.blocks if found else None

    @property
    def features(self) -> FrozenSet[int]:
        found = self._last(Features)
        return found.bits if found else frozenset()

    @property
    def payment_secret(self) -> Optional[bytes]:
        found = self._last(PaymentSecret)
        return found.value if found else None

    @property
    def payee_node_key(self) -> Optional[bytes]:
        found = self._last(PayeeNodeKey)
        return found.pubkey if found else None

    @property
    def amount_msat(self) -> Optional[int]:
        if self.amount is None:
            return None
        return amounts.btc_to_msat(self.amount)

    # -- prefix -------------------------------------------------------------

    @property
    def hrp(self) -> str:
        """The human-readable part: "ln" + currency + shortened amount."""
        shortened = amounts.shorten_amount(self.amount) if self.amount is not None else ""
        return "ln" + self.currency + shortened

    def __str__(self) -> str:
        return "Invoice[{}, amount={}{} tags=[{}]]".format(
            self.pubkey.hex() if self.pubkey else "unsigned",
            self.amount,
            self.currency,
            ", ".join("{}={}".format(t.tag, t) for t in self.tags),
        )


def parse_hrp(hrp: str) -> Tuple[str, Optional[Decimal]]:
    """Split an invoice HRP into currency and amount (None when absent)."""
    if not hrp.startswith("ln"):
        raise UnknownPrefix("{!r} does not start with 'ln'".format(hrp))
    match = _HRP_RE.fullmatch(hrp[2:])
    if not match:
        raise UnknownPrefix("no currency in {!r}".format(hrp))
    currency, amount_str = match.groups()
    if not amount_str:
        return currency, None
    value = amounts.unshorten_amount(amount_str)
    if value <= 0:
        raise InvalidAmount("amount must be positive, got {!r}".format(amount_str))
    return currency, value


def timestamp_to_u5(timestamp: int) -> List[int]:
    """The low 35 bits of `timestamp` as 7 groups, most significant first."""
    timestamp &= (1 << TIMESTAMP_BITS) - 1
    return [(timestamp >> 5 * (TIMESTAMP_LENGTH - 1 - i)) & 31 for i in range(TIMESTAMP_LENGTH)]


def timestamp_from_u5(data: Iterable[int]) -> int:
    timestamp = 0
    for group in data:
        timestamp = (timestamp << 5) | group
    return timestamp & ((1 << TIMESTAMP_BITS) - 1)
