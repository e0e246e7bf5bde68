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
BOLT-11 invoice encoding and decoding.

Layout of the bech32 data part:

    timestamp (7 groups) | tagged fields ... | signature (104 groups)

The signature covers the HRP as ASCII followed by the timestamp and
tagged fields, zero-padded to a whole number of bytes.
"""

import logging
from typing import List, Optional, Sequence, Set

from .bech32 import bech32_decode, bech32_encode
from .bits import convertbits
from .errors import (
    ConflictingDescriptionFields,
    DuplicateTag,
    InvalidFieldValue,
    InvalidPrivateKey,
    InvalidSignature,
    InvalidSignatureLength,
    MissingDescription,
    MissingPaymentHash,
    MissingTimestamp,
)
from .fields import (
    SINGLE_INSTANCE_TAGS,
    Features,
    PaymentHash,
    UnknownField,
    decode_fields,
    encode_field,
)
from .invoice import TIMESTAMP_LENGTH, Invoice, parse_hrp, timestamp_from_u5, timestamp_to_u5
from .signing import COMPACT_SIGNATURE_LENGTH, SIGNATURE_LENGTH, KeyBytes, public_key, recover, sign, verify


log = logging.getLogger(__name__)

SIGNATURE_U5_LENGTH = (SIGNATURE_LENGTH * 8 + 4) // 5


def signing_message(hrp: str, data: Sequence[int]) -> bytes:
    """The bytes a node signs: HRP as ASCII, then the data zero-padded to bytes."""
    return hrp.encode("ascii") + bytes(convertbits(data, 5, 8, True))


def encode(invoice: Invoice, private_key: KeyBytes) -> str:
    """
    Serialize and sign `invoice`.

    Args:
        invoice:     The invoice to encode. It is only read; decode the
                     result to see the signature and signer.
        private_key: 32-byte secp256k1 secret key of the payee node.

    Returns:
        The bech32 invoice string.
    """
    hrp = invoice.hrp
    if len(invoice.payment_hash) != 32:
        raise InvalidFieldValue("payment hash must be 32 bytes, got {}".format(len(invoice.payment_hash)))

    data: List[int] = timestamp_to_u5(invoice.timestamp)
    data += encode_field(PaymentHash(invoice.payment_hash))

    tags_set: Set[str] = {PaymentHash.tag}
    for tagged in invoice.tags:
        # BOLT #11:
        #
        # A writer MUST NOT include more than one `d`, `h`, `n` or `x` fields,
        if tagged.tag in SINGLE_INSTANCE_TAGS and tagged.tag in tags_set:
            raise DuplicateTag("duplicate '{}' tag".format(tagged.tag))
        tags_set.add(tagged.tag)
        if isinstance(tagged, Features) and not tagged.bits:
            continue
        data += encode_field(tagged)

    # BOLT #11:
    #
    # A writer MUST include either a `d` or `h` field, and MUST NOT include
    # both.
    if "d" in tags_set and "h" in tags_set:
        raise ConflictingDescriptionFields("cannot include both 'd' and 'h'")
    if "d" not in tags_set and "h" not in tags_set:
        raise MissingDescription("must include either 'd' or 'h'")

    pubkey = public_key(private_key)
    payee = invoice.payee_node_key
    if payee is not None and payee != pubkey:
        raise InvalidPrivateKey("private key does not belong to payee node key {}".format(payee.hex()))

    signature = sign(signing_message(hrp, data), private_key)
    data += convertbits(signature, 8, 5, True)
    return bech32_encode(hrp, data)


def decode(invoice_str: str, max_length: Optional[int] = None) -> Invoice:
    """
    Parse and validate an invoice string.

    The signer's key is taken from the `n` field when present (and the
    signature checked against it), otherwise recovered from the signature.

    Fields are decoded leniently: malformed known fields are skipped,
    unknown ones are kept in `unknown_fields`, a truncated trailer ends the
    walk, and repeated fields are all kept (accessors see the last one).
    """
    hrp, data = bech32_decode(invoice_str, max_length=max_length)
    currency, amount = parse_hrp(hrp)

    if len(data) < SIGNATURE_U5_LENGTH:
        raise InvalidSignatureLength("too short to contain signature")
    payload = data[:-SIGNATURE_U5_LENGTH]
    signature = bytes(convertbits(data[-SIGNATURE_U5_LENGTH:], 5, 8, False))
    if len(payload) < TIMESTAMP_LENGTH:
        raise MissingTimestamp("data too short for timestamp")

    invoice = Invoice(currency=currency, amount=amount, timestamp=timestamp_from_u5(payload[:TIMESTAMP_LENGTH]))
    payment_hash = None
    for tagged in decode_fields(payload[TIMESTAMP_LENGTH:]):
        if isinstance(tagged, PaymentHash):
            payment_hash = tagged.value
        elif isinstance(tagged, UnknownField):
            invoice.unknown_fields.append(tagged)
        else:
            invoice.tags.append(tagged)
    if payment_hash is None:
        raise MissingPaymentHash("no valid 'p' field")
    invoice.payment_hash = payment_hash

    message = signing_message(hrp, payload)
    payee = invoice.payee_node_key
    if payee is not None:
        # BOLT #11:
        #
        # A reader MUST use the `n` field to validate the signature instead of
        # performing signature recovery if a valid `n` field is provided.
        if not verify(message, signature, payee):
            raise InvalidSignature("signature does not match payee node key {}".format(payee.hex()))
        invoice.pubkey = payee
    else:
        invoice.pubkey = recover(message, signature)

    invoice.signature = signature[:COMPACT_SIGNATURE_LENGTH]
    invoice.recovery_id = signature[COMPACT_SIGNATURE_LENGTH]
    log.debug("decoded %s", invoice)
    return invoice
