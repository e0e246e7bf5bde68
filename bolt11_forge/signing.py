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
Recoverable secp256k1 signatures over invoice data.

A signature is 65 bytes: the 64-byte compact `r || s` followed by one
recovery id byte. The message is hashed once with SHA-256 before signing.
"""

import hashlib
import logging
from typing import List, Union

from ecdsa import SECP256k1, BadSignatureError, MalformedPointError, SigningKey, VerifyingKey
from ecdsa.ecdsa import InvalidPointError
from ecdsa.numbertheory import SquareRootError
from ecdsa.util import sigdecode_string, sigencode_string_canonize

from .errors import InvalidPrivateKey, InvalidSignatureLength, SignatureRecoveryFailed


log = logging.getLogger(__name__)

PRIVATE_KEY_LENGTH = 32
COMPACT_SIGNATURE_LENGTH = 64
SIGNATURE_LENGTH = COMPACT_SIGNATURE_LENGTH + 1

KeyBytes = Union[bytes, bytearray]


def message_digest(message: bytes) -> bytes:
    return hashlib.sha256(message).digest()


def _signing_key(private_key: KeyBytes) -> SigningKey:
    if len(private_key) != PRIVATE_KEY_LENGTH:
        raise InvalidPrivateKey("private key must be {} bytes, got {}".format(PRIVATE_KEY_LENGTH, len(private_key)))
    try:
        return SigningKey.from_string(bytes(private_key), curve=SECP256k1, hashfunc=hashlib.sha256)
    except MalformedPointError as exc:
        raise InvalidPrivateKey("private key is not a valid secp256k1 scalar") from exc


def public_key(private_key: KeyBytes) -> bytes:
    """Return the 33-byte compressed public key for `private_key`."""
    return _signing_key(private_key).get_verifying_key().to_string("compressed")


def _recover_candidates(compact: bytes, digest: bytes) -> List[VerifyingKey]:
    order = SECP256k1.order
    r = int.from_bytes(compact[:32], "big")
    s = int.from_bytes(compact[32:], "big")
    if not (0 < r < order and 0 < s < order):
        raise SignatureRecoveryFailed("signature values out of range")
    try:
        return VerifyingKey.from_public_key_recovery_with_digest(
            compact, digest, SECP256k1, hashfunc=hashlib.sha256, sigdecode=sigdecode_string
        )
    except (SquareRootError, MalformedPointError, InvalidPointError) as exc:
        raise SignatureRecoveryFailed("no curve point for signature") from exc


def sign(message: bytes, private_key: KeyBytes) -> bytes:
    """
    Sign SHA-256(message) and return the 65-byte recoverable signature.

    The nonce is derived deterministically (RFC 6979) and `s` is normalised
    to the lower half of the curve order.
    """
    key = _signing_key(private_key)
    digest = message_digest(message)
    compact = key.sign_digest_deterministic(digest, hashfunc=hashlib.sha256, sigencode=sigencode_string_canonize)
    own = key.get_verifying_key().to_string("compressed")
    for recovery_id, candidate in enumerate(_recover_candidates(compact, digest)):
        if candidate.to_string("compressed") == own:
            return compact + bytes([recovery_id])
    raise SignatureRecoveryFailed("signature does not recover to the signing key")


def recover(message: bytes, signature: bytes) -> bytes:
    """
    Recover the compressed public key that produced `signature` over `message`.

    Raises:
        InvalidSignatureLength:  `signature` is not 65 bytes.
        SignatureRecoveryFailed: the signature does not resolve to a key.
    """
    if len(signature) != SIGNATURE_LENGTH:
        raise InvalidSignatureLength("signature must be {} bytes, got {}".format(SIGNATURE_LENGTH, len(signature)))
    recovery_id = signature[COMPACT_SIGNATURE_LENGTH]
    candidates = _recover_candidates(bytes(signature[:COMPACT_SIGNATURE_LENGTH]), message_digest(message))
    # ids 2 and 3 mean r overflowed the group order, which never happens in practice
    if recovery_id >= len(candidates):
        raise SignatureRecoveryFailed("unsupported recovery id {}".format(recovery_id))
    pubkey = candidates[recovery_id].to_string("compressed")
    log.debug("recovered public key %s", pubkey.hex())
    return pubkey


def verify(message: bytes, signature: bytes, pubkey: bytes) -> bool:
    """Check the compact part of `signature` against a known public key."""
    try:
        key = VerifyingKey.from_string(bytes(pubkey), curve=SECP256k1, hashfunc=hashlib.sha256)
    except MalformedPointError:
        return False
    try:
        return key.verify_digest(
            bytes(signature[:COMPACT_SIGNATURE_LENGTH]), message_digest(message), sigdecode=sigdecode_string
        )
    except BadSignatureError:
        return False
