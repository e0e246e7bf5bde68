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
Exception hierarchy for invoice encoding and decoding.

Every error is a ValueError, so callers that only care about "bad input"
can catch that. The category bases let callers tell a malformed string
apart from a malformed invoice or a bad signature.
"""


class Bolt11Error(ValueError):
    """Base class for every error raised by this package."""


# ---------------------------------------------------------------------------
# Bech32 string layer
# ---------------------------------------------------------------------------

class Bech32Error(Bolt11Error):
    pass


class InvalidCharacter(Bech32Error):
    pass


class MixedCase(Bech32Error):
    pass


class NoSeparator(Bech32Error):
    pass


class InvalidSeparatorPosition(Bech32Error):
    pass


class InvalidCharacterInData(Bech32Error):
    pass


class InvalidChecksum(Bech32Error):
    pass


class InvalidLength(Bech32Error):
    pass


# ---------------------------------------------------------------------------
# Bit packing
# ---------------------------------------------------------------------------

class ConversionError(Bolt11Error):
    pass


class InvalidInputValue(ConversionError):
    pass


class InvalidPadding(ConversionError):
    pass


# ---------------------------------------------------------------------------
# Invoice semantics
# ---------------------------------------------------------------------------

class InvoiceError(Bolt11Error):
    pass


class TooManyDecimalPlaces(InvoiceError):
    pass


class InvalidAmount(InvoiceError):
    pass


class DuplicateTag(InvoiceError):
    pass


class MissingDescription(InvoiceError):
    pass


class ConflictingDescriptionFields(InvoiceError):
    pass


class UnknownTagOnEncode(InvoiceError):
    pass


class UnknownPrefix(InvoiceError):
    pass


class InvalidFieldValue(InvoiceError):
    pass


class MissingTimestamp(InvoiceError):
    pass


class MissingPaymentHash(InvoiceError):
    pass


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------

class SignatureError(Bolt11Error):
    pass


class InvalidPrivateKey(SignatureError):
    pass


class InvalidSignatureLength(SignatureError):
    pass


class SignatureRecoveryFailed(SignatureError):
    pass


class InvalidSignature(SignatureError):
    """The signature does not verify against the payee key in the `n` field."""
