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
Encoder and decoder for Lightning Network (BOLT-11) payment invoices.

    >>> invoice = (
    ...     Invoice()
    ...     .with_amount("0.025")
    ...     .with_payment_hash(payment_hash)
    ...     .add_description("coffee beans")
    ... )
    >>> text = encode(invoice, private_key)   # "lnbc25m1..."
    >>> decode(text).description
    'coffee beans'
"""

__version__ = "0.1.0"

from .bolt11 import decode, encode
from .errors import Bolt11Error
from .invoice import Invoice

__all__ = ["Bolt11Error", "Invoice", "decode", "encode", "__version__"]
