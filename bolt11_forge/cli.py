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

"""Command line front end: `bolt11-forge encode` and `bolt11-forge decode`."""

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Tuple

import click
import colorlog

from . import __version__
from .bech32 import CHARSET
from .bolt11 import decode, encode
from .errors import Bolt11Error
from .fields import UnknownField
from .invoice import DEFAULT_EXPIRY, DEFAULT_MIN_FINAL_CLTV_EXPIRY, Invoice


LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


def initialize_logging(log_level: str) -> None:
    handler = colorlog.StreamHandler()
    handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(asctime)s %(name)-22s: %(log_color)s%(levelname)-8s%(reset)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
            reset=True,
        )
    )
    root = logging.getLogger("bolt11_forge")
    root.handlers = [handler]
    root.setLevel(log_level.upper())


class HexBytesParamType(click.ParamType):
    """Hex string argument, converted to bytes of an optional fixed length."""

    name = "hex"

    def __init__(self, length: Optional[int] = None) -> None:
        self.length = length

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> bytes:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        try:
            data = bytes.fromhex(value)
        except ValueError:
            self.fail("{!r} is not a hex string".format(value), param, ctx)
        if self.length is not None and len(data) != self.length:
            self.fail("expected {} bytes, got {}".format(self.length, len(data)), param, ctx)
        return data


def validate_amount(ctx: click.Context, param: click.Parameter, value: str) -> Optional[Decimal]:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise click.BadParameter("amount must be a decimal number of bitcoin")
    if amount.is_signed():
        raise click.BadParameter("amount can not be negative")
    return amount if amount else None


@click.group(help="Lightning Network invoice encoder/decoder")
@click.version_option(__version__)
@click.option(
    "--log-level",
    envvar="BOLT11_LOG_LEVEL",
    default="WARNING",
    show_default=True,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
)
def cli(log_level: str) -> None:
    initialize_logging(log_level)


@cli.command("encode", help="Create and sign an invoice. AMOUNT is in bitcoin, 0 for none.")
@click.option("--currency", default="bc", show_default=True, help="Network prefix, e.g. bc, tb, bcrt")
@click.option("--description", default=None, help="What is being paid for")
@click.option("--description-hash", type=HexBytesParamType(32), default=None, help="SHA256 of a long description")
@click.option("--expires", type=click.IntRange(min=0), default=None, help="Seconds until the invoice expires")
@click.option("--min-final-cltv", type=click.IntRange(min=0), default=None, help="Blocks for the final hop")
@click.option("--payment-secret", type=HexBytesParamType(32), default=None)
@click.option("--feature", "features", type=click.IntRange(min=0), multiple=True, help="Feature bit, repeatable")
@click.option("--timestamp", type=click.IntRange(min=0), default=None, help="Unix time, defaults to now")
@click.argument("amount", callback=validate_amount)
@click.argument("paymenthash", type=HexBytesParamType(32))
@click.argument("privkey", envvar="BOLT11_PRIVKEY", type=HexBytesParamType(32))
def encode_cmd(
    currency: str,
    description: Optional[str],
    description_hash: Optional[bytes],
    expires: Optional[int],
    min_final_cltv: Optional[int],
    payment_secret: Optional[bytes],
    features: Tuple[int, ...],
    timestamp: Optional[int],
    amount: Optional[Decimal],
    paymenthash: bytes,
    privkey: bytes,
) -> None:
    key = bytearray(privkey)
    try:
        addr = Invoice().with_currency(currency).with_payment_hash(paymenthash)
        if amount is not None:
            addr.with_amount(amount)
        if timestamp is not None:
            addr.with_timestamp(timestamp)
        if payment_secret is not None:
            addr.with_payment_secret(payment_secret)
        if description is not None:
            addr.add_description(description)
        if description_hash is not None:
            addr.add_description_hash(description_hash)
        if expires is not None:
            addr.add_expiry(expires)
        if min_final_cltv is not None:
            addr.add_min_final_cltv_expiry(min_final_cltv)
        if features:
            addr.with_features(features)
        click.echo(encode(addr, key))
    except Bolt11Error as e:
        raise click.ClickException("{}: {}".format(type(e).__name__, e))
    finally:
        key[:] = bytes(len(key))


@cli.command("decode", help="Validate an invoice and print its contents")
@click.argument("invoice")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Also print the signature")
def decode_cmd(invoice: str, verbose: bool) -> None:
    try:
        addr = decode(invoice)
    except Bolt11Error as e:
        raise click.ClickException("{}: {}".format(type(e).__name__, e))
    print_invoice(addr, verbose)


def print_invoice(addr: Invoice, verbose: bool = False) -> None:
    if addr.pubkey is not None:
        click.echo("Signed with public key: {}".format(addr.pubkey.hex()))
    click.echo("Currency: {}".format(addr.currency))
    click.echo("Payment hash: {}".format(addr.payment_hash.hex()))
    if addr.amount is not None:
        click.echo("Amount: {} ({} msat)".format(addr.amount, addr.amount_msat))
    when = datetime.fromtimestamp(addr.timestamp, tz=timezone.utc)
    click.echo("Timestamp: {} ({})".format(addr.timestamp, when.isoformat()))

    if addr.description is not None:
        click.echo("Description: {}".format(addr.description))
    if addr.description_hash is not None:
        click.echo("Description hash: {}".format(addr.description_hash.hex()))
    click.echo("Expiry (seconds): {}".format(addr.expiry if addr.expiry is not None else DEFAULT_EXPIRY))
    cltv = addr.min_final_cltv_expiry
    click.echo("Min final CLTV expiry: {}".format(cltv if cltv is not None else DEFAULT_MIN_FINAL_CLTV_EXPIRY))
    if addr.payment_secret is not None:
        click.echo("Payment secret: {}".format(addr.payment_secret.hex()))
    if addr.features:
        click.echo("Features: {}".format(", ".join(str(bit) for bit in sorted(addr.features))))
    for unknown in addr.unknown_fields:
        click.echo("UNKNOWN TAG {}: {}".format(unknown.tag, describe_unknown(unknown)))

    if verbose and addr.signature is not None:
        click.echo("Signature: {}".format(addr.signature.hex()))
        click.echo("Recovery id: {}".format(addr.recovery_id))


def describe_unknown(unknown: UnknownField) -> str:
    return "".join(CHARSET[symbol] for symbol in unknown.data) or "(empty)"


def main() -> None:
    cli()  # pylint: disable=no-value-for-parameter
