from decimal import Decimal
from hashlib import sha256

import pytest

from bolt11_forge import Invoice, decode, encode
from bolt11_forge.bech32 import bech32_decode, bech32_encode
from bolt11_forge.bits import convertbits
from bolt11_forge.bolt11 import SIGNATURE_U5_LENGTH, signing_message
from bolt11_forge.errors import (
    ConflictingDescriptionFields,
    DuplicateTag,
    InvalidAmount,
    InvalidChecksum,
    InvalidFieldValue,
    InvalidPrivateKey,
    InvalidSignature,
    InvalidSignatureLength,
    MissingDescription,
    MissingPaymentHash,
    MissingTimestamp,
    MixedCase,
    TooManyDecimalPlaces,
    UnknownPrefix,
)
from bolt11_forge.fields import (
    Description,
    Expiry,
    Features,
    PayeeNodeKey,
    PaymentHash,
    UnknownField,
    encode_fields,
)
from bolt11_forge.invoice import timestamp_to_u5
from bolt11_forge.signing import public_key, sign, verify

RHASH = bytes.fromhex("0001020304050607080900010203040506070809000102030405060708090102")
PAYMENT_SECRET = b"\x11" * 32
PRIVKEY = bytes.fromhex("e126f68f7eafcc8b74f54d269fe206be715000f94dac067d1c04a8ca3b2db734")
PUBKEY = bytes.fromhex("03e7156ae33b0a208d0744199163177e909e80176e55d97a2f221ede0f934dd9ad")
TIMESTAMP = 1615922274

LONG_DESCRIPTION = (
    "One piece of chocolate cake, one icecream cone, one"
    " pickle, one slice of swiss cheese, one slice of salami,"
    " one lollypop, one piece of cherry pie, one sausage, one"
    " cupcake, and one slice of watermelon"
)


def build_signed(hrp, fields, timestamp=TIMESTAMP, key=PRIVKEY):
    """Assemble an invoice string by hand, bypassing the encoder's checks."""
    data = timestamp_to_u5(timestamp) + encode_fields(fields)
    signature = sign(signing_message(hrp, data), key)
    return bech32_encode(hrp, data + convertbits(signature, 8, 5, True))


# ----------------------------------------------------------------------------
# Known invoices, signed with PRIVKEY


VECTORS = [
    (
        lambda: Invoice(timestamp=TIMESTAMP).with_payment_hash(RHASH).add_description(""),
        "lnbc1ps9zprzpp5qqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqypqdqqd9n3kwjjwglnfne5p4rvkze998m3xcxrc8kunl5khkchlaqhwhlyztuuwkrglv47mqg96mcqjjx70hh9luaj4te0u4ww6aclxwve3fqpkmdxlj",
    ),
    (
        lambda: Invoice(timestamp=TIMESTAMP)
        .with_amount(Decimal("0.001"))
        .with_payment_hash(RHASH)
        .add_description("1 cup coffee")
        .add_expiry(60),
        "lnbc1m1ps9zprzpp5qqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqypqdq5xysxxatsyp3k7enxv4jsxqzpu9rflz25dx0qw6kdg05u0c5hdc30yq6ga6ew4pz86n244va45nchns9zrs3wjxznsqnt37hz7pswvc56wvuhxcjyd6k3lqf4ujynyxuspmvr078",
    ),
    (
        lambda: Invoice(timestamp=TIMESTAMP)
        .with_amount(Decimal("0.001"))
        .with_payment_hash(RHASH)
        .with_payment_secret(PAYMENT_SECRET)
        .add_description("1 cup coffee")
        .add_expiry(60)
        .with_features({9, 15, 17}),
        "lnbc1m1ps9zprzpp5qqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqypqsp5zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zygsdq5xysxxatsyp3k7enxv4jsxqzpu9qy9qsqw8l2pulslacwjt86vle3sgfdmcct5v34gtcpfnujsf6ufqa7v7jzdpddnwgte82wkscdlwfwucrgn8z36rv9hzk5mukltteh0yqephqpk5vegu",
    ),
    (
        lambda: Invoice(timestamp=TIMESTAMP)
        .with_amount(1)
        .with_payment_hash(RHASH)
        .add_description_hash(sha256(LONG_DESCRIPTION.encode()).digest()),
        "lnbc11ps9zprzpp5qqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqypqhp58yjmdan79s6qqdhdzgynm4zwqd5d7xmw5fk98klysy043l2ahrqs2qjafckq94q3js6lvqz2kmenn9ysjejyj8fm4hlx0xtqhaxfzlxjappkgp0hmm40dnuan4v3jy83lqjup2n0fdzgysg049y9l9uc98qq07kfd3",
    ),
    (
        lambda: Invoice(timestamp=TIMESTAMP)
        .with_amount(24)
        .with_payment_hash(RHASH)
        .with_payment_secret(PAYMENT_SECRET)
        .add_payee_node_key(PUBKEY)
        .add_description_hash(sha256(LONG_DESCRIPTION.encode()).digest())
        .with_features({9, 15, 17}),
        "lnbc241ps9zprzpp5qqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqypqsp5zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zygsnp4q0n326hr8v9zprg8gsvezcch06gfaqqhde2aj730yg0durunfhv66hp58yjmdan79s6qqdhdzgynm4zwqd5d7xmw5fk98klysy043l2ahrqs9qy9qsq2y235rxw7v0gkn2t9ehc742tm3p22q2yjjykq4d85ze6g62yk60navxqz0ga96sqrszju8nlfajthem4gngxvyz4hwy39j4nqm8kv0qq9znxs7",
    ),
]


@pytest.mark.parametrize("make_invoice, expected", VECTORS)
def test_encode_known_invoices(make_invoice, expected):
    text = encode(make_invoice(), PRIVKEY)
    assert text == expected
    assert decode(text).pubkey == PUBKEY


@pytest.mark.parametrize("make_invoice, expected", VECTORS)
def test_decode_known_invoices(make_invoice, expected):
    original = make_invoice()
    decoded = decode(expected)
    assert decoded.pubkey == PUBKEY
    assert decoded.currency == original.currency
    assert decoded.amount == original.amount
    assert decoded.timestamp == TIMESTAMP
    assert decoded.payment_hash == RHASH
    assert decoded.tags == original.tags
    assert decoded.unknown_fields == []


def test_coffee_beans():
    invoice = (
        Invoice(timestamp=1496314658)
        .with_amount_msat(2_500_000_000)
        .with_payment_hash(RHASH)
        .with_payment_secret(PAYMENT_SECRET)
        .add_description("coffee beans")
        .with_features({8, 14})
    )
    text = encode(invoice, PRIVKEY)
    assert text.startswith("lnbc25m1pvjluez")

    decoded = decode(text)
    assert decoded.amount == Decimal("0.025")
    assert decoded.amount_msat == 2_500_000_000
    assert decoded.description == "coffee beans"
    assert decoded.payment_secret == PAYMENT_SECRET
    assert decoded.features == frozenset({8, 14})
    assert decoded.pubkey == PUBKEY
    assert len(decoded.signature) == 64
    assert decoded.recovery_id in (0, 1)
    hrp, data = bech32_decode(text)
    assert verify(signing_message(hrp, data[:-SIGNATURE_U5_LENGTH]), decoded.signature, PUBKEY)


def test_encode_leaves_invoice_unsigned():
    invoice = Invoice().with_payment_hash(RHASH).add_description("x")
    encode(invoice, PRIVKEY)
    assert (invoice.signature, invoice.recovery_id, invoice.pubkey) == (None, None, None)


def test_round_trip_all_fields():
    description_hash = sha256(LONG_DESCRIPTION.encode()).digest()
    invoice = (
        Invoice(currency="tb", timestamp=TIMESTAMP)
        .with_amount("0.00000001")
        .with_payment_hash(RHASH)
        .with_payment_secret(b"\x01" * 32)
        .add_description_hash(description_hash)
        .add_expiry(86400)
        .add_min_final_cltv_expiry(144)
        .with_features({14, 16, 99})
    )
    text = encode(invoice, PRIVKEY)
    assert text.startswith("lntb10n1")

    decoded = decode(text)
    assert decoded.currency == "tb"
    assert decoded.amount_msat == 1000
    assert decoded.description is None
    assert decoded.description_hash == description_hash
    assert decoded.expiry == 86400
    assert decoded.min_final_cltv_expiry == 144
    assert decoded.features == frozenset({14, 16, 99})
    assert decoded.payment_secret == b"\x01" * 32
    assert decoded.pubkey == PUBKEY


@pytest.mark.parametrize("cltv", [1, 15, 16, 31, 32, 33, 150, 511, 512, 513, 1023, 1024, 1025])
def test_min_final_cltv_expiry_round_trip(cltv):
    invoice = (
        Invoice()
        .with_amount("0.001")
        .with_payment_hash(RHASH)
        .add_description("1 cup coffee")
        .add_min_final_cltv_expiry(cltv)
    )
    assert decode(encode(invoice, PRIVKEY)).min_final_cltv_expiry == cltv


def test_no_amount_and_defaults():
    decoded = decode(encode(Invoice().with_payment_hash(RHASH).add_description("tip jar"), PRIVKEY))
    assert decoded.amount is None
    assert decoded.amount_msat is None
    assert decoded.expiry is None
    assert decoded.min_final_cltv_expiry is None
    assert decoded.features == frozenset()


def test_empty_features_are_not_written():
    invoice = Invoice().with_payment_hash(RHASH).add_description("x").with_features([])
    decoded = decode(encode(invoice, PRIVKEY))
    assert not any(isinstance(tagged, Features) for tagged in decoded.tags)


def test_decode_upper_case():
    text = VECTORS[1][1]
    assert decode(text.upper()).description == "1 cup coffee"


def test_decode_simnet_with_cltv():
    decoded = decode(
        "lnsb500u1pdsgyf3pp5nmrqejdsdgs4n9ukgxcp2kcq265yhrxd4k5dyue58rxtp5y83s3qsp5qyqszqgpqyqszqgpqyqszqgpqyqszqgpqyqszqgpqyqszqgpqyqsdqqcqzys9qypqsqp2h6a5xeytuc3fad2ed4gxvhd593lwjdna3dxsyeem0qkzjx6guk44jend0xq4zzvp6f3fy07wnmxezazzsxgmvqee8shxjuqu2eu0qpnvc95x"
    )
    assert decoded.currency == "sb"
    assert decoded.amount == Decimal("0.0005")
    assert decoded.min_final_cltv_expiry == 144
    assert decoded.description == ""
    assert len(decoded.pubkey) == 33


def test_decode_large_feature_bit():
    decoded = decode(
        "lnbc25m1pvjluezpp5qqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqqqsyqcyq5rqwzqfqypqsp5zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zygsdq5vdhkven9v5sxyetpdees9q5sqqqqqqqqqqqqqqqpqsqvvh7ut50r00p3pg34ea68k7zfw64f8yx9jcdk35lh5ft8qdr8g4r0xzsdcrmcy9hex8un8d8yraewvhqc9l0sh8l0e0yvmtxde2z0hgpzsje5l"
    )
    assert decoded.features == frozenset({9, 15, 99})
    assert decoded.payment_secret == PAYMENT_SECRET
    assert decoded.description == "coffee beans"
    assert decoded.amount_msat == 2_500_000_000


# ----------------------------------------------------------------------------
# Signer identity


def test_payee_node_key_is_used_instead_of_recovery():
    invoice = Invoice(timestamp=TIMESTAMP).with_payment_hash(RHASH).add_description("")
    hrp, data = bech32_decode(encode(invoice, PRIVKEY))
    data[-1] ^= 1
    assert decode(bech32_encode(hrp, data)).pubkey != PUBKEY

    invoice = Invoice(timestamp=TIMESTAMP).with_payment_hash(RHASH).add_description("").add_payee_node_key(PUBKEY)
    hrp, data = bech32_decode(encode(invoice, PRIVKEY))
    data[-1] ^= 1
    assert decode(bech32_encode(hrp, data)).pubkey == PUBKEY


def test_payee_node_key_mismatch_on_decode():
    other = public_key(b"\x01" * 32)
    text = build_signed("lnbc", [PaymentHash(RHASH), Description(""), PayeeNodeKey(other)])
    with pytest.raises(InvalidSignature):
        decode(text)


def test_payee_node_key_mismatch_on_encode():
    other = public_key(b"\x01" * 32)
    invoice = Invoice().with_payment_hash(RHASH).add_description("").add_payee_node_key(other)
    with pytest.raises(InvalidPrivateKey):
        encode(invoice, PRIVKEY)


def test_other_signer_is_recovered():
    forged = build_signed("lnbc", [PaymentHash(RHASH), Description("genuine")], key=b"\x02" * 32)
    assert decode(forged).pubkey == public_key(b"\x02" * 32)


# ----------------------------------------------------------------------------
# Lenient decoding


def test_repeated_fields_last_one_wins():
    text = build_signed(
        "lnbc",
        [PaymentHash(RHASH), Description("first"), Expiry(10), Description("second"), Expiry(20)],
    )
    decoded = decode(text)
    assert decoded.description == "second"
    assert decoded.expiry == 20
    assert decoded.tags == [Description("first"), Expiry(10), Description("second"), Expiry(20)]
    assert decoded.pubkey == PUBKEY


def test_unknown_fields_are_kept_apart():
    hrp = "lnbc"
    data = timestamp_to_u5(TIMESTAMP) + encode_fields([PaymentHash(RHASH), Description("x")])
    data += [12, 0, 2, 7, 7]  # tag 'v'
    signature = sign(signing_message(hrp, data), PRIVKEY)
    decoded = decode(bech32_encode(hrp, data + convertbits(signature, 8, 5, True)))
    assert decoded.unknown_fields == [UnknownField("v", (7, 7))]
    assert decoded.tags == [Description("x")]
    assert decoded.pubkey == PUBKEY


# ----------------------------------------------------------------------------
# Errors


def test_encode_requires_payment_hash():
    with pytest.raises(InvalidFieldValue):
        encode(Invoice().add_description("x"), PRIVKEY)


def test_encode_requires_description():
    with pytest.raises(MissingDescription):
        encode(Invoice().with_payment_hash(RHASH).add_expiry(60), PRIVKEY)


def test_encode_rejects_both_descriptions():
    invoice = Invoice().with_payment_hash(RHASH).add_description("x").add_description_hash(RHASH)
    with pytest.raises(ConflictingDescriptionFields):
        encode(invoice, PRIVKEY)


def test_encode_rejects_duplicates():
    with pytest.raises(DuplicateTag):
        encode(Invoice().with_payment_hash(RHASH).add_description("a").add_description("b"), PRIVKEY)
    with pytest.raises(DuplicateTag):
        encode(Invoice().with_payment_hash(RHASH).add_description("a").add_expiry(1).add_expiry(2), PRIVKEY)
    with pytest.raises(DuplicateTag):
        encode(Invoice().with_payment_hash(RHASH).add_description("a").add_field(PaymentHash(RHASH)), PRIVKEY)


def test_encode_rejects_bad_key():
    with pytest.raises(InvalidPrivateKey):
        encode(Invoice().with_payment_hash(RHASH).add_description("x"), PRIVKEY[:16])


def test_sub_millisatoshi_amount():
    with pytest.raises(TooManyDecimalPlaces):
        Invoice().with_amount(Decimal("0.0000000000001"))


def test_builder_validation():
    with pytest.raises(InvalidFieldValue):
        Invoice().with_payment_hash(b"\x00" * 31)
    with pytest.raises(InvalidFieldValue):
        Invoice().with_currency("BC")
    with pytest.raises(InvalidAmount):
        Invoice().with_amount_msat(0)


def test_decode_unknown_prefix():
    with pytest.raises(UnknownPrefix):
        decode(bech32_encode("bc25m", [0] * 120))


def test_decode_bad_amount():
    with pytest.raises(InvalidAmount):
        decode(bech32_encode("lnbc11p", [0] * 120))
    with pytest.raises(InvalidAmount):
        decode(bech32_encode("lnbc0m", [0] * 120))


def test_decode_too_short_for_signature():
    with pytest.raises(InvalidSignatureLength):
        decode(bech32_encode("lnbc", [0] * 50))


def test_decode_too_short_for_timestamp():
    with pytest.raises(MissingTimestamp):
        decode(bech32_encode("lnbc", [0] * 107))


def test_decode_missing_payment_hash():
    with pytest.raises(MissingPaymentHash):
        decode(build_signed("lnbc", [Description("no hash")]))


def test_decode_bad_checksum_and_case():
    text = VECTORS[0][1]
    with pytest.raises(InvalidChecksum):
        decode(text[:-1] + ("q" if text[-1] != "q" else "p"))
    with pytest.raises(MixedCase):
        decode(text[:4].upper() + text[4:])
