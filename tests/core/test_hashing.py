"""Tests for coordinator.core.hashing (multihash digests)."""

import hashlib

import pytest

from coordinator.core.errors import ValidationError
from coordinator.core.hashing import (
    compute_digest,
    decode_digest,
    decode_varint,
    digest_hex,
    encode_varint,
    get_algorithm,
    verify_digest,
)

HELLO_SHA256 = "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"


class TestComputeDigest:
    def test_known_vector(self):
        assert digest_hex(compute_digest(b"hello")) == "1220" + HELLO_SHA256

    def test_empty_payload(self):
        digest = compute_digest(b"")
        assert digest[:2] == b"\x12\x20"
        assert digest[2:] == hashlib.sha256(b"").digest()

    def test_deterministic(self):
        assert compute_digest(b"abc") == compute_digest(bytearray(b"abc"))

    def test_different_payloads_differ(self):
        assert compute_digest(b"a") != compute_digest(b"b")

    def test_sha2_512_header(self):
        digest = compute_digest(b"hello", "sha2-512")
        assert digest[:2] == b"\x13\x40"
        assert len(digest) == 66

    def test_blake2b_uses_multibyte_code(self):
        digest = compute_digest(b"hello", "blake2b-256")
        assert digest[:3] == encode_varint(0xB220)
        assert decode_digest(digest).algorithm == "blake2b-256"

    def test_unknown_algorithm(self):
        with pytest.raises(ValidationError):
            compute_digest(b"x", "md5")


class TestVarint:
    @pytest.mark.parametrize(
        ("value", "encoded"),
        [(0, b"\x00"), (0x12, b"\x12"), (127, b"\x7f"), (128, b"\x80\x01"), (0xB220, b"\xa0\xe4\x02")],
    )
    def test_encode(self, value, encoded):
        assert encode_varint(value) == encoded

    def test_decode_returns_offset(self):
        assert decode_varint(b"\x80\x01\xff", 0) == (128, 2)

    def test_truncated(self):
        with pytest.raises(ValidationError):
            decode_varint(b"\x80")

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            encode_varint(-1)


class TestDecodeDigest:
    def test_parts(self):
        decoded = decode_digest(compute_digest(b"hello"))
        assert decoded.algorithm == "sha2-256"
        assert decoded.code == 0x12
        assert decoded.length == 32
        assert decoded.value.hex() == HELLO_SHA256

    def test_unknown_code(self):
        with pytest.raises(ValidationError):
            decode_digest(b"\x01\x02ab")

    def test_length_mismatch(self):
        with pytest.raises(ValidationError):
            decode_digest(compute_digest(b"hello")[:-1])


class TestVerifyDigest:
    def test_matches(self):
        assert verify_digest(b"hello", compute_digest(b"hello")) is True

    def test_mismatch(self):
        assert verify_digest(b"hellO", compute_digest(b"hello")) is False

    def test_uses_algorithm_from_header(self):
        assert verify_digest(b"hello", compute_digest(b"hello", "sha2-512")) is True


class TestAlgorithms:
    def test_get_algorithm(self):
        assert get_algorithm("sha2-256").length == 32
