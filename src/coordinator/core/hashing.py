"""
Content addressing for task payloads.

Every task payload is stored next to a digest of its exact bytes. The digest is
self-describing: it uses the multihash layout, so the hash function and digest
length travel with the value and a verifier needs no out-of-band knowledge.

Manifesto:
    - **Deterministic:** identical bytes always produce an identical digest
    - **Collision-resistant:** SHA-256 by default
    - **Self-describing:** ``<varint code><varint length><digest>``
    - **Pure:** no I/O, no state, safe to share across threads

Architecture:
    ::

        compute_digest(b"hello")
            │
            ▼
        ┌──────────┬──────────┬─────────────────────────────────┐
        │ 0x12     │ 0x20     │ 2cf24dba5fb0a30e26e83b2a ...    │
        │ sha2-256 │ 32 bytes │ raw SHA-256 digest              │
        └──────────┴──────────┴─────────────────────────────────┘

Examples:
    >>> digest_hex(compute_digest(b"hello"))[:8]
    '12202cf2'
    >>> decode_digest(compute_digest(b"hello")).algorithm
    'sha2-256'
    >>> verify_digest(b"hello", compute_digest(b"hello"))
    True

Tags:
    hashing, multihash, content-addressing, integrity, coordinator

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from coordinator.core.errors import ValidationError


@dataclass(frozen=True, slots=True)
class HashAlgorithm:
    """A hash function registered in the multihash code table."""

    name: str
    code: int
    length: int
    factory: Callable[[], Any]

    def digest(self, data: bytes) -> bytes:
        h = self.factory()
        h.update(data)
        return h.digest()


# Codes from the multicodec table.
_ALGORITHMS: tuple[HashAlgorithm, ...] = (
    HashAlgorithm("sha2-256", 0x12, 32, hashlib.sha256),
    HashAlgorithm("sha2-512", 0x13, 64, hashlib.sha512),
    HashAlgorithm("blake2b-256", 0xB220, 32, lambda: hashlib.blake2b(digest_size=32)),
)

ALGORITHMS_BY_NAME: dict[str, HashAlgorithm] = {a.name: a for a in _ALGORITHMS}
ALGORITHMS_BY_CODE: dict[int, HashAlgorithm] = {a.code: a for a in _ALGORITHMS}

DEFAULT_ALGORITHM = "sha2-256"


@dataclass(frozen=True, slots=True)
class DecodedDigest:
    """A multihash split into its parts."""

    algorithm: str
    code: int
    length: int
    value: bytes


def get_algorithm(name: str) -> HashAlgorithm:
    """Look up a hash algorithm by its multihash name."""
    try:
        return ALGORITHMS_BY_NAME[name]
    except KeyError:
        raise ValidationError(
            f"Unsupported digest algorithm {name!r}. Supported: {sorted(ALGORITHMS_BY_NAME)}",
            field="digest_algorithm",
            value=name,
        ) from None


def encode_varint(value: int) -> bytes:
    """Unsigned LEB128 encoding used by the multihash header."""
    if value < 0:
        raise ValueError("varint must be non-negative")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(buf: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode one varint from *buf* at *offset*. Returns ``(value, next_offset)``."""
    value = 0
    shift = 0
    pos = offset
    while pos < len(buf):
        byte = buf[pos]
        value |= (byte & 0x7F) << shift
        pos += 1
        if not byte & 0x80:
            return value, pos
        shift += 7
        if shift > 63:
            break
    raise ValidationError("Truncated or oversized varint in digest header", field="digest")


def compute_digest(data: bytes, algorithm: str = DEFAULT_ALGORITHM) -> bytes:
    """
    Compute the self-describing digest of *data*.

    Args:
        data: Raw payload bytes.
        algorithm: Multihash name (default ``sha2-256``).

    Returns:
        ``varint(code) + varint(length) + digest`` as bytes.
    """
    algo = get_algorithm(algorithm)
    raw = algo.digest(bytes(data))
    return encode_varint(algo.code) + encode_varint(len(raw)) + raw


def decode_digest(digest: bytes) -> DecodedDigest:
    """
    Split a digest into algorithm, length and hash bytes.

    Raises:
        ValidationError: unknown hash code or length mismatch.
    """
    code, pos = decode_varint(digest, 0)
    length, pos = decode_varint(digest, pos)
    value = bytes(digest[pos:])

    algo = ALGORITHMS_BY_CODE.get(code)
    if algo is None:
        raise ValidationError(f"Unknown multihash code 0x{code:x}", field="digest")
    if len(value) != length or length != algo.length:
        raise ValidationError(
            f"Digest length mismatch for {algo.name}: header says {length}, got {len(value)} bytes",
            field="digest",
        )
    return DecodedDigest(algorithm=algo.name, code=code, length=length, value=value)


def verify_digest(data: bytes, digest: bytes) -> bool:
    """Recompute *data*'s digest with the algorithm named inside *digest* and compare."""
    decoded = decode_digest(digest)
    expected = compute_digest(data, decoded.algorithm)
    return hmac.compare_digest(expected, bytes(digest))


def digest_hex(digest: bytes) -> str:
    """Hex rendering used on the wire."""
    return bytes(digest).hex()


__all__ = [
    "HashAlgorithm",
    "DecodedDigest",
    "DEFAULT_ALGORITHM",
    "ALGORITHMS_BY_NAME",
    "ALGORITHMS_BY_CODE",
    "get_algorithm",
    "encode_varint",
    "decode_varint",
    "compute_digest",
    "decode_digest",
    "verify_digest",
    "digest_hex",
]
