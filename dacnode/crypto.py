"""Keccak-256 hashing and recoverable secp256k1 signatures."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from Crypto.Hash import keccak as _keccak

P = 2**256 - 2**32 - 977
N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
HALF_N = N // 2
G = (
    0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798,
    0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8,
)
SIGNATURE_LENGTH = 65

PublicKey = Tuple[int, int]
_Point = Optional[PublicKey]


class InvalidSignatureError(ValueError):
    """A signature that cannot be parsed or does not recover a public key."""


def keccak256(*args: bytes) -> bytes:
    """Keccak-256 digest of the concatenated arguments."""
    digest = _keccak.new(digest_bits=256)
    for chunk in args:
        digest.update(bytes(chunk))
    return digest.digest()


def _add(a: _Point, b: _Point) -> _Point:
    if a is None:
        return b
    if b is None:
        return a
    x1, y1 = a
    x2, y2 = b
    if x1 == x2:
        if (y1 + y2) % P == 0:
            return None
        slope = 3 * x1 * x1 * pow(2 * y1, -1, P) % P
    else:
        slope = (y2 - y1) * pow(x2 - x1, -1, P) % P
    x3 = (slope * slope - x1 - x2) % P
    return x3, (slope * (x1 - x3) - y1) % P


def _mul(k: int, point: _Point) -> _Point:
    result: _Point = None
    addend = point
    while k:
        if k & 1:
            result = _add(result, addend)
        addend = _add(addend, addend)
        k >>= 1
    return result


@dataclass(frozen=True, repr=False)
class PrivateKey:
    """A secp256k1 private scalar."""

    scalar: int

    @classmethod
    def generate(cls) -> "PrivateKey":
        return cls(secrets.randbelow(N - 1) + 1)

    @property
    def public_key(self) -> PublicKey:
        if not 0 < self.scalar < N:
            raise ValueError("invalid private key")
        point = _mul(self.scalar, G)
        assert point is not None
        return point

    def address(self) -> bytes:
        return pubkey_to_address(self.public_key)


def pubkey_to_address(pubkey: PublicKey) -> bytes:
    """The 20-byte account address of an uncompressed public key."""
    x, y = pubkey
    return keccak256(x.to_bytes(32, "big"), y.to_bytes(32, "big"))[12:]


def _nonces(scalar: int, digest: bytes) -> Iterator[int]:
    """Deterministic nonces in the manner of RFC 6979 with HMAC-SHA256."""
    key_octets = scalar.to_bytes(32, "big")
    hash_octets = (int.from_bytes(digest, "big") % N).to_bytes(32, "big")
    v = b"\x01" * 32
    k = b"\x00" * 32
    k = hmac.new(k, v + b"\x00" + key_octets + hash_octets, hashlib.sha256).digest()
    v = hmac.new(k, v, hashlib.sha256).digest()
    k = hmac.new(k, v + b"\x01" + key_octets + hash_octets, hashlib.sha256).digest()
    v = hmac.new(k, v, hashlib.sha256).digest()
    while True:
        v = hmac.new(k, v, hashlib.sha256).digest()
        candidate = int.from_bytes(v, "big")
        if 0 < candidate < N:
            yield candidate
        k = hmac.new(k, v + b"\x00", hashlib.sha256).digest()
        v = hmac.new(k, v, hashlib.sha256).digest()


def sign(digest: bytes, private_key: PrivateKey) -> bytes:
    """Sign a 32-byte digest; returns r || s || v with v in {0, 1} and low s."""
    if len(digest) != 32:
        raise ValueError(f"hash is required to be exactly 32 bytes ({len(digest)})")
    scalar = private_key.scalar
    if not 0 < scalar < N:
        raise ValueError("invalid private key")
    e = int.from_bytes(digest, "big")
    for k in _nonces(scalar, digest):
        point = _mul(k, G)
        assert point is not None
        x, y = point
        r = x % N
        if r == 0:
            continue
        s = pow(k, -1, N) * (e + r * scalar) % N
        if s == 0:
            continue
        recovery_id = (y & 1) | (2 if x >= N else 0)
        if s > HALF_N:
            s = N - s
            recovery_id ^= 1
        return r.to_bytes(32, "big") + s.to_bytes(32, "big") + bytes([recovery_id])
    raise AssertionError("nonce generator exhausted")


def _recover_pubkey(digest: bytes, signature: bytes) -> PublicKey:
    if len(digest) != 32:
        raise ValueError(f"hash is required to be exactly 32 bytes ({len(digest)})")
    if len(signature) != SIGNATURE_LENGTH:
        raise InvalidSignatureError("invalid signature length")
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    recovery_id = signature[64]
    if recovery_id > 3:
        raise InvalidSignatureError("invalid signature recovery id")
    if not (0 < r < N and 0 < s < N):
        raise InvalidSignatureError("signature values out of range")
    x = r + N if recovery_id & 2 else r
    if x >= P:
        raise InvalidSignatureError("signature r overflows the field")
    alpha = (pow(x, 3, P) + 7) % P
    y = pow(alpha, (P + 1) // 4, P)
    if y * y % P != alpha:
        raise InvalidSignatureError("signature r is not on the curve")
    if (y & 1) != (recovery_id & 1):
        y = P - y
    e = int.from_bytes(digest, "big") % N
    r_inv = pow(r, -1, N)
    point = _add(_mul(s * r_inv % N, (x, y)), _mul(-e * r_inv % N, G))
    if point is None:
        raise InvalidSignatureError("signature recovers the point at infinity")
    return point


def recover_address(digest: bytes, signature: bytes) -> bytes:
    """The address whose key produced the signature over the digest."""
    return pubkey_to_address(_recover_pubkey(digest, signature))