"""
BIP32 HD Key Derivation using coincurve (libsecp256k1) for performance.
Falls back to ecdsa if coincurve is unavailable.
"""

import hashlib
import hmac
import struct

SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
HARDENED = 0x80000000

# Try fast C library first, fall back to pure Python
try:
    from coincurve import PublicKey as _CPublicKey

    def _get_pubkey(privkey_bytes: bytes) -> bytes:
        pk = _CPublicKey.from_valid_secret(privkey_bytes)
        return pk.format(compressed=True)

    _ENGINE = "coincurve"
except ImportError:
    from ecdsa import SECP256k1, SigningKey

    def _get_pubkey(privkey_bytes: bytes) -> bytes:
        sk = SigningKey.from_string(privkey_bytes, curve=SECP256k1)
        vk = sk.get_verifying_key()
        x = vk.pubkey.point.x()
        y = vk.pubkey.point.y()
        prefix = b"\x02" if y % 2 == 0 else b"\x03"
        return prefix + x.to_bytes(32, "big")

    _ENGINE = "ecdsa"


class DerivationError(ValueError):
    """Raised when a derived key falls outside the secp256k1 group (BIP32)."""


def get_engine():
    return _ENGINE


def _hmac_sha512(key: bytes, data: bytes) -> bytes:
    return hmac.new(key, data, hashlib.sha512).digest()


def _parse_index(part: str) -> int:
    hardened = part.endswith(("'", "h", "H"))
    try:
        idx = int(part.rstrip("'hH"))
    except ValueError:
        raise DerivationError(f"bad path component {part!r}")
    if not 0 <= idx < HARDENED:
        raise DerivationError(f"path index out of range: {part!r}")
    return idx + HARDENED if hardened else idx


class HDKey:
    """BIP32 Hierarchical Deterministic Key."""

    __slots__ = ("privkey", "chaincode", "_pubkey")

    def __init__(self, privkey: bytes, chaincode: bytes):
        self.privkey = privkey
        self.chaincode = chaincode
        self._pubkey = None

    @classmethod
    def from_seed(cls, seed: bytes) -> "HDKey":
        I = _hmac_sha512(b"Bitcoin seed", seed)
        k = int.from_bytes(I[:32], "big")
        if k == 0 or k >= SECP256K1_ORDER:
            raise DerivationError("invalid master key")
        return cls(I[:32], I[32:])

    @property
    def pubkey(self) -> bytes:
        """33-byte compressed public key."""
        if self._pubkey is None:
            self._pubkey = _get_pubkey(self.privkey)
        return self._pubkey

    @property
    def xonly_pubkey(self) -> bytes:
        """Compressed key without its parity byte (Schnorr form)."""
        return self.pubkey[1:]

    def derive_child(self, index: int) -> "HDKey":
        if index >= HARDENED:
            data = b"\x00" + self.privkey + struct.pack(">I", index)
        else:
            data = self.pubkey + struct.pack(">I", index)
        I = _hmac_sha512(self.chaincode, data)
        tweak = int.from_bytes(I[:32], "big")
        if tweak >= SECP256K1_ORDER:
            raise DerivationError(f"invalid child key at index {index}")
        child_int = (tweak + int.from_bytes(self.privkey, "big")) % SECP256K1_ORDER
        if child_int == 0:
            raise DerivationError(f"invalid child key at index {index}")
        return HDKey(child_int.to_bytes(32, "big"), I[32:])

    def derive_path(self, path: str) -> "HDKey":
        """Derive from path like m/44'/111111'/0'/0"""
        parts = path.strip().split("/")
        if parts[0] == "m":
            parts = parts[1:]
        key = self
        for part in parts:
            key = key.derive_child(_parse_index(part))
        return key
