"""
Core vanity logic: mnemonic generation, batch address derivation and
pattern matching against the searchable part of a Kaspa address.
"""

import secrets
from typing import List, NamedTuple, Optional

from mnemonic import Mnemonic

from hd_key import DerivationError, HDKey
from kaspa_address import CHARSET, EXCLUDED_CHARS, PREFIXES, encode_pubkey

# Kaspa account/chain path: m/44'/111111'/0'/0, address index appended per candidate
ACCOUNT_PATH = "m/44'/111111'/0'/0"

# 12 words = 128 bits, 24 words = 256 bits
ENTROPY_BYTES = {12: 16, 24: 32}
DEFAULT_ENTROPY_BYTES = 32

# 'q' version marker + one of q/p/z/r
HEADER_LENGTH = 2

_MNEMONIC: Optional[Mnemonic] = None


class VanityError(Exception):
    pass


class EntropyError(VanityError):
    """Random entropy could not be turned into a mnemonic. Not recoverable."""


class PatternError(VanityError):
    def __init__(self, name: str, pattern: str, char: str):
        super().__init__(f"Invalid character '{char}' in {name} '{pattern}'")
        self.name = name
        self.pattern = pattern
        self.char = char


class AddressCandidate(NamedTuple):
    index: int
    address: str


def get_mnemonic() -> Mnemonic:
    global _MNEMONIC
    if _MNEMONIC is None:
        _MNEMONIC = Mnemonic("english")
    return _MNEMONIC


def derivation_path(index: int) -> str:
    return f"{ACCOUNT_PATH}/{index}"


# ============================================================
# Generation
# ============================================================
def _random_entropy(length: int) -> bytes:
    return secrets.token_bytes(length)


def generate_random_mnemonic(word_count: int) -> str:
    """Random English BIP39 mnemonic of 12 or 24 words (anything else gives 24)."""
    entropy = _random_entropy(ENTROPY_BYTES.get(word_count, DEFAULT_ENTROPY_BYTES))
    try:
        return get_mnemonic().to_mnemonic(entropy)
    except (ValueError, TypeError) as e:
        raise EntropyError(f"Failed to generate mnemonic: {e}") from e


# ============================================================
# Derivation
# ============================================================
def derive_batch(mnemonic: str, limit: int, prefix: str = PREFIXES["mainnet"]) -> List[AddressCandidate]:
    """
    Derive addresses 0..limit-1 of the Kaspa receive chain for one mnemonic.

    The account/chain key is derived once and every address index is a single
    child step from it. A derivation failure ends the batch early; whatever was
    already derived is returned, possibly nothing.
    """
    seed = Mnemonic.to_seed(mnemonic, passphrase="")
    results: List[AddressCandidate] = []
    try:
        account = HDKey.from_seed(seed).derive_path(ACCOUNT_PATH)
        for index in range(limit):
            child = account.derive_child(index)
            results.append(AddressCandidate(index, encode_pubkey(prefix, child.xonly_pubkey)))
    except DerivationError:
        pass
    return results


# ============================================================
# Matching
# ============================================================
class SearchPattern:
    """Prefix/suffix pair, folded to lower case once unless case sensitive."""

    __slots__ = ("prefix", "suffix", "case_sensitive")

    def __init__(self, prefix: Optional[str] = None, suffix: Optional[str] = None, case_sensitive: bool = False):
        if not case_sensitive:
            prefix = prefix.lower() if prefix else prefix
            suffix = suffix.lower() if suffix else suffix
        self.prefix = prefix or None
        self.suffix = suffix or None
        self.case_sensitive = case_sensitive

    def __repr__(self):
        return (
            f"SearchPattern(prefix={self.prefix!r}, suffix={self.suffix!r}, "
            f"case_sensitive={self.case_sensitive})"
        )

    @property
    def is_empty(self) -> bool:
        return self.prefix is None and self.suffix is None

    @property
    def length(self) -> int:
        return len(self.prefix or "") + len(self.suffix or "")

    def validate(self):
        """Raise PatternError on the first character bech32 leaves out."""
        for name, text in (("prefix", self.prefix), ("suffix", self.suffix)):
            char = invalid_char(text)
            if char is not None:
                raise PatternError(name, text, char)


def invalid_char(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    for c in text:
        if c in EXCLUDED_CHARS:
            return c
    return None


def searchable_tail(address: str) -> str:
    _, _, payload = address.partition(":")
    return payload[HEADER_LENGTH:] if len(payload) > HEADER_LENGTH else ""


def matches(address: str, pattern: SearchPattern) -> bool:
    tail = searchable_tail(address)
    if not pattern.case_sensitive:
        tail = tail.lower()
    if pattern.prefix is not None and not tail.startswith(pattern.prefix):
        return False
    if pattern.suffix is not None and not tail.endswith(pattern.suffix):
        return False
    return True


def pattern_probability(pattern: SearchPattern) -> float:
    """A-priori chance that one address matches."""
    return 1.0 / float(len(CHARSET)) ** pattern.length
