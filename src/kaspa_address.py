"""
Kaspa address encoding (cashaddr-style bech32 with a 40-bit checksum).
Addresses read as "<prefix>:<payload><checksum>".
"""

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
EXCLUDED_CHARS = "1bio"

PREFIXES = {
    "mainnet": "kaspa",
    "testnet": "kaspatest",
    "simnet": "kaspasim",
    "devnet": "kaspadev",
}

VERSION_PUBKEY = 0
VERSION_PUBKEY_ECDSA = 1
VERSION_SCRIPT_HASH = 8

PAYLOAD_LENGTHS = {
    VERSION_PUBKEY: 32,
    VERSION_PUBKEY_ECDSA: 33,
    VERSION_SCRIPT_HASH: 32,
}

CHECKSUM_LENGTH = 8


def _polymod(values):
    GEN = [0x98F2BC8E61, 0x79B76D99E2, 0xF33E5FB3C4, 0xAE2EABE2A8, 0x1E4F43E470]
    chk = 1
    for v in values:
        b = chk >> 35
        chk = ((chk & 0x07FFFFFFFF) << 5) ^ v
        for i in range(5):
            chk ^= GEN[i] if ((b >> i) & 1) else 0
    return chk ^ 1


def _prefix_expand(prefix):
    return [ord(x) & 31 for x in prefix] + [0]


def _create_checksum(prefix, data):
    polymod = _polymod(_prefix_expand(prefix) + data + [0] * CHECKSUM_LENGTH)
    return convertbits(polymod.to_bytes(5, "big"), 8, 5)


def convertbits(data, frombits, tobits, pad=True):
    acc = 0
    bits = 0
    ret = []
    maxv = (1 << tobits) - 1
    for value in data:
        acc = (acc << frombits) | value
        bits += frombits
        while bits >= tobits:
            bits -= tobits
            ret.append((acc >> bits) & maxv)
    if pad:
        if bits:
            ret.append((acc << (tobits - bits)) & maxv)
    elif bits >= frombits or ((acc << (tobits - bits)) & maxv):
        return None
    return ret


def encode(prefix, version, payload):
    """Encode a Kaspa address with given prefix, version byte and key payload."""
    data = convertbits(bytes([version]) + bytes(payload), 8, 5)
    checksum = _create_checksum(prefix, data)
    return prefix + ":" + "".join([CHARSET[d] for d in data + checksum])


def encode_pubkey(prefix, xonly_pubkey):
    """Schnorr (version 0) address for a 32-byte x-only public key."""
    return encode(prefix, VERSION_PUBKEY, xonly_pubkey)


def decode(address):
    """Decode a Kaspa address. Returns (prefix, version, payload) or (None,None,None)."""
    if address.lower() != address and address.upper() != address:
        return None, None, None
    address = address.lower()
    prefix, sep, body = address.partition(":")
    if not sep or not prefix or len(body) <= CHECKSUM_LENGTH:
        return None, None, None
    if not all(x in CHARSET for x in body):
        return None, None, None
    data = [CHARSET.find(x) for x in body]
    if _polymod(_prefix_expand(prefix) + data) != 0:
        return None, None, None
    raw = convertbits(data[:-CHECKSUM_LENGTH], 5, 8, False)
    if not raw:
        return None, None, None
    version, payload = raw[0], bytes(raw[1:])
    expected = PAYLOAD_LENGTHS.get(version)
    if expected is not None and len(payload) != expected:
        return None, None, None
    return prefix, version, payload
