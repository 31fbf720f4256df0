"""
sshkey_core.crypto
------------------
Public key derivation for managed SSH keys:

- Format detection: OpenSSH, PEM (PKCS#8 / SEC1 / PKCS#1), raw Ed25519 bytes
- Private key loading with an optional passphrase
- OpenSSH public key formatting and SHA256 fingerprints

derive_public_key() is the collaborator used by the reconciler. It never
raises; every failure is reported as None.
"""

from __future__ import annotations
from typing import Optional
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
import hashlib, base64
from .constants import (
    KEY_TYPE_ED25519, KEY_TYPE_P256, KEY_TYPE_P384, KEY_TYPE_P521, KEY_TYPE_RSA, KEY_TYPES,
)
from .logger import get_logger
from .utils import b64d, read_ssh_string

log = get_logger("sshkey.Crypto")

FORMAT_OPENSSH = "openssh"
FORMAT_PEM_EC = "pem_ec"
FORMAT_PEM_PRIVATE = "pem_private"
FORMAT_PEM_ENCRYPTED = "pem_encrypted"
FORMAT_PEM_RSA = "pem_rsa"
FORMAT_RAW = "raw"
FORMAT_UNKNOWN = "unknown"

_CURVE_KEY_TYPES = {
    "secp256r1": KEY_TYPE_P256,
    "secp384r1": KEY_TYPE_P384,
    "secp521r1": KEY_TYPE_P521,
}


class KeyParsingError(Exception):
    pass


# --------- Format detection ----------
def detect_format(data: bytes) -> str:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return FORMAT_RAW if len(data) in (32, 64) else FORMAT_UNKNOWN

    if "BEGIN OPENSSH PRIVATE KEY" in text:
        return FORMAT_OPENSSH
    if "BEGIN EC PRIVATE KEY" in text:
        return FORMAT_PEM_EC
    if "BEGIN ENCRYPTED PRIVATE KEY" in text:
        return FORMAT_PEM_ENCRYPTED
    if "BEGIN PRIVATE KEY" in text:
        return FORMAT_PEM_PRIVATE
    if "BEGIN RSA PRIVATE KEY" in text:
        return FORMAT_PEM_RSA
    if len(data) in (32, 64):
        return FORMAT_RAW
    return FORMAT_UNKNOWN


# --------- Loading ----------
def _load_raw_ed25519(data: bytes) -> ed25519.Ed25519PrivateKey:
    # 32 bytes = seed, 64 bytes = seed || public
    sk = ed25519.Ed25519PrivateKey.from_private_bytes(data[:32])
    if len(data) == 64:
        pub = sk.public_key().public_bytes(serialization.Encoding.Raw, serialization.PublicFormat.Raw)
        if pub != data[32:]:
            raise KeyParsingError("public half of raw Ed25519 key does not match its seed")
    return sk


def load_private_key(data: bytes, passphrase: Optional[str] = None):
    """
    Parse private key bytes into a `cryptography` private key object.

    A passphrase stored for an unencrypted key is ignored rather than
    treated as an error. Raises KeyParsingError or the underlying
    cryptography error (ValueError / TypeError) on failure.
    """
    if not data:
        raise KeyParsingError("empty key data")

    fmt = detect_format(data)
    if fmt == FORMAT_RAW:
        return _load_raw_ed25519(data)
    if fmt == FORMAT_UNKNOWN:
        raise KeyParsingError("unknown key format; supported: OpenSSH, PEM, raw Ed25519")

    loader = serialization.load_ssh_private_key if fmt == FORMAT_OPENSSH else serialization.load_pem_private_key
    password = passphrase.encode("utf-8") if passphrase else None
    try:
        return loader(data, password=password)
    except TypeError:
        if password is None:
            raise
        # passphrase given for a key that is not encrypted
        return loader(data, password=None)


def key_type_of(private_key) -> str:
    if isinstance(private_key, ed25519.Ed25519PrivateKey):
        return KEY_TYPE_ED25519
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        curve = private_key.curve.name
        if curve not in _CURVE_KEY_TYPES:
            raise KeyParsingError(f"unsupported curve: {curve}")
        return _CURVE_KEY_TYPES[curve]
    if isinstance(private_key, rsa.RSAPrivateKey):
        return KEY_TYPE_RSA
    raise KeyParsingError(f"unsupported key type: {type(private_key).__name__}")


# --------- Formatting ----------
def format_public_key(private_key, label: str = "") -> str:
    line = private_key.public_key().public_bytes(
        serialization.Encoding.OpenSSH,
        serialization.PublicFormat.OpenSSH,
    ).decode("ascii")
    return f"{line} {label}" if label else line


def derive_public_key(
    private_key: bytes,
    key_type: str,
    passphrase: Optional[str] = None,
    label: str = "",
) -> Optional[str]:
    """
    Derive the OpenSSH public key line for `private_key`.

    `key_type` must match the parsed key (Ed25519, P256, P384, P521 or RSA).
    `label` is appended as the key comment. Returns None on any parse,
    decrypt or type mismatch failure.
    """
    if key_type not in KEY_TYPES:
        log.debug(f"[DERIVE] unsupported key type '{key_type}' for '{label}'")
        return None
    try:
        sk = load_private_key(private_key, passphrase)
        actual = key_type_of(sk)
        if actual != key_type:
            raise KeyParsingError(f"key type mismatch: expected {key_type}, got {actual}")
        return format_public_key(sk, label)
    except Exception as e:
        log.debug(f"[DERIVE] failed for '{label}': {type(e).__name__}: {e}")
        return None


# --------- Fingerprints ----------
def compute_ssh_fingerprint(public_key_line: str) -> str:
    """
    Compute the OpenSSH fingerprint of a public key line.

    - Input: "<algorithm> <base64 blob> [comment]"
    - Output: "SHA256:" + unpadded base64 of sha256(blob), as printed by
      `ssh-keygen -l`

    Raises ValueError if the line is malformed or the blob's embedded
    algorithm does not match the line's.
    """
    parts = public_key_line.strip().split()
    if len(parts) < 2:
        raise ValueError("public key line must contain an algorithm and a base64 blob")
    algorithm, blob_b64 = parts[0], parts[1]
    try:
        blob = b64d(blob_b64)
    except Exception as e:
        raise ValueError(f"invalid base64 public key blob: {e}") from e

    embedded, _ = read_ssh_string(blob)
    if embedded.decode("ascii", errors="replace") != algorithm:
        raise ValueError(f"algorithm mismatch: line says {algorithm}, blob says {embedded!r}")

    digest = hashlib.sha256(blob).digest()
    return "SHA256:" + base64.b64encode(digest).decode("ascii").rstrip("=")
