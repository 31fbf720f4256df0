"""
sshkey_core.utils
-----------------
Lightweight helpers for timestamping, base64 and reading the SSH wire
encoding used inside public key blobs.
"""

from __future__ import annotations
import base64, struct, time


def b64d(s: str) -> bytes:
    return base64.b64decode(s.encode("ascii"))

def now_ts() -> str:
    # RFC3339 / ISO 8601 in UTC, second precision
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

def read_ssh_string(blob: bytes, offset: int = 0):
    """Return (value, next_offset) for the SSH string starting at `offset`."""
    if offset + 4 > len(blob):
        raise ValueError("truncated SSH string length")
    (length,) = struct.unpack(">I", blob[offset:offset + 4])
    start = offset + 4
    end = start + length
    if end > len(blob):
        raise ValueError(f"truncated SSH string: needed {length} bytes, {len(blob) - start} available")
    return blob[start:end], end
