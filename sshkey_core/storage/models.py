# sshkey_core/storage/models.py
from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Optional
from sshkey_core.constants import PLACEHOLDER_MARKER
from sshkey_core.utils import now_ts


@dataclass
class KeyRecord:
    """
    Storage-level representation of one managed SSH key.

    The private key never lives here; it is held by a SecretStore under the
    same `id`. `public_key` is the only field the reconciler writes.
    """
    id: str
    name: str
    key_type: str             # Ed25519 | P256 | P384 | P521 | RSA
    public_key: str = ""
    fingerprint: Optional[str] = None
    created_at: str = field(default_factory=now_ts)

    def needs_public_key(self, marker: str = PLACEHOLDER_MARKER) -> bool:
        return not self.public_key or marker in self.public_key

    def copy(self) -> "KeyRecord":
        return replace(self)
