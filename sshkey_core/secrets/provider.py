# sshkey_core/secrets/provider.py
from __future__ import annotations
from typing import Optional


class SecretStoreError(Exception):
    pass


class SecretStore:
    """
    Private key material keyed by KeyRecord.id.

    Readers: get_private_key() returns b"" when nothing is stored and only
    raises SecretStoreError when the backend itself fails.
    get_passphrase() returns None when no passphrase is stored.
    """
    name: str = "base"

    def get_private_key(self, key_id: str) -> bytes:
        raise NotImplementedError

    def get_passphrase(self, key_id: str) -> Optional[str]:
        raise NotImplementedError

    def store_private_key(self, key_id: str, private_key: bytes) -> None:
        raise NotImplementedError

    def store_passphrase(self, key_id: str, passphrase: str) -> None:
        raise NotImplementedError

    def delete(self, key_id: str) -> None:
        """Remove the private key and its passphrase, if any."""
        raise NotImplementedError
