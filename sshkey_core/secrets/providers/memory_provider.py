from typing import Optional
from sshkey_core.secrets.provider import SecretStore

class InMemorySecretStore(SecretStore):
    name = "memory"

    def __init__(self):
        self.private_keys = {}
        self.passphrases = {}

    def get_private_key(self, key_id: str) -> bytes:
        return self.private_keys.get(key_id, b"")

    def get_passphrase(self, key_id: str) -> Optional[str]:
        return self.passphrases.get(key_id)

    def store_private_key(self, key_id: str, private_key: bytes):
        self.private_keys[key_id] = bytes(private_key)

    def store_passphrase(self, key_id: str, passphrase: str):
        self.passphrases[key_id] = passphrase

    def delete(self, key_id: str):
        self.private_keys.pop(key_id, None)
        self.passphrases.pop(key_id, None)
