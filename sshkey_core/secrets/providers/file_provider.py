from __future__ import annotations
from typing import Optional
import os
from sshkey_core.logger import get_logger
from sshkey_core.secrets.provider import SecretStore, SecretStoreError

log = get_logger("sshkey.Secrets.File")


class FileSecretStore(SecretStore):
    """
    Directory-backed secret store, one file per entry:

        <root>/sshkey_<id>              private key bytes
        <root>/sshkey_passphrase_<id>   UTF-8 passphrase

    Files are created with mode 0600.
    """
    name = "file"

    def __init__(self, root="secrets"):
        self.root = str(root)
        try:
            os.makedirs(self.root, mode=0o700, exist_ok=True)
        except OSError as e:
            log.error(f"[SECRETS] cannot open secret directory {self.root}: {e}")
            raise SecretStoreError(f"cannot open {self.root}: {e}") from e

    def _key_path(self, key_id: str) -> str:
        return os.path.join(self.root, f"sshkey_{self._safe(key_id)}")

    def _passphrase_path(self, key_id: str) -> str:
        return os.path.join(self.root, f"sshkey_passphrase_{self._safe(key_id)}")

    @staticmethod
    def _safe(key_id: str) -> str:
        key_id = str(key_id)
        if not key_id or os.sep in key_id or (os.altsep and os.altsep in key_id) or key_id in (".", ".."):
            raise SecretStoreError(f"invalid key id: {key_id!r}")
        return key_id

    def _read(self, path: str) -> Optional[bytes]:
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            log.error(f"[SECRETS] read failed for {path}: {e}")
            raise SecretStoreError(str(e)) from e

    def _write(self, path: str, data: bytes) -> None:
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError as e:
            raise SecretStoreError(str(e)) from e

    def get_private_key(self, key_id: str) -> bytes:
        return self._read(self._key_path(key_id)) or b""

    def get_passphrase(self, key_id: str) -> Optional[str]:
        data = self._read(self._passphrase_path(key_id))
        if data is None:
            return None
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SecretStoreError(f"passphrase for {key_id} is not valid UTF-8") from e

    def store_private_key(self, key_id: str, private_key: bytes) -> None:
        self._write(self._key_path(key_id), bytes(private_key))

    def store_passphrase(self, key_id: str, passphrase: str) -> None:
        self._write(self._passphrase_path(key_id), passphrase.encode("utf-8"))

    def delete(self, key_id: str) -> None:
        for path in (self._key_path(key_id), self._passphrase_path(key_id)):
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
            except OSError as e:
                raise SecretStoreError(str(e)) from e
