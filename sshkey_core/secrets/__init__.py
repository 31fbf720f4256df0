# sshkey_core/secrets/__init__.py

from .provider import SecretStore, SecretStoreError
from .providers.memory_provider import InMemorySecretStore
from .providers.file_provider import FileSecretStore
from sshkey_core.constants import DEFAULT_SECRETS_DIR
import os


def load_secret_store(config: dict | None = None) -> SecretStore:
    """
    Factory resolver for selecting the secret backend.

    For now:
        - file (default)
        - memory
    """
    config = config or {}
    provider = config.get("provider") or os.getenv("SSHKEY_SECRET_PROVIDER", "file")

    if provider == "memory":
        return InMemorySecretStore()

    if provider == "file":
        root = config.get("secrets_dir") or os.getenv("SSHKEY_SECRETS_DIR", DEFAULT_SECRETS_DIR)
        return FileSecretStore(root)

    raise ValueError(f"Unknown secret provider: {provider}")


__all__ = [
    "SecretStore",
    "SecretStoreError",
    "InMemorySecretStore",
    "FileSecretStore",
    "load_secret_store",
]
