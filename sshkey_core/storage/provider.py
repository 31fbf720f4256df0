# sshkey_core/storage/provider.py
from __future__ import annotations
from typing import Iterable, List, Optional
from sshkey_core.storage.models import KeyRecord


class StorageError(Exception):
    pass


class StoreUnavailable(StorageError):
    """The record store could not be read."""


class CommitFailed(StorageError):
    """A batch write was rejected; nothing from the batch was applied."""


class StorageProvider:
    """
    Contract for KeyRecord persistence.

    fetch_all() returns detached copies, so callers may mutate them freely;
    nothing becomes durable until commit_batch() succeeds for the whole set.
    """
    name: str = "base"

    def fetch_all(self) -> List[KeyRecord]:
        raise NotImplementedError

    def commit_batch(self, records: Iterable[KeyRecord]) -> int:
        raise NotImplementedError

    def upsert_key(self, rec: KeyRecord) -> None:
        raise NotImplementedError

    def get_key(self, key_id: str) -> Optional[KeyRecord]:
        raise NotImplementedError

    def delete_key(self, key_id: str) -> None:
        raise NotImplementedError

    def close(self) -> None:
        return
