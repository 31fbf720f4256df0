from typing import Iterable, List, Optional
from sshkey_core.storage.models import KeyRecord
from sshkey_core.storage.provider import StorageProvider, CommitFailed

class InMemoryStorage(StorageProvider):
    name = "memory"

    def __init__(self, records: Iterable[KeyRecord] = ()):
        self.keys = {}
        self.commits = 0
        for rec in records:
            self.upsert_key(rec)

    def fetch_all(self) -> List[KeyRecord]:
        return [rec.copy() for rec in self.keys.values()]

    def commit_batch(self, records: Iterable[KeyRecord]) -> int:
        records = list(records)
        missing = [rec.id for rec in records if rec.id not in self.keys]
        if missing:
            raise CommitFailed(f"unknown key ids: {', '.join(missing)}")
        for rec in records:
            self.keys[rec.id].public_key = rec.public_key
        self.commits += 1
        return len(records)

    def upsert_key(self, rec: KeyRecord):
        self.keys[rec.id] = rec.copy()

    def get_key(self, key_id: str) -> Optional[KeyRecord]:
        rec = self.keys.get(key_id)
        return rec.copy() if rec else None

    def delete_key(self, key_id: str):
        self.keys.pop(key_id, None)
