from __future__ import annotations
from typing import Optional, Iterable, List
import sqlite3, os
from sshkey_core.logger import get_logger
from sshkey_core.storage.provider import StorageProvider, StoreUnavailable, CommitFailed
from sshkey_core.storage.models import KeyRecord

log = get_logger("sshkey.Storage.SQLite")

_COLUMNS = "id, name, key_type, public_key, fingerprint, created_at"


class SQLiteStorage(StorageProvider):
    name = "sqlite"

    def __init__(self, path="db/sshkeys.db"):
        self.path = str(path)
        try:
            # If no directory, default to current working directory
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            self.db = sqlite3.connect(self.path, check_same_thread=False)
            self._init()
        except (sqlite3.Error, OSError) as e:
            log.error(f"[SQLITE] cannot open {self.path}: {e}")
            raise StoreUnavailable(f"cannot open {self.path}: {e}") from e

    def _init(self) -> None:
        c = self.db.cursor()
        c.execute("""CREATE TABLE IF NOT EXISTS ssh_keys(
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            key_type TEXT NOT NULL,
            public_key TEXT NOT NULL DEFAULT '',
            fingerprint TEXT,
            created_at TEXT NOT NULL
        )""")
        self.db.commit()

    # --- reconciliation contract ---

    def fetch_all(self) -> List[KeyRecord]:
        try:
            cur = self.db.execute(f"SELECT {_COLUMNS} FROM ssh_keys ORDER BY rowid")
            return [KeyRecord(*row) for row in cur.fetchall()]
        except sqlite3.Error as e:
            log.error(f"[SQLITE] fetch_all failed on {self.path}: {e}")
            raise StoreUnavailable(str(e)) from e

    def commit_batch(self, records: Iterable[KeyRecord]) -> int:
        records = list(records)
        try:
            # one transaction: commits on success, rolls back on any exception
            with self.db:
                for rec in records:
                    cur = self.db.execute(
                        "UPDATE ssh_keys SET public_key=? WHERE id=?",
                        (rec.public_key, rec.id),
                    )
                    if cur.rowcount != 1:
                        raise CommitFailed(f"unknown key id: {rec.id}")
        except sqlite3.Error as e:
            log.error(f"[SQLITE] commit_batch failed on {self.path}: {e}")
            raise CommitFailed(str(e)) from e
        log.debug(f"[SQLITE] committed {len(records)} record(s)")
        return len(records)

    # --- host helpers ---

    def upsert_key(self, rec: KeyRecord) -> None:
        self.db.execute(
            f"INSERT INTO ssh_keys({_COLUMNS}) VALUES(?,?,?,?,?,?) "
            "ON CONFLICT(id) DO UPDATE SET name=excluded.name, key_type=excluded.key_type, "
            "public_key=excluded.public_key, fingerprint=excluded.fingerprint",
            (rec.id, rec.name, rec.key_type, rec.public_key, rec.fingerprint, rec.created_at)
        )
        self.db.commit()

    def get_key(self, key_id: str) -> Optional[KeyRecord]:
        cur = self.db.execute(f"SELECT {_COLUMNS} FROM ssh_keys WHERE id=?", (key_id,))
        row = cur.fetchone()
        if not row: return None
        return KeyRecord(*row)

    def delete_key(self, key_id: str) -> None:
        self.db.execute("DELETE FROM ssh_keys WHERE id=?", (key_id,))
        self.db.commit()

    def close(self):
        self.db.close()
