"""
sshkey_core.reconciler
----------------------
Backfills public keys for managed SSH key records.

A record is a candidate when its public key is empty or carries the
placeholder marker. For each candidate the private key (and optional
passphrase) is read from the secret store and handed to the derivation
function; results are staged on the fetched copies and written back in one
commit_batch() call once every candidate has been processed.

Per-candidate problems (no secret, derivation failure, any exception) are
recorded as outcomes and never stop the loop. Only the record store's fetch
and commit are fatal to a run, and those are reported on the summary rather
than raised.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .constants import PLACEHOLDER_MARKER
from .crypto import derive_public_key
from .logger import get_logger
from .secrets import SecretStore, load_secret_store
from .storage import KeyRecord, StorageProvider, StoreUnavailable, CommitFailed, load_storage_provider

log = get_logger("sshkey.Reconciler")

REASON_NO_SECRET = "no-secret"
REASON_DERIVATION_ERROR = "derivation-error"

# (private_key, key_type, passphrase, label) -> public key line or None
Deriver = Callable[[bytes, str, Optional[str], str], Optional[str]]


class CandidateStatus(str, Enum):
    SUCCEEDED = "succeeded"
    SKIPPED_NO_SECRET = "skipped_no_secret"
    FAILED = "failed"


class RunError(str, Enum):
    STORE_UNAVAILABLE = "store_unavailable"
    COMMIT_FAILED = "commit_failed"


@dataclass
class CandidateOutcome:
    key_id: str
    name: str
    status: CandidateStatus
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"key_id": self.key_id, "name": self.name, "status": self.status.value, "reason": self.reason}


@dataclass
class ReconcileSummary:
    """
    Result of one reconcile_all() run.

    `succeeded` counts candidates whose public key was derived and staged.
    Those are durable only when `committed` is True; a COMMIT_FAILED run
    keeps its per-candidate outcomes but nothing was written.
    """
    already_valid: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    committed: bool = False
    error: Optional[RunError] = None
    detail: str = ""
    outcomes: List[CandidateOutcome] = field(default_factory=list)

    @property
    def candidates(self) -> int:
        return self.succeeded + self.skipped + self.failed

    @property
    def ok(self) -> bool:
        return self.error is None

    def record(self, outcome: CandidateOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.status is CandidateStatus.SUCCEEDED:
            self.succeeded += 1
        elif outcome.status is CandidateStatus.SKIPPED_NO_SECRET:
            self.skipped += 1
        else:
            self.failed += 1

    def raise_for_error(self) -> None:
        if self.error is RunError.STORE_UNAVAILABLE:
            raise StoreUnavailable(self.detail)
        if self.error is RunError.COMMIT_FAILED:
            raise CommitFailed(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "already_valid": self.already_valid,
            "succeeded": self.succeeded,
            "skipped": self.skipped,
            "failed": self.failed,
            "committed": self.committed,
            "error": self.error.value if self.error else None,
            "detail": self.detail,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


class Reconciler:
    def __init__(
        self,
        store: StorageProvider,
        secrets: SecretStore,
        derive: Deriver = derive_public_key,
        marker: str = PLACEHOLDER_MARKER,
    ):
        self.store = store
        self.secrets = secrets
        self.derive = derive
        self.marker = marker

    @classmethod
    def from_env(cls, storage_config: dict | None = None, secrets_config: dict | None = None) -> "Reconciler":
        return cls(load_storage_provider(storage_config), load_secret_store(secrets_config))

    def reconcile_all(self) -> ReconcileSummary:
        """
        Restore missing/placeholder public keys for every record in one pass.

        Candidates are processed one at a time in fetch order. Returns a
        ReconcileSummary; expected per-record conditions and store failures
        are reported there instead of raised.
        """
        summary = ReconcileSummary()

        try:
            records = self.store.fetch_all()
        except Exception as e:
            summary.error = RunError.STORE_UNAVAILABLE
            summary.detail = str(e)
            log.error(f"[RECONCILE] could not fetch key records: {e}")
            return summary

        staged: List[KeyRecord] = []
        for rec in records:
            if not rec.needs_public_key(self.marker):
                summary.already_valid += 1
                continue

            log.info(f"[RECONCILE] '{rec.name}' has a missing/placeholder public key")
            try:
                outcome = self._reconcile_one(rec)
            except Exception as e:
                log.warning(f"[RECONCILE] '{rec.name}' failed: {type(e).__name__}: {e}")
                outcome = CandidateOutcome(rec.id, rec.name, CandidateStatus.FAILED, f"error: {type(e).__name__}")

            if outcome.status is CandidateStatus.SUCCEEDED:
                staged.append(rec)
            summary.record(outcome)

        if not staged:
            if summary.candidates:
                log.info(f"[RECONCILE] no public keys derived ({summary.skipped} skipped, {summary.failed} failed)")
            else:
                log.info("[RECONCILE] all SSH keys already have valid public keys")
            return summary

        try:
            self.store.commit_batch(staged)
        except Exception as e:
            summary.error = RunError.COMMIT_FAILED
            summary.detail = str(e)
            log.error(f"[RECONCILE] commit of {len(staged)} record(s) failed: {e}")
            return summary

        summary.committed = True
        log.info(f"[RECONCILE] updated {len(staged)} SSH key(s) with derived public keys")
        return summary

    def _reconcile_one(self, rec: KeyRecord) -> CandidateOutcome:
        private_key = self.secrets.get_private_key(rec.id)
        if not private_key:
            log.info(f"[RECONCILE] no private key stored for '{rec.name}'")
            return CandidateOutcome(rec.id, rec.name, CandidateStatus.SKIPPED_NO_SECRET, REASON_NO_SECRET)

        passphrase = self._lookup_passphrase(rec)
        public_key = self._without_marker(self.derive(private_key, rec.key_type, passphrase, rec.name))
        if not public_key:
            log.warning(f"[RECONCILE] could not derive public key for '{rec.name}'")
            return CandidateOutcome(rec.id, rec.name, CandidateStatus.FAILED, REASON_DERIVATION_ERROR)

        rec.public_key = public_key
        log.info(f"[RECONCILE] derived public key for '{rec.name}'")
        return CandidateOutcome(rec.id, rec.name, CandidateStatus.SUCCEEDED)

    def _without_marker(self, public_key: Optional[str]) -> Optional[str]:
        """
        Return the derived line in a form that is no longer a candidate.

        A marker in the algorithm or key blob means the result is unusable.
        A marker in the comment (the record name) only drops the comment.
        """
        if not public_key or self.marker not in public_key:
            return public_key
        parts = public_key.split(None, 2)
        if len(parts) < 2 or self.marker in parts[0] or self.marker in parts[1]:
            return None
        return f"{parts[0]} {parts[1]}"

    def _lookup_passphrase(self, rec: KeyRecord) -> Optional[str]:
        # many keys are unencrypted; lookup failure means "no passphrase"
        try:
            return self.secrets.get_passphrase(rec.id)
        except Exception as e:
            log.debug(f"[RECONCILE] passphrase lookup failed for '{rec.name}': {e}")
            return None
