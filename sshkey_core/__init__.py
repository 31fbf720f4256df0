"""
SSHKey Core Package
===================
Primitives for keeping managed SSH key records consistent with the private
key material held in a secret store.

Provides:
- KeyRecord model and pluggable record storage (SQLite default)
- Pluggable secret storage (file default)
- Public key derivation from OpenSSH / PEM / raw private keys
- Reconciler that backfills missing or placeholder public keys
"""

__version__ = "0.1.0"

from .reconciler import Reconciler, ReconcileSummary, CandidateOutcome, CandidateStatus, RunError

__all__ = [
    "Reconciler",
    "ReconcileSummary",
    "CandidateOutcome",
    "CandidateStatus",
    "RunError",
]
