"""
sshkey_core admin trigger.

Exit codes:
  0 = reconcile completed, every candidate repaired (or nothing to do)
  2 = reconcile completed but some candidates were skipped or failed
  3 = runtime/config error (store unavailable, commit failed, bad provider)
"""

from __future__ import annotations

import argparse
import json
import sys
import textwrap
from typing import List, Optional

from sshkey_core.crypto import compute_ssh_fingerprint
from sshkey_core.reconciler import Reconciler
from sshkey_core.secrets import SecretStoreError, load_secret_store
from sshkey_core.storage import StorageError, load_storage_provider


def eprint(*args) -> None:
    print(*args, file=sys.stderr)


def _storage_config(args) -> dict:
    return {"provider": "sqlite", "sqlite_path": args.db} if args.db else {}


def cmd_reconcile(args) -> int:
    store = load_storage_provider(_storage_config(args))
    try:
        secrets = load_secret_store({"provider": "file", "secrets_dir": args.secrets_dir} if args.secrets_dir else None)
        summary = Reconciler(store, secrets).reconcile_all()
    finally:
        store.close()

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        for o in summary.outcomes:
            suffix = f" ({o.reason})" if o.reason else ""
            print(f"{o.status.value:<18} {o.name} [{o.key_id}]{suffix}")
        print(
            f"\nSummary: already_valid={summary.already_valid} succeeded={summary.succeeded} "
            f"skipped={summary.skipped} failed={summary.failed} committed={summary.committed}"
        )

    if not summary.ok:
        eprint(f"ERROR: {summary.error.value}: {summary.detail}")
        return 3
    return 2 if (summary.skipped or summary.failed) else 0


def cmd_list(args) -> int:
    store = load_storage_provider(_storage_config(args))
    try:
        records = store.fetch_all()
    finally:
        store.close()

    for rec in records:
        if rec.needs_public_key():
            state, fpr = "needs-repair", "-"
        else:
            state = "ok"
            try:
                fpr = compute_ssh_fingerprint(rec.public_key)
            except ValueError:
                fpr = "invalid"
        print(f"{rec.id}  {rec.name:<24} {rec.key_type:<8} {state:<13} {fpr}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        prog="sshkey-core",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="Maintain managed SSH key records.",
        epilog=textwrap.dedent("""\
        Examples:
          python -m sshkey_core reconcile
          python -m sshkey_core reconcile --db db/sshkeys.db --secrets-dir secrets --json
          python -m sshkey_core list
        """),
    )
    sub = ap.add_subparsers(dest="command", required=True)

    rp = sub.add_parser("reconcile", help="Derive missing/placeholder public keys")
    rp.add_argument("--db", help="SQLite database path (default: $SSHKEY_DB_PATH)")
    rp.add_argument("--secrets-dir", help="Secret directory (default: $SSHKEY_SECRETS_DIR)")
    rp.add_argument("--json", action="store_true", help="Print the summary as JSON")
    rp.set_defaults(func=cmd_reconcile)

    lp = sub.add_parser("list", help="List key records and their public key state")
    lp.add_argument("--db", help="SQLite database path (default: $SSHKEY_DB_PATH)")
    lp.set_defaults(func=cmd_list)

    args = ap.parse_args(argv)

    try:
        return args.func(args)
    except (ValueError, StorageError, SecretStoreError) as ex:
        eprint(f"ERROR: {ex}")
        return 3


if __name__ == "__main__":
    sys.exit(main())
