from __future__ import annotations
from typing import Optional, Dict, Any, List
import json, sqlite3, os, threading
from pinvault_core.errors import AccountExists
from pinvault_core.index.models import AccountRecord
from pinvault_core.index.provider import AccountIndex, normalize_account_key
from pinvault_core.utils import now_ts


class SQLiteAccountIndex(AccountIndex):
    def __init__(self, path="db/pinvault.db"):
        # If no directory, default to current working directory
        dir_path = os.path.dirname(path) or "."
        os.makedirs(dir_path, exist_ok=True)
        self.db = sqlite3.connect(path, check_same_thread=False)
        # one connection shared across request threads
        self._lock = threading.Lock()

        self._init()

    def _init(self) -> None:
        c = self.db.cursor()
        c.execute("""CREATE TABLE IF NOT EXISTS accounts(
            account_key TEXT PRIMARY KEY,
            locator TEXT NOT NULL,
            key_hex TEXT NOT NULL,
            created_at TEXT NOT NULL
        )""")
        c.execute("""CREATE TABLE IF NOT EXISTS audit(
            ts TEXT,
            event_type TEXT,
            payload TEXT
        )""")
        self.db.commit()

    def insert(self, rec: AccountRecord) -> None:
        rec.account_key = normalize_account_key(rec.account_key)
        with self._lock:
            try:
                self.db.execute(
                    "INSERT INTO accounts(account_key,locator,key_hex,created_at) VALUES(?,?,?,?)",
                    (rec.account_key, rec.locator, rec.key_hex, rec.created_at),
                )
                self.db.commit()
            except sqlite3.IntegrityError as e:
                self.db.rollback()
                raise AccountExists(rec.account_key) from e

    def lookup(self, account_key: str) -> Optional[AccountRecord]:
        with self._lock:
            cur = self.db.execute(
                "SELECT account_key,locator,key_hex,created_at FROM accounts WHERE account_key=?",
                (normalize_account_key(account_key),),
            )
            row = cur.fetchone()
        if not row: return None
        return AccountRecord(*row)

    def delete(self, account_key: str) -> bool:
        with self._lock:
            cur = self.db.execute("DELETE FROM accounts WHERE account_key=?", (normalize_account_key(account_key),))
            self.db.commit()
        return cur.rowcount > 0

    def list_accounts(self) -> List[Dict[str, Any]]:
        with self._lock:
            cur = self.db.execute("SELECT account_key, locator, created_at FROM accounts")
            rows = cur.fetchall()
        return [dict(zip(["account_key", "locator", "created_at"], r)) for r in rows]

    def log_event(self, event_type: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            self.db.execute("INSERT INTO audit(ts,event_type,payload) VALUES(?,?,?)",
                            (now_ts(), event_type, json.dumps(payload, separators=(",", ":"), sort_keys=True)))
            self.db.commit()

    def close(self):
        self.db.close()
