import threading
from typing import Optional, Dict, Any, List
from pinvault_core.errors import AccountExists
from pinvault_core.index.models import AccountRecord
from pinvault_core.index.provider import AccountIndex, normalize_account_key


class InMemoryAccountIndex(AccountIndex):
    def __init__(self):
        self.accounts: Dict[str, AccountRecord] = {}
        self.audit = []
        self._lock = threading.Lock()

    def insert(self, rec: AccountRecord) -> None:
        rec.account_key = normalize_account_key(rec.account_key)
        with self._lock:
            if rec.account_key in self.accounts:
                raise AccountExists(rec.account_key)
            self.accounts[rec.account_key] = rec

    def lookup(self, account_key: str) -> Optional[AccountRecord]:
        return self.accounts.get(normalize_account_key(account_key))

    def delete(self, account_key: str) -> bool:
        with self._lock:
            return self.accounts.pop(normalize_account_key(account_key), None) is not None

    def list_accounts(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [
                {"account_key": r.account_key, "locator": r.locator, "created_at": r.created_at}
                for r in self.accounts.values()
            ]

    # audit
    def log_event(self, event_type: str, payload: Dict[str, Any]):
        self.audit.append((event_type, payload))

    def close(self): pass
