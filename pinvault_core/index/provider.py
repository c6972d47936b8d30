# pinvault_core/index/provider.py
from typing import Optional, Dict, Any, List
from pinvault_core.index.models import AccountRecord


def normalize_account_key(account_key: str) -> str:
    return account_key.strip().lower()


class AccountIndex:
    # Interface
    def insert(self, rec: AccountRecord) -> None: ...  # raises AccountExists
    def lookup(self, account_key: str) -> Optional[AccountRecord]: ...
    def delete(self, account_key: str) -> bool: ...
    def list_accounts(self) -> List[Dict[str, Any]]: ...
    def log_event(self, event_type: str, payload: Dict[str, Any]) -> None: ...
    def close(self) -> None: ...
