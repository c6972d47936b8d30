# pinvault_core/index/__init__.py

from .models import AccountRecord
from .provider import AccountIndex
from .providers.memory_provider import InMemoryAccountIndex
from .providers.sqlite_provider import SQLiteAccountIndex
from pinvault_core.constants import DEFAULT_DB_PATH
import os


def load_account_index(config: dict | None = None) -> AccountIndex:
    """
    Factory resolver for selecting the account index backend.

        - sqlite (default)
        - memory
    """
    config = config or {}
    provider = config.get("provider") or os.getenv("PINVAULT_INDEX", "sqlite")

    if provider == "memory":
        return InMemoryAccountIndex()

    if provider == "sqlite":
        db_path = config.get("sqlite_path") or os.getenv("PINVAULT_DB_PATH", DEFAULT_DB_PATH)
        return SQLiteAccountIndex(db_path)

    raise ValueError(f"Unknown account index provider: {provider}")


__all__ = [
    "AccountRecord",
    "AccountIndex",
    "InMemoryAccountIndex",
    "SQLiteAccountIndex",
    "load_account_index",
]
