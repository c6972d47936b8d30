# pinvault_core/index/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from pinvault_core.utils import now_ts


@dataclass
class AccountRecord:
    """
    Index entry pointing an account at its sealed record.

    key_hex is the only copy of the record key. Anyone holding this row can
    decrypt the blob at `locator`, so the index is its own trust boundary.
    """
    account_key: str
    locator: str
    key_hex: str = field(repr=False)
    created_at: str = field(default_factory=now_ts)
