"""
pinvault_core.accounts
----------------------
Account registration and sign-in on top of RecordVault and an AccountIndex.

The profile and a bcrypt hash of the password are sealed together into one
record; the index only holds (email, locator, key). Sign-in reopens the record
and compares the password against the embedded hash, which is also what
authenticates the decrypted content.
"""

from __future__ import annotations
from typing import Any, Dict

import bcrypt

from .errors import AccountExists, InvalidCredentials
from .index.models import AccountRecord
from .index.provider import AccountIndex, normalize_account_key
from .logger import get_logger
from .records import RecordVault

log = get_logger("PinVault.Accounts")

PASSWORD_FIELD = "passwordHash"
# bcrypt only reads the first 72 bytes; truncate explicitly on both hash and check
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class AccountService:
    def __init__(self, vault: RecordVault, index: AccountIndex, bcrypt_rounds: int = 10):
        self.vault = vault
        self.index = index
        self.bcrypt_rounds = bcrypt_rounds

    def _hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    @staticmethod
    def _verify_password(password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
        except ValueError:
            # malformed stored hash: treat as mismatch
            return False

    def register(self, email: str, profile: Dict[str, Any], password: str) -> str:
        """Seal the profile for `email` and index it. Returns the record locator."""
        account_key = normalize_account_key(email)
        if self.index.lookup(account_key) is not None:
            raise AccountExists(account_key)

        payload = {k: v for k, v in profile.items() if k != PASSWORD_FIELD}
        payload[PASSWORD_FIELD] = self._hash_password(password)

        sealed = self.vault.seal_json(payload)
        # a concurrent register for the same email loses here; its blob stays orphaned
        self.index.insert(AccountRecord(account_key=account_key, locator=sealed.locator, key_hex=sealed.key_hex))
        self.index.log_event("account_registered", {"account_key": account_key, "locator": sealed.locator})
        log.info(f"[REGISTER] account={account_key} locator={sealed.locator}")
        return sealed.locator

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """Return the stored profile (without the password hash) if the password matches."""
        account_key = normalize_account_key(email)
        rec = self.index.lookup(account_key)
        if rec is None:
            log.info(f"[SIGNIN] unknown account={account_key}")
            raise InvalidCredentials("invalid email or password")

        data = self.vault.open_json(rec.locator, rec.key_hex)
        stored_hash = data.get(PASSWORD_FIELD) if isinstance(data, dict) else None
        if not isinstance(stored_hash, str) or not self._verify_password(password, stored_hash):
            log.info(f"[SIGNIN] rejected account={account_key}")
            raise InvalidCredentials("invalid email or password")

        log.info(f"[SIGNIN] ok account={account_key}")
        return {k: v for k, v in data.items() if k != PASSWORD_FIELD}
