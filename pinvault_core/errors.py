"""
pinvault_core.errors
--------------------
Error taxonomy for the encrypted-record lifecycle.

Store-level errors come from a ContentStore backend. Seal/Open errors come from
RecordVault and keep the kind of failure intact, so an operator can tell
"durability not confirmed" (PinUnverified) apart from "data actually lost"
(NotFoundOrUnavailable).
"""

from __future__ import annotations
from typing import Optional


class VaultError(Exception):
    pass


# --------- Cipher Codec ----------
class InvalidKeyLength(VaultError, ValueError):
    pass


class EncryptionError(VaultError):
    pass


# --------- Record Orchestrator ----------
class SealError(VaultError):
    """Base for Seal failures. `locator` is set when a blob was already written."""

    def __init__(self, message: str = "", locator: Optional[str] = None):
        super().__init__(message)
        self.locator = locator


class PinUnverified(SealError):
    pass


class OpenError(VaultError):
    pass


class NotFoundOrUnavailable(OpenError):
    pass


class CorruptEnvelope(OpenError):
    pass


class DecryptionError(OpenError):
    pass


# --------- Content Store Client ----------
class StoreError(VaultError):
    pass


class StoreUnavailable(StoreError):
    pass


class NotFound(StoreError):
    pass


class WriteError(StoreError, SealError):
    def __init__(self, message: str = "", locator: Optional[str] = None):
        SealError.__init__(self, message, locator)


class PinFailed(StoreError, SealError):
    def __init__(self, message: str = "", locator: Optional[str] = None):
        SealError.__init__(self, message, locator)


# --------- Account service ----------
class AccountExists(VaultError):
    pass


class InvalidCredentials(VaultError):
    pass
