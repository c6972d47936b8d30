"""
PinVault Core Package
=====================
Encrypted-record lifecycle shared by the PinVault services.

Provides:
- AES-256-CBC envelope codec with per-record keys
- Content-addressed store clients (IPFS/Kubo over HTTP, in-memory)
- RecordVault: seal -> pin -> verify, and read -> decrypt
- Account index providers (SQLite default) and the account service
"""

from .envelope import Envelope
from .crypto import generate_key, encrypt, decrypt
from .records import RecordVault, SealedRecord
from .errors import (
    VaultError, InvalidKeyLength, EncryptionError, DecryptionError,
    StoreError, StoreUnavailable, WriteError, PinFailed, NotFound,
    SealError, PinUnverified, OpenError, NotFoundOrUnavailable, CorruptEnvelope,
    AccountExists, InvalidCredentials,
)

__all__ = [
    "Envelope",
    "generate_key",
    "encrypt",
    "decrypt",
    "RecordVault",
    "SealedRecord",
    "VaultError",
    "InvalidKeyLength",
    "EncryptionError",
    "DecryptionError",
    "StoreError",
    "StoreUnavailable",
    "WriteError",
    "PinFailed",
    "NotFound",
    "SealError",
    "PinUnverified",
    "OpenError",
    "NotFoundOrUnavailable",
    "CorruptEnvelope",
    "AccountExists",
    "InvalidCredentials",
]
