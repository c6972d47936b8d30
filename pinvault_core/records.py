"""
pinvault_core.records
---------------------
RecordVault composes the Cipher Codec and a ContentStore into the two record flows:

    seal(payload) -> SealedRecord(locator, key)
        GenerateKey -> Encrypt -> Write -> Pin -> VerifyPin -> Done
    open(locator, key) -> payload
        Read -> Decode -> Decrypt -> Done

The first failure in a sequence is raised as-is (kind preserved, cause chained).
There is no rollback: a blob written but not pinned stays orphaned until the
store collects it. The only retry is the bounded pin-verification poll.

The returned key is never written to the store. Persisting (locator, key) is the
account index's job, and whoever can read that index can decrypt the record.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Union
import binascii
import json
import os
import time

from . import crypto
from .constants import DEFAULT_VERIFY_ATTEMPTS, DEFAULT_VERIFY_INTERVAL
from .envelope import Envelope
from .errors import (
    StoreError, WriteError, PinFailed, PinUnverified,
    NotFoundOrUnavailable, CorruptEnvelope, DecryptionError, InvalidKeyLength,
)
from .logger import get_logger
from .store.store_base import ContentStore

log = get_logger("PinVault.Records")

KeyLike = Union[bytes, str]


@dataclass(frozen=True)
class SealedRecord:
    locator: str
    key: bytes = field(repr=False)

    @property
    def key_hex(self) -> str:
        return self.key.hex()


def coerce_key(key: KeyLike) -> bytes:
    """Accept the raw key or the hex form kept by the account index."""
    if isinstance(key, str):
        try:
            return binascii.unhexlify(key)
        except (binascii.Error, ValueError) as e:
            raise InvalidKeyLength(f"key is not valid hex: {e}") from e
    return key


class RecordVault:
    def __init__(
        self,
        store: ContentStore,
        verify_attempts: int = DEFAULT_VERIFY_ATTEMPTS,
        verify_interval: float = DEFAULT_VERIFY_INTERVAL,
        key_factory: Callable[[], bytes] = crypto.generate_key,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if verify_attempts < 1:
            raise ValueError("verify_attempts must be >= 1")
        self.store = store
        self.verify_attempts = verify_attempts
        self.verify_interval = verify_interval
        self.key_factory = key_factory
        self._sleep = sleep

    @classmethod
    def from_env(cls, store: ContentStore) -> "RecordVault":
        return cls(
            store,
            verify_attempts=int(os.getenv("PINVAULT_PIN_VERIFY_ATTEMPTS", DEFAULT_VERIFY_ATTEMPTS)),
            verify_interval=float(os.getenv("PINVAULT_PIN_VERIFY_INTERVAL", DEFAULT_VERIFY_INTERVAL)),
        )

    # ------------------------------------------------------------------
    # Seal
    # ------------------------------------------------------------------
    def seal(self, payload: bytes) -> SealedRecord:
        key = self.key_factory()
        envelope = crypto.encrypt(payload, key)  # InvalidKeyLength raised before any write
        blob = envelope.to_bytes()

        try:
            locator = self.store.write(blob)
        except WriteError:
            log.error("[SEAL] write rejected by store")
            raise
        except StoreError as e:
            log.error(f"[SEAL] write failed: {e}")
            raise WriteError(f"write failed: {e}") from e

        try:
            self.store.pin(locator)
        except PinFailed as e:
            log.error(f"[SEAL] pin rejected locator={locator}: {e}")
            if e.locator is None:
                e.locator = locator
            raise
        except StoreError as e:
            log.error(f"[SEAL] pin failed locator={locator}: {e}")
            raise PinFailed(f"pin failed: {e}", locator=locator) from e

        self._verify_pin(locator)
        log.info(f"[SEAL] done locator={locator} bytes={len(blob)}")
        return SealedRecord(locator=locator, key=key)

    def _verify_pin(self, locator: str) -> None:
        for attempt in range(1, self.verify_attempts + 1):
            try:
                if self.store.is_pinned(locator):
                    log.debug(f"[SEAL] pin verified locator={locator} attempt={attempt}")
                    return
            except StoreError as e:
                log.warning(f"[SEAL] pin check failed locator={locator} attempt={attempt}: {e}")
            if attempt < self.verify_attempts:
                self._sleep(self.verify_interval)

        log.error(f"[SEAL] pin unverified locator={locator} attempts={self.verify_attempts}")
        raise PinUnverified(
            f"blob written and pinned but not observed in pin set after {self.verify_attempts} checks",
            locator=locator,
        )

    def seal_json(self, obj: Any) -> SealedRecord:
        return self.seal(json.dumps(obj, separators=(",", ":")).encode("utf-8"))

    # ------------------------------------------------------------------
    # Open
    # ------------------------------------------------------------------
    def open(self, locator: str, key: KeyLike) -> bytes:
        key = coerce_key(key)
        try:
            blob = self.store.read(locator)
        except StoreError as e:
            log.error(f"[OPEN] read failed locator={locator}: {e}")
            raise NotFoundOrUnavailable(f"{locator}: {e}") from e

        try:
            envelope = Envelope.from_bytes(blob)
            plaintext = crypto.decrypt(envelope, key)
        except (CorruptEnvelope, DecryptionError, InvalidKeyLength) as e:
            log.error(f"[OPEN] {type(e).__name__} locator={locator}: {e}")
            raise
        log.info(f"[OPEN] done locator={locator}")
        return plaintext

    def open_json(self, locator: str, key: KeyLike) -> Any:
        return crypto.loads_plaintext(self.open(locator, key))
