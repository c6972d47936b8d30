import threading
from typing import Dict, Set

from pinvault_core.logger import get_logger
from pinvault_core.utils import sha256
from pinvault_core.store.store_base import ContentStore, NotFound, PinFailed

log = get_logger("PinVault.Store.Memory")


class InMemoryContentStore(ContentStore):
    """
    Process-local content-addressed store.

    Locator is the sha256 hex digest of the bytes, so identical writes share a
    locator. Used for tests and single-process deployments.
    """

    name = "memory"

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}
        self.pins: Set[str] = set()
        self._lock = threading.Lock()

    def write(self, data: bytes) -> str:
        data = self.to_bytes(data)
        locator = sha256(data)
        with self._lock:
            self.blobs[locator] = data
        log.debug(f"[MEM WRITE] {locator} bytes={len(data)}")
        return locator

    def pin(self, locator: str) -> None:
        locator = self.check_locator(locator, PinFailed)
        with self._lock:
            if locator not in self.blobs:
                raise PinFailed(f"cannot pin unknown locator {locator}", locator=locator)
            self.pins.add(locator)
        log.debug(f"[MEM PIN] {locator}")

    def is_pinned(self, locator: str) -> bool:
        with self._lock:
            return locator in self.pins

    def unpin(self, locator: str) -> None:
        with self._lock:
            self.pins.discard(locator)

    def read(self, locator: str) -> bytes:
        locator = self.check_locator(locator)
        with self._lock:
            data = self.blobs.get(locator)
        if data is None:
            raise NotFound(f"locator not in store: {locator}")
        return data

    def gc(self) -> int:
        """Drop unpinned blobs, the way a real store garbage-collects. Returns count removed."""
        with self._lock:
            dead = [loc for loc in self.blobs if loc not in self.pins]
            for loc in dead:
                del self.blobs[loc]
        if dead:
            log.info(f"[MEM GC] removed={len(dead)}")
        return len(dead)
