from __future__ import annotations
from typing import Optional

from pinvault_core.errors import (  # noqa: F401  re-exported for backends
    StoreError,
    StoreUnavailable,
    WriteError,
    PinFailed,
    NotFound,
)


class ContentStore:
    """
    Content-addressed blob store contract.

    - write(bytes) -> locator: deterministic address of the stored bytes
    - pin(locator): ask the store to keep the blob; success does NOT imply membership
    - is_pinned(locator): separate round trip over the current pin set
    - read(locator) -> bytes: whole blob, fragments reassembled in order

    Implementations must be safe for concurrent use; callers do not serialize
    access across unrelated locators. Nothing is retried here.
    """
    name: str = "base"

    def write(self, data: bytes) -> str:
        raise NotImplementedError

    def pin(self, locator: str) -> None:
        raise NotImplementedError

    def is_pinned(self, locator: str) -> bool:
        raise NotImplementedError

    def read(self, locator: str) -> bytes:
        raise NotImplementedError

    def healthz(self) -> dict:
        return {"status": "ok", "store": self.name}

    def close(self) -> None:
        return

    # ---------------------------
    # Helpers for backends
    # ---------------------------
    @staticmethod
    def to_bytes(data: bytes | bytearray | memoryview) -> bytes:
        if isinstance(data, bytes):
            return data
        if isinstance(data, (bytearray, memoryview)):
            return bytes(data)
        raise TypeError(f"content store accepts bytes, got {type(data).__name__}")

    @staticmethod
    def check_locator(locator: Optional[str], error: type = NotFound) -> str:
        if not isinstance(locator, str) or not locator.strip():
            raise error(f"invalid locator: {locator!r}")
        return locator.strip()
