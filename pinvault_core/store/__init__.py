# pinvault_core/store/__init__.py
import os

from .store_base import ContentStore
from .store_memory import InMemoryContentStore
from .store_ipfs import IpfsHttpStore
from pinvault_core.constants import DEFAULT_IPFS_URL, DEFAULT_IPFS_TIMEOUT, DEFAULT_LOOKUP_TIMEOUT


def load_content_store(config: dict | None = None) -> ContentStore:
    """
    Factory resolver for the process-wide content store.

    Call once at startup and pass the result into RecordVault.
        - ipfs (default)
        - memory
    """
    config = config or {}
    backend = (config.get("store") or os.getenv("PINVAULT_STORE", "ipfs")).lower()

    if backend == "memory":
        return InMemoryContentStore()

    if backend == "ipfs":
        return IpfsHttpStore(
            base_url=config.get("ipfs_url") or os.getenv("PINVAULT_IPFS_URL", DEFAULT_IPFS_URL),
            timeout=float(config.get("ipfs_timeout") or os.getenv("PINVAULT_IPFS_TIMEOUT", DEFAULT_IPFS_TIMEOUT)),
            lookup_timeout=float(
                config.get("lookup_timeout") or os.getenv("PINVAULT_IPFS_LOOKUP_TIMEOUT", DEFAULT_LOOKUP_TIMEOUT)
            ),
        )

    raise ValueError(f"Unknown content store: {backend}")


__all__ = [
    "ContentStore",
    "InMemoryContentStore",
    "IpfsHttpStore",
    "load_content_store",
]
