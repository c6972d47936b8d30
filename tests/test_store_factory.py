import pytest
from pinvault_core.store import load_content_store, InMemoryContentStore, IpfsHttpStore


def test_store_factory_modes(monkeypatch):
    """load_content_store picks the backend from PINVAULT_STORE."""
    monkeypatch.delenv("PINVAULT_STORE", raising=False)
    monkeypatch.delenv("PINVAULT_IPFS_URL", raising=False)
    store = load_content_store()
    assert isinstance(store, IpfsHttpStore)
    assert store.base_url == "http://localhost:5001"

    monkeypatch.setenv("PINVAULT_STORE", "memory")
    assert isinstance(load_content_store(), InMemoryContentStore)

    monkeypatch.setenv("PINVAULT_STORE", "ipfs")
    monkeypatch.setenv("PINVAULT_IPFS_URL", "http://ipfs.internal:5001")
    monkeypatch.setenv("PINVAULT_IPFS_LOOKUP_TIMEOUT", "2.5")
    store = load_content_store()
    assert store.base_url == "http://ipfs.internal:5001"
    assert store.lookup_timeout == 2.5
    store.close()


def test_store_factory_config_overrides_env(monkeypatch):
    monkeypatch.setenv("PINVAULT_STORE", "ipfs")
    assert isinstance(load_content_store({"store": "memory"}), InMemoryContentStore)
    with pytest.raises(ValueError):
        load_content_store({"store": "s3"})


def test_memory_store_logging(caplog):
    store = InMemoryContentStore()
    store.write(b"orphan")
    store.gc()
    assert "MEM GC" in caplog.text
