import pytest

from pinvault_core.records import RecordVault
from pinvault_core.store.store_memory import InMemoryContentStore
from fakes import FakeSession


@pytest.fixture
def memory_store():
    return InMemoryContentStore()


@pytest.fixture
def vault(memory_store):
    return RecordVault(memory_store, verify_attempts=3, verify_interval=0, sleep=lambda s: None)


@pytest.fixture
def fake_session():
    return FakeSession()
