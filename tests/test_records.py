import json
import pytest

from pinvault_core.crypto import generate_key
from pinvault_core.errors import (
    SealError, WriteError, PinFailed, PinUnverified, NotFoundOrUnavailable,
    CorruptEnvelope, DecryptionError, InvalidKeyLength, OpenError, StoreUnavailable, NotFound,
)
from pinvault_core.records import RecordVault, SealedRecord
from pinvault_core.store.store_ipfs import IpfsHttpStore
from fakes import (
    GhostPinStore, PinTransportErrorStore, WriteDownStore, WriteRejectStore,
    SlowPinStore, CountingStore, FakeResponse,
)


def no_sleep(_):
    pass


def test_seal_open_roundtrip(vault, memory_store):
    sealed = vault.seal(b"alice-profile")
    assert isinstance(sealed, SealedRecord)
    assert len(sealed.key) == 32
    assert memory_store.is_pinned(sealed.locator)
    assert vault.open(sealed.locator, sealed.key) == b"alice-profile"


def test_open_with_hex_key(vault):
    sealed = vault.seal(b"alice-profile")
    assert vault.open(sealed.locator, sealed.key_hex) == b"alice-profile"


def test_key_is_not_stored_with_blob(vault, memory_store):
    sealed = vault.seal(b"alice-profile")
    blob = memory_store.read(sealed.locator)
    assert sealed.key not in blob
    assert sealed.key_hex.encode() not in blob
    assert set(json.loads(blob)) == {"v", "alg", "nonce", "ciphertext"}


def test_key_not_in_repr(vault):
    sealed = vault.seal(b"alice-profile")
    assert sealed.key_hex not in repr(sealed)


def test_each_seal_gets_fresh_key(vault):
    a = vault.seal(b"alice-profile")
    b = vault.seal(b"alice-profile")
    assert a.key != b.key
    assert a.locator != b.locator  # fresh nonce too


def test_open_with_wrong_key(vault):
    sealed = vault.seal(b"alice-profile")
    wrong = generate_key()
    try:
        out = vault.open(sealed.locator, wrong)
    except DecryptionError:
        return
    assert out != b"alice-profile"


def test_open_unknown_locator(vault):
    with pytest.raises(NotFoundOrUnavailable) as exc:
        vault.open("bogus-locator", generate_key())
    assert isinstance(exc.value, OpenError)


def test_open_store_unavailable():
    class DownStore(CountingStore):
        def read(self, locator):
            raise StoreUnavailable("connection refused")

    vault = RecordVault(DownStore(), sleep=no_sleep)
    with pytest.raises(NotFoundOrUnavailable) as exc:
        vault.open("anything", generate_key())
    assert isinstance(exc.value.__cause__, StoreUnavailable)


def test_open_corrupt_blob(vault, memory_store):
    locator = memory_store.write(b"definitely not an envelope")
    with pytest.raises(CorruptEnvelope):
        vault.open(locator, generate_key())


def test_open_bad_key(vault):
    sealed = vault.seal(b"alice-profile")
    with pytest.raises(InvalidKeyLength):
        vault.open(sealed.locator, b"short")
    with pytest.raises(InvalidKeyLength):
        vault.open(sealed.locator, "not-hex")


def test_pin_never_appears_is_unverified():
    store = GhostPinStore()
    slept = []
    vault = RecordVault(store, verify_attempts=4, verify_interval=0.5, sleep=slept.append)

    with pytest.raises(PinUnverified) as exc:
        vault.seal(b"alice-profile")

    assert store.pin_checks == 4
    assert slept == [0.5, 0.5, 0.5]
    # the blob exists, but durability could not be confirmed
    assert store.read(exc.value.locator)
    assert not isinstance(exc.value, (WriteError, PinFailed))


def test_pin_transport_error_is_pin_failed():
    vault = RecordVault(PinTransportErrorStore(), sleep=no_sleep)
    with pytest.raises(PinFailed) as exc:
        vault.seal(b"alice-profile")
    assert isinstance(exc.value, SealError)
    assert isinstance(exc.value.__cause__, StoreUnavailable)
    assert exc.value.locator  # orphaned blob is reported, not returned as a record


def test_pin_rejected_by_store():
    class RejectPin(CountingStore):
        def pin(self, locator):
            raise PinFailed("store full")

    with pytest.raises(PinFailed) as exc:
        RecordVault(RejectPin(), sleep=no_sleep).seal(b"alice-profile")
    assert exc.value.locator is not None


def test_write_unavailable_is_write_error():
    with pytest.raises(WriteError) as exc:
        RecordVault(WriteDownStore(), sleep=no_sleep).seal(b"alice-profile")
    assert isinstance(exc.value.__cause__, StoreUnavailable)


def test_write_rejected_passes_through():
    with pytest.raises(WriteError, match="repo full"):
        RecordVault(WriteRejectStore(), sleep=no_sleep).seal(b"alice-profile")


def test_verify_tolerates_slow_pin_set():
    store = SlowPinStore(lag=2)
    vault = RecordVault(store, verify_attempts=5, verify_interval=0, sleep=no_sleep)
    sealed = vault.seal(b"alice-profile")
    assert store.pin_checks == 3
    assert vault.open(sealed.locator, sealed.key) == b"alice-profile"


def test_bad_key_factory_never_writes():
    store = CountingStore()
    vault = RecordVault(store, key_factory=lambda: b"\x00" * 16, sleep=no_sleep)
    with pytest.raises(InvalidKeyLength):
        vault.seal(b"alice-profile")
    assert store.writes == 0


def test_verify_attempts_must_be_positive(memory_store):
    with pytest.raises(ValueError):
        RecordVault(memory_store, verify_attempts=0)


def test_json_records(vault):
    sealed = vault.seal_json({"fullName": "Alice", "age": 30})
    assert vault.open_json(sealed.locator, sealed.key) == {"fullName": "Alice", "age": 30}


def test_from_env(monkeypatch, memory_store):
    monkeypatch.setenv("PINVAULT_PIN_VERIFY_ATTEMPTS", "7")
    monkeypatch.setenv("PINVAULT_PIN_VERIFY_INTERVAL", "0.05")
    vault = RecordVault.from_env(memory_store)
    assert vault.verify_attempts == 7
    assert vault.verify_interval == 0.05


def test_seal_logs_locator_not_key(vault, caplog):
    sealed = vault.seal(b"alice-profile")
    assert sealed.locator in caplog.text
    assert sealed.key_hex not in caplog.text


def test_malformed_pin_set_becomes_pin_unverified(fake_session):
    fake_session.on("add", FakeResponse(200, json.dumps({"Hash": "bafk-weird"})))
    fake_session.on("pin/add", FakeResponse(200, {"Pins": ["bafk-weird"]}))
    fake_session.on("pin/ls", FakeResponse(200, '["weird"]\n'))
    store = IpfsHttpStore("http://ipfs.test:5001", session=fake_session)

    with pytest.raises(PinUnverified) as exc:
        RecordVault(store, verify_attempts=2, sleep=no_sleep).seal(b"alice-profile")
    assert exc.value.locator == "bafk-weird"


def test_any_store_error_during_pin_check_is_pin_unverified():
    class OddBackend(CountingStore):
        def is_pinned(self, locator):
            raise NotFound("pin set vanished")

    with pytest.raises(PinUnverified):
        RecordVault(OddBackend(), verify_attempts=2, sleep=no_sleep).seal(b"alice-profile")
