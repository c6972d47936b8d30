"""
pinvault_core.crypto
--------------------
Cipher Codec for PinVault records:

- generate_key(): fresh 256-bit per-record key
- encrypt()/decrypt(): AES-256-CBC + PKCS7 over opaque bytes, producing/consuming an Envelope
- encrypt_json()/decrypt_json(): the same for JSON-serializable payloads

The envelope carries no integrity tag. A wrong key either fails the padding check
or yields garbage bytes; callers authenticate the recovered content themselves.
"""

from __future__ import annotations
from typing import Any
import json, os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .constants import KEY_SIZE, NONCE_SIZE, BLOCK_SIZE_BITS, CIPHER_ALG
from .envelope import Envelope
from .errors import InvalidKeyLength, EncryptionError, DecryptionError

BLOCK_SIZE = BLOCK_SIZE_BITS // 8


def generate_key() -> bytes:
    return os.urandom(KEY_SIZE)


def _check_key(key: Any) -> bytes:
    if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_SIZE:
        got = len(key) if isinstance(key, (bytes, bytearray)) else type(key).__name__
        raise InvalidKeyLength(f"key must be {KEY_SIZE} bytes, got {got}")
    return bytes(key)


def encrypt(plaintext: bytes, key: bytes) -> Envelope:
    key = _check_key(key)
    nonce = os.urandom(NONCE_SIZE)
    try:
        padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
        padded = padder.update(plaintext) + padder.finalize()
        enc = Cipher(algorithms.AES(key), modes.CBC(nonce)).encryptor()
        ct = enc.update(padded) + enc.finalize()
    except (TypeError, ValueError) as e:
        raise EncryptionError(f"encryption failed: {e}") from e
    return Envelope(nonce=nonce, ciphertext=ct, alg=CIPHER_ALG)


def decrypt(envelope: Envelope, key: bytes) -> bytes:
    key = _check_key(key)
    if len(envelope.nonce) != NONCE_SIZE:
        raise DecryptionError(f"nonce must be {NONCE_SIZE} bytes, got {len(envelope.nonce)}")
    if not envelope.ciphertext or len(envelope.ciphertext) % BLOCK_SIZE:
        raise DecryptionError(
            f"ciphertext length {len(envelope.ciphertext)} is not a positive multiple of {BLOCK_SIZE}"
        )
    try:
        dec = Cipher(algorithms.AES(key), modes.CBC(envelope.nonce)).decryptor()
        padded = dec.update(envelope.ciphertext) + dec.finalize()
        unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        # bad padding is the usual symptom of a wrong key
        raise DecryptionError(f"decryption failed: {e}") from e


def encrypt_json(payload: Any, key: bytes) -> Envelope:
    return encrypt(json.dumps(payload, separators=(",", ":")).encode("utf-8"), key)


def decrypt_json(envelope: Envelope, key: bytes) -> Any:
    return loads_plaintext(decrypt(envelope, key))


def loads_plaintext(plaintext: bytes) -> Any:
    """Parse recovered JSON; garbage from a mismatched key surfaces as DecryptionError."""
    try:
        return json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise DecryptionError(f"recovered payload is not valid JSON: {e}") from e
