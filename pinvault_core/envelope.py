"""
pinvault_core.envelope
----------------------
Defines the Envelope class, the container stored in place of plaintext.

Key features:
- nonce and ciphertext carried as named fields, never by position
- self-describing JSON wire form (alg + schema version) so a stored blob stays
  decodable if cipher parameters change later
- reads the legacy {"iv": hex, "data": hex} blobs written before the keyed format
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict
import binascii
import json

from .constants import SCHEMA_VERSION, CIPHER_ALG, NONCE_SIZE
from .errors import CorruptEnvelope
from .utils import b64e, b64d, hexd, canonical_json

SUPPORTED_ALGS = {CIPHER_ALG: NONCE_SIZE}


@dataclass(frozen=True)
class Envelope:
    nonce: bytes
    ciphertext: bytes
    alg: str = CIPHER_ALG
    schema_ver: str = SCHEMA_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "v": self.schema_ver,
            "alg": self.alg,
            "nonce": b64e(self.nonce),
            "ciphertext": b64e(self.ciphertext),
        }

    def to_bytes(self) -> bytes:
        """Canonical wire form written to the content store."""
        return canonical_json(self.to_dict())

    @classmethod
    def from_dict(cls, data: Any) -> "Envelope":
        if not isinstance(data, dict):
            raise CorruptEnvelope("envelope is not a JSON object")

        try:
            if "nonce" in data:
                alg = data.get("alg", CIPHER_ALG)
                nonce = b64d(data["nonce"])
                ciphertext = b64d(data["ciphertext"])
                schema_ver = str(data.get("v", SCHEMA_VERSION))
            elif "iv" in data:
                # legacy layout: hex iv + hex data, always aes-256-cbc
                alg = CIPHER_ALG
                nonce = hexd(data["iv"])
                ciphertext = hexd(data["data"])
                schema_ver = "0"
            else:
                raise CorruptEnvelope("envelope has no nonce field")
        except KeyError as e:
            raise CorruptEnvelope(f"envelope missing field {e}") from e
        except (binascii.Error, ValueError, AttributeError, TypeError) as e:
            raise CorruptEnvelope(f"envelope field is not valid encoded bytes: {e}") from e

        if not isinstance(alg, str) or alg not in SUPPORTED_ALGS:
            raise CorruptEnvelope(f"unsupported envelope alg: {alg!r}")
        if len(nonce) != SUPPORTED_ALGS[alg]:
            raise CorruptEnvelope(f"nonce must be {SUPPORTED_ALGS[alg]} bytes, got {len(nonce)}")

        return cls(nonce=nonce, ciphertext=ciphertext, alg=alg, schema_ver=schema_ver)

    @classmethod
    def from_bytes(cls, raw: bytes) -> "Envelope":
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise CorruptEnvelope(f"envelope is not valid JSON: {e}") from e
        return cls.from_dict(data)
