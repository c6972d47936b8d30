"""
pinvault_core.utils
-------------------
Lightweight helpers for base64/hex coding, timestamping, and canonical JSON serialization.
Envelope encoding relies on these to stay deterministic across processes.
"""

from __future__ import annotations
import base64, binascii, json, time, hashlib
from typing import Any, Dict

def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def b64d(s: str) -> bytes:
    # validate=True rejects stray characters instead of silently dropping them
    return base64.b64decode(s.encode("ascii"), validate=True)

def hexd(s: str) -> bytes:
    return binascii.unhexlify(s)

def now_ts() -> str:
    # RFC3339 / ISO 8601 in UTC, second precision
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

def canonical_json(obj: Dict[str, Any]) -> bytes:
    return json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False).encode("utf-8")

def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()
