# pinvault_core/store/store_ipfs.py
import json
from typing import Optional

import requests
from requests.adapters import HTTPAdapter

from pinvault_core.constants import DEFAULT_IPFS_URL, DEFAULT_IPFS_TIMEOUT, DEFAULT_LOOKUP_TIMEOUT
from pinvault_core.logger import get_logger
from pinvault_core.store.store_base import (
    ContentStore, StoreUnavailable, WriteError, PinFailed, NotFound,
)

log = get_logger("PinVault.Store.IPFS")

# Kubo reports missing content through the error message only
NOT_FOUND_MARKERS = (
    "not found",
    "context deadline exceeded",
    "invalid path",
    "invalid cid",
    "no link named",
    "failed to resolve",
)


class IpfsHttpStore(ContentStore):
    """
    Content store backed by an IPFS node's HTTP RPC API (Kubo, /api/v0).

    Features:
    - add with pin=false so pinning is always an explicit, separately checked step
    - pin/ls enumerated as a stream, stopping at the first match
    - cat bounded by a node-side lookup timeout, chunks reassembled in order
    - one pooled requests.Session shared by all concurrent callers
    """

    name = "ipfs"

    def __init__(
        self,
        base_url: str = DEFAULT_IPFS_URL,
        timeout: float = DEFAULT_IPFS_TIMEOUT,
        lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT,
        session: Optional[requests.Session] = None,
        pool_size: int = 16,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.lookup_timeout = lookup_timeout
        self._owns_session = session is None
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/v0/{path}"

    def _post(self, path: str, timeout: Optional[float] = None, **kwargs):
        url = self._url(path)
        try:
            return self.session.post(url, timeout=timeout or self.timeout, **kwargs)
        except requests.RequestException as e:
            log.error(f"[IPFS] {path} transport error: {e}")
            raise StoreUnavailable(f"IPFS node unreachable at {self.base_url}: {e}") from e

    @staticmethod
    def _error_message(res) -> str:
        try:
            body = res.json()
            if isinstance(body, dict) and body.get("Message"):
                return str(body["Message"])
        except ValueError:
            pass
        return (res.text or res.reason or "").strip()

    # ------------------------------------------------------------------
    # Write / pin
    # ------------------------------------------------------------------
    def write(self, data: bytes) -> str:
        data = self.to_bytes(data)
        res = self._post(
            "add",
            params={"pin": "false", "cid-version": "1"},
            files={"file": ("blob", data, "application/octet-stream")},
        )
        if not res.ok:
            msg = self._error_message(res)
            log.error(f"[IPFS ADD] {res.status_code}: {msg}")
            raise WriteError(f"IPFS add rejected ({res.status_code}): {msg}")
        try:
            # add may stream one JSON object per file; ours is the last line
            last = [line for line in res.text.splitlines() if line.strip()][-1]
            cid = json.loads(last)["Hash"]
        except (IndexError, ValueError, KeyError, TypeError) as e:
            raise WriteError(f"IPFS add returned an unreadable response: {e}") from e
        log.info(f"[IPFS ADD] cid={cid} bytes={len(data)}")
        return cid

    def pin(self, locator: str) -> None:
        locator = self.check_locator(locator, PinFailed)
        res = self._post("pin/add", params={"arg": locator})
        if not res.ok:
            msg = self._error_message(res)
            log.error(f"[IPFS PIN] {locator} {res.status_code}: {msg}")
            raise PinFailed(f"IPFS pin rejected ({res.status_code}): {msg}", locator=locator)
        log.info(f"[IPFS PIN] cid={locator}")

    def is_pinned(self, locator: str) -> bool:
        res = self._post("pin/ls", params={"type": "recursive", "stream": "true"}, stream=True)
        with res:
            if not res.ok:
                msg = self._error_message(res)
                raise StoreUnavailable(f"IPFS pin/ls failed ({res.status_code}): {msg}")
            try:
                for line in res.iter_lines():
                    if not line:
                        continue
                    entry = json.loads(line)
                    if not isinstance(entry, dict):
                        raise StoreUnavailable(f"IPFS pin/ls returned a non-object entry: {entry!r}")
                    if entry.get("Cid") == locator:
                        return True
                    # non-streaming nodes answer with a single {"Keys": {...}} object
                    if locator in (entry.get("Keys") or {}):
                        return True
            except requests.RequestException as e:
                raise StoreUnavailable(f"IPFS pin/ls stream broke: {e}") from e
            except (ValueError, TypeError) as e:
                raise StoreUnavailable(f"IPFS pin/ls returned malformed data: {e}") from e
        return False

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    def read(self, locator: str) -> bytes:
        locator = self.check_locator(locator)
        res = self._post(
            "cat",
            params={"arg": locator, "timeout": f"{self.lookup_timeout}s"},
            timeout=self.timeout + self.lookup_timeout,
            stream=True,
        )
        with res:
            if not res.ok:
                msg = self._error_message(res)
                if any(marker in msg.lower() for marker in NOT_FOUND_MARKERS):
                    log.warning(f"[IPFS CAT] {locator} not found: {msg}")
                    raise NotFound(f"{locator}: {msg}")
                raise StoreUnavailable(f"IPFS cat failed ({res.status_code}): {msg}")
            try:
                data = b"".join(chunk for chunk in res.iter_content(chunk_size=64 * 1024) if chunk)
            except requests.RequestException as e:
                raise StoreUnavailable(f"IPFS cat stream broke for {locator}: {e}") from e
        log.debug(f"[IPFS CAT] cid={locator} bytes={len(data)}")
        return data

    def healthz(self) -> dict:
        try:
            res = self._post("version")
        except StoreUnavailable as e:
            return {"status": "down", "store": self.name, "error": str(e)}
        if not res.ok:
            return {"status": "down", "store": self.name, "error": self._error_message(res)}
        try:
            body = res.json()
        except ValueError as e:
            return {"status": "down", "store": self.name, "error": f"unreadable version response: {e}"}
        version = body.get("Version") if isinstance(body, dict) else None
        return {"status": "ok", "store": self.name, "version": version}

    def close(self) -> None:
        if self._owns_session:
            self.session.close()
