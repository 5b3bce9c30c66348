# passvault/app/security/integrity.py
"""
Transport integrity check for mutating batches.

Upload and update bodies carry `hash`: the hex HMAC-SHA256, keyed with the
shared INTEGRITY_HASH_KEY, of the canonical JSON of the item list.

Canonical JSON is produced by the server from the parsed request models:
- keys in model declaration order, unknown keys dropped
- compact separators (",", ":")
- non-ASCII characters left unescaped, UTF-8 encoded

Clients must produce the same bytes to pass the check. The key is shared by
every client, so a valid hash proves the body was not altered in transit by
someone without the key; it does not authenticate the user.
"""
import hashlib
import hmac
import json
import queue
from contextlib import contextmanager
from typing import Iterator, Sequence

from pydantic import BaseModel


def canonical_json(items: Sequence[BaseModel]) -> bytes:
    data = [item.model_dump(mode="json") for item in items]
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


class HasherPool:
    """
    Pool of pre-keyed HMAC-SHA256 instances.

    An HMAC cannot be reset once data is fed to it, so instances are single
    use: `hasher()` takes a spare copy of the keyed state out of the queue,
    and on release the used instance is discarded and a fresh copy of the
    keyed state is queued in its place. The queue only saves re-keying on
    the request path; an empty queue copies on demand, so acquisition never
    blocks. Safe to share between concurrent requests; a single acquired
    instance is not.
    """

    def __init__(self, key: str, size: int = 16):
        if not key:
            raise ValueError("integrity key must not be empty")
        self._pristine = hmac.new(key.encode("utf-8"), digestmod=hashlib.sha256)
        self._size = size
        self._free: "queue.LifoQueue[hmac.HMAC]" = queue.LifoQueue(maxsize=size)
        for _ in range(size):
            self._free.put_nowait(self._pristine.copy())

    @contextmanager
    def hasher(self) -> Iterator["hmac.HMAC"]:
        try:
            h = self._free.get_nowait()
        except queue.Empty:
            h = self._pristine.copy()
        try:
            yield h
        finally:
            # Refill with a fresh copy; the used instance is dropped
            try:
                self._free.put_nowait(self._pristine.copy())
            except queue.Full:
                pass

    def digest(self, data: bytes) -> str:
        with self.hasher() as h:
            h.update(data)
            return h.hexdigest()

    def envelope_hash(self, items: Sequence[BaseModel]) -> str:
        return self.digest(canonical_json(items))

    def verify(self, items: Sequence[BaseModel], supplied: str) -> bool:
        expected = self.envelope_hash(items)
        return hmac.compare_digest(expected.encode("ascii"), (supplied or "").encode("utf-8"))
