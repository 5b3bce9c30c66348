"""Tests for the envelope integrity hash and the hasher pool."""
import hashlib
import hmac
import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from passvault.app.schemas.vault import UpdateItem, UploadItem
from passvault.app.security.integrity import HasherPool, canonical_json

KEY = "test-integrity-key"


def reference_hash(items) -> str:
    body = json.dumps(items, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return hmac.new(KEY.encode(), body, hashlib.sha256).hexdigest()


class TestCanonicalJson:
    def test_compact_and_in_field_order(self):
        items = [UploadItem(hash="h1", payload="p1", client_side_id="c1")]
        assert canonical_json(items) == b'[{"client_side_id":"c1","payload":"p1","hash":"h1"}]'

    def test_update_item_keeps_version(self):
        items = [UpdateItem(client_side_id="c1", payload="p", hash="h", version=3)]
        assert canonical_json(items).endswith(b'"version":3}]')

    def test_unknown_fields_are_dropped(self):
        items = [UploadItem.model_validate({"client_side_id": "c1", "payload": "p", "hash": "h", "extra": 1})]
        assert b"extra" not in canonical_json(items)

    def test_non_ascii_is_not_escaped(self):
        items = [UploadItem(client_side_id="c1", payload="пароль", hash="h")]
        assert "пароль".encode("utf-8") in canonical_json(items)

    def test_empty_list(self):
        assert canonical_json([]) == b"[]"


class TestHasherPool:
    def test_matches_plain_hmac(self):
        pool = HasherPool(KEY, size=2)
        raw = [{"client_side_id": "c1", "payload": "p1", "hash": "h1"}]
        items = [UploadItem(**item) for item in raw]
        assert pool.envelope_hash(items) == reference_hash(raw)

    def test_verify(self):
        pool = HasherPool(KEY, size=2)
        items = [UploadItem(client_side_id="c1", payload="p1", hash="h1")]
        good = pool.envelope_hash(items)

        assert pool.verify(items, good)
        assert not pool.verify(items, good[:-1] + ("0" if good[-1] != "0" else "1"))
        assert not pool.verify(items, "")
        assert not pool.verify(items, "ключ")

    def test_reused_instances_start_clean(self):
        pool = HasherPool(KEY, size=1)
        first = pool.digest(b"payload")
        for _ in range(5):
            assert pool.digest(b"payload") == first

    def test_state_does_not_leak_between_acquisitions(self):
        pool = HasherPool(KEY, size=1)
        with pool.hasher() as h:
            h.update(b"left over")
        with pool.hasher() as h:
            h.update(b"payload")
            assert h.hexdigest() == hmac.new(KEY.encode(), b"payload", hashlib.sha256).hexdigest()

    def test_used_instance_is_never_handed_out_again(self):
        pool = HasherPool(KEY, size=1)
        with pool.hasher() as first:
            first.update(b"payload")
        with pool.hasher() as second:
            assert second is not first
            assert second.hexdigest() == hmac.new(KEY.encode(), b"", hashlib.sha256).hexdigest()

    def test_empty_pool_does_not_block(self):
        pool = HasherPool(KEY, size=1)
        with pool.hasher() as outer:
            with pool.hasher() as inner:
                assert outer is not inner

    def test_concurrent_use(self):
        pool = HasherPool(KEY, size=2)
        payloads = [f"payload-{i}".encode() for i in range(50)]
        with ThreadPoolExecutor(max_workers=8) as executor:
            digests = list(executor.map(pool.digest, payloads))
        expected = [hmac.new(KEY.encode(), p, hashlib.sha256).hexdigest() for p in payloads]
        assert digests == expected

    def test_different_keys_differ(self):
        items = [UploadItem(client_side_id="c1", payload="p1", hash="h1")]
        assert HasherPool("a").envelope_hash(items) != HasherPool("b").envelope_hash(items)

    def test_empty_key_rejected(self):
        with pytest.raises(ValueError):
            HasherPool("")
