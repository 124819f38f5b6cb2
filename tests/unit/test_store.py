"""
Unit tests for dodvault/store/

Coverage plan
─────────────
models.py   → 2 tests  (DocRow defaults, str)
db.py       → 19 tests (put/assign id, upsert, revisions, conflicts,
                        special members, get, miss, all_docs order and
                        include_docs, info, schema auto-create, concurrency,
                        unencodable text)
─────────────────────────────────────────────────────────────────
Total       = 21 tests
"""

import asyncio
import re

import pytest


# ─────────────────────────────────────────────────────────────────────────────
# 1. Models
# ─────────────────────────────────────────────────────────────────────────────

class TestDocRow:

    def test_doc_defaults_to_none(self):
        from dodvault.store.models import DocRow
        row = DocRow(id="a", rev="1-x")
        assert row.doc is None

    def test_str_shows_id_and_rev(self):
        from dodvault.store.models import DocRow
        assert "a" in str(DocRow(id="a", rev="1-x"))


# ─────────────────────────────────────────────────────────────────────────────
# 2. DocumentStore
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def store(tmp_path):
    """Return a fresh DocumentStore backed by a temporary SQLite file."""
    from dodvault.store.db import DocumentStore
    return DocumentStore("testdb", base_dir=str(tmp_path))


def _run(coro):
    return asyncio.run(coro)


class TestDocumentStorePut:
    """put() — insert-or-update keyed by _id."""

    def test_put_without_id_assigns_one(self, store):
        result = _run(store.put({"Class": "Wizard"}))
        assert isinstance(result.id, str)
        assert len(result.id) == 32

    def test_put_with_id_keeps_it(self, store):
        result = _run(store.put({"_id": "r1", "Class": "Rogue"}))
        assert result.id == "r1"

    def test_first_revision_is_generation_one(self, store):
        result = _run(store.put({"_id": "r1"}))
        assert re.fullmatch(r"1-[0-9a-f]{32}", result.rev)

    def test_put_existing_id_without_rev_overwrites(self, store):
        _run(store.put({"_id": "r1", "Class": "Rogue"}))
        second = _run(store.put({"_id": "r1", "Class": "Bard"}))
        doc = _run(store.get("r1"))
        assert doc["Class"] == "Bard"
        assert second.rev.startswith("2-")

    def test_put_with_current_rev_updates(self, store):
        first = _run(store.put({"_id": "r1", "Class": "Rogue"}))
        second = _run(store.put({"_id": "r1", "_rev": first.rev, "Class": "Fighter"}))
        assert second.rev.startswith("2-")
        assert _run(store.get("r1"))["Class"] == "Fighter"

    def test_put_with_stale_rev_raises_conflict(self, store):
        from dodvault.exceptions import ConflictError
        first = _run(store.put({"_id": "r1", "Class": "Rogue"}))
        _run(store.put({"_id": "r1", "_rev": first.rev, "Class": "Fighter"}))
        with pytest.raises(ConflictError):
            _run(store.put({"_id": "r1", "_rev": first.rev, "Class": "Cleric"}))
        assert _run(store.get("r1"))["Class"] == "Fighter"

    def test_put_with_rev_for_missing_doc_raises_conflict(self, store):
        from dodvault.exceptions import ConflictError
        with pytest.raises(ConflictError):
            _run(store.put({"_id": "ghost", "_rev": "1-abc"}))

    def test_put_rejects_unknown_special_member(self, store):
        from dodvault.exceptions import StoreError
        with pytest.raises(StoreError) as info:
            _run(store.put({"_attachments": {}, "Class": "Wizard"}))
        assert info.value.reason == "bad_special_member"

    def test_put_rejects_non_mapping(self, store):
        from dodvault.exceptions import StoreError
        with pytest.raises(StoreError):
            _run(store.put(["not", "a", "doc"]))

    def test_put_rejects_empty_id(self, store):
        from dodvault.exceptions import StoreError
        with pytest.raises(StoreError):
            _run(store.put({"_id": ""}))

    def test_put_with_lone_surrogate_raises_store_error(self, store):
        from dodvault.exceptions import StoreError
        with pytest.raises(StoreError) as info:
            _run(store.put({"_id": "s1", "Class": "\ud800"}))
        assert info.value.reason == "bad_request"
        assert _run(store.all_docs()).total_rows == 0


class TestDocumentStoreGet:
    """get() — retrieve by identifier."""

    def test_get_returns_body_with_metadata(self, store):
        result = _run(store.put({"_id": "r1", "Class": "Rogue", "Level": 3}))
        doc = _run(store.get("r1"))
        assert doc == {"_id": "r1", "_rev": result.rev, "Class": "Rogue", "Level": 3}

    def test_get_missing_raises_not_found(self, store):
        from dodvault.exceptions import NotFoundError, StoreError
        with pytest.raises(NotFoundError) as info:
            _run(store.get("does-not-exist"))
        assert isinstance(info.value, StoreError)
        assert info.value.reason == "not_found"

    def test_get_preserves_unicode(self, store):
        _run(store.put({"_id": "e1", "Name": "Éowyn"}))
        assert _run(store.get("e1"))["Name"] == "Éowyn"

    def test_get_with_lone_surrogate_raises_store_error(self, store):
        from dodvault.exceptions import StoreError
        with pytest.raises(StoreError):
            _run(store.get("\udcff"))


class TestDocumentStoreAllDocs:
    """all_docs() — ordered enumeration."""

    def test_empty_store_lists_nothing(self, store):
        listing = _run(store.all_docs())
        assert listing.total_rows == 0
        assert listing.rows == []

    def test_rows_are_ordered_by_id(self, store):
        for doc_id in ("c", "a", "b"):
            _run(store.put({"_id": doc_id}))
        listing = _run(store.all_docs())
        assert [r.id for r in listing.rows] == ["a", "b", "c"]

    def test_include_docs_controls_bodies(self, store):
        _run(store.put({"_id": "a", "Class": "Monk"}))
        assert _run(store.all_docs()).rows[0].doc is None
        assert _run(store.all_docs(include_docs=True)).rows[0].doc["Class"] == "Monk"


class TestDocumentStoreLifecycle:

    def test_schema_auto_created_and_data_survives_reopen(self, tmp_path):
        from dodvault.store.db import DocumentStore
        first = DocumentStore("persist", base_dir=str(tmp_path / "nested"))
        _run(first.put({"_id": "x", "Class": "Druid"}))
        second = DocumentStore("persist", base_dir=str(tmp_path / "nested"))
        assert _run(second.get("x"))["Class"] == "Druid"
        assert second.path.name == "persist.sqlite3"

    def test_info_reports_name_and_count(self, store):
        _run(store.put({"Class": "Wizard"}))
        _run(store.put({"Class": "Rogue"}))
        assert _run(store.info()) == {"db_name": "testdb", "doc_count": 2}

    def test_concurrent_puts_all_land(self, store):
        async def scenario():
            await asyncio.gather(*(store.put({"_id": f"c{i}"}) for i in range(10)))
            return await store.all_docs()
        assert _run(scenario()).total_rows == 10
