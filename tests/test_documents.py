"""Tests for the document filter and update language."""

from datetime import datetime, timedelta, timezone

import pytest

from starship.core.exceptions import ConflictError
from starship.features.store.adapters import MemoryEntityStore
from starship.features.store.entities import UpdateOperation
from starship.features.store.utils import apply_update, decode_value, encode_value, match_document, sort_documents


class TestMatchDocument:
    """Test filter evaluation."""

    def test_equality_matches_list_membership(self):
        doc = {"id": "a", "members": ["x", "y"]}
        assert match_document(doc, {"members": "x"})
        assert not match_document(doc, {"members": "z"})

    def test_ne_on_list_means_not_contained(self):
        doc = {"following": ["p1"]}
        assert not match_document(doc, {"following": {"$ne": "p1"}})
        assert match_document(doc, {"following": {"$ne": "p2"}})

    def test_comparison_and_in(self):
        doc = {"size": 10, "type": "file"}
        assert match_document(doc, {"size": {"$gte": 10, "$lt": 11}})
        assert match_document(doc, {"type": {"$in": ["folder", "file"]}})
        assert not match_document(doc, {"type": {"$nin": ["file"]}})

    def test_elem_match_on_subdocuments(self):
        doc = {"reactions": [{"emoji": "👍", "reactors": ["u1"]}]}
        assert match_document(doc, {"reactions": {"$elemMatch": {"emoji": "👍", "reactors": ["u1"]}}})
        assert not match_document(doc, {"reactions": {"$elemMatch": {"emoji": "👍", "reactors": ["u2"]}}})

    def test_regex_case_insensitive(self):
        doc = {"name": "Report.PDF"}
        assert match_document(doc, {"name": {"$regex": "report", "$options": "i"}})
        assert not match_document(doc, {"name": {"$regex": "report"}})

    def test_logical_operators(self):
        doc = {"type": "file", "finished_uploading": False}
        assert match_document(doc, {"$or": [{"type": "folder"}, {"finished_uploading": False}]})
        assert not match_document(doc, {"$nor": [{"type": "file"}]})

    def test_exists(self):
        assert match_document({"a": 1}, {"a": {"$exists": True}})
        assert match_document({"a": 1}, {"b": {"$exists": False}})


class TestApplyUpdate:
    """Test update operators."""

    def test_original_document_is_not_mutated(self):
        doc = {"id": "a", "count": 1}
        updated = apply_update(doc, {"$inc": {"count": 2}})
        assert updated["count"] == 3
        assert doc["count"] == 1

    def test_push_each_with_position(self):
        doc = {"path": ["f"]}
        updated = apply_update(doc, {"$push": {"path": {"$each": ["root", "p"], "$position": 0}}})
        assert updated["path"] == ["root", "p", "f"]

    def test_pull_in(self):
        doc = {"path": ["root", "a", "f", "g"]}
        assert apply_update(doc, {"$pull": {"path": {"$in": ["root", "a"]}}})["path"] == ["f", "g"]

    def test_add_to_set_is_idempotent(self):
        doc = {"members": ["x"]}
        assert apply_update(doc, {"$addToSet": {"members": "x"}})["members"] == ["x"]

    def test_positional_update_uses_filter_match(self):
        doc = {"reactions": [{"emoji": "a", "reactors": ["u1"]}, {"emoji": "b", "reactors": ["u1"]}]}
        flt = {"reactions": {"$elemMatch": {"emoji": "b"}}}
        updated = apply_update(doc, {"$addToSet": {"reactions.$.reactors": "u2"}}, flt)
        assert updated["reactions"][1]["reactors"] == ["u1", "u2"]
        assert updated["reactions"][0]["reactors"] == ["u1"]

    def test_unset_and_set_nested(self):
        doc = {"a": {"b": 1}}
        updated = apply_update(doc, {"$set": {"a.c": 2}, "$unset": {"a.b": ""}})
        assert updated == {"a": {"c": 2}}

    def test_unknown_operator_raises(self):
        with pytest.raises(ValueError):
            apply_update({}, {"$rename": {"a": "b"}})


class TestSortAndCodec:
    def test_sort_multi_key(self):
        docs = [{"n": 1, "m": "b"}, {"n": 2, "m": "a"}, {"n": 1, "m": "a"}]
        ordered = sort_documents(docs, [("n", -1), ("m", 1)])
        assert [(d["n"], d["m"]) for d in ordered] == [(2, "a"), (1, "a"), (1, "b")]

    def test_datetimes_survive_encoding(self):
        now = datetime.now(timezone.utc)
        value = {"created_at": now, "nested": [now]}
        assert decode_value(encode_value(value)) == value


class TestMemoryCollection:
    """Test the in-memory adapter's atomic operations."""

    @pytest.fixture
    def collection(self):
        return MemoryEntityStore().collection("things")

    @pytest.mark.asyncio
    async def test_insert_duplicate_id_conflicts(self, collection):
        await collection.insert({"id": "a"})
        with pytest.raises(ConflictError):
            await collection.insert({"id": "a"})

    @pytest.mark.asyncio
    async def test_conditional_update_returns_none_when_unmatched(self, collection):
        await collection.insert({"id": "a", "done": True})
        assert await collection.update_one({"id": "a", "done": False}, {"$set": {"done": True}}) is None

    @pytest.mark.asyncio
    async def test_find_one_and_delete_only_once(self, collection):
        await collection.insert({"id": "a"})
        assert (await collection.find_one_and_delete({"id": "a"}))["id"] == "a"
        assert await collection.find_one_and_delete({"id": "a"}) is None

    @pytest.mark.asyncio
    async def test_bulk_update_is_all_or_nothing(self, collection):
        await collection.insert({"id": "a", "tags": ["x"], "n": 1})
        with pytest.raises(ValueError):
            await collection.bulk_update([
                UpdateOperation({"id": "a"}, {"$inc": {"n": 1}}),
                UpdateOperation({"id": "a"}, {"$push": {"n": 5}}),
            ])
        assert (await collection.find_by_id("a"))["n"] == 1

    @pytest.mark.asyncio
    async def test_find_many_sort_skip_limit(self, collection):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for i in range(5):
            await collection.insert({"id": str(i), "created_at": base + timedelta(minutes=i)})
        docs = await collection.find_many({}, sort=[("created_at", -1)], skip=1, limit=2)
        assert [d["id"] for d in docs] == ["3", "2"]
