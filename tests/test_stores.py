"""Unit tests for the in-memory and MongoDB stores.

WHY: Vote tallies are only as correct as the store's increment. Lost
updates under concurrent reactions, or a vote landing on the wrong
question, would silently corrupt results.

HOW: The in-memory stores are exercised directly, including a threaded
stress test. The Mongo stores run against MagicMock collections and the
tests assert on the exact queries issued.

RULES:
- Each test builds its own store instance
- No real MongoDB server is contacted
"""

from __future__ import annotations

import itertools
import threading
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from qabot.core.errors import ConflictError, NotFoundError, TransientInfraError
from qabot.core.models import QuestionState
from qabot.store.memory import MemoryEventStore, MemoryQuestionStore
from qabot.store.mongo import (
    MESSAGE_ID_FIELD,
    MongoEventStore,
    MongoQuestionStore,
    ensure_indexes,
)


def _published(store: MemoryQuestionStore, ts: str = "111.222") -> str:
    question_id = store.create("townhall", "Why?")
    store.attach_external_message_id(question_id, ts)
    return question_id


# ---------------------------------------------------------------------------
# MemoryEventStore
# ---------------------------------------------------------------------------


class TestMemoryEventStore:

    def test_missing_event_does_not_exist(self):
        assert MemoryEventStore().exists("townhall") is False

    def test_created_event_exists(self):
        store = MemoryEventStore()
        event = store.create("townhall")
        assert event.event_id == "townhall"
        assert event.id
        assert store.exists("townhall") is True

    def test_exists_is_exact_match(self):
        store = MemoryEventStore()
        store.create("townhall")
        assert store.exists("townhall-q1") is False

    def test_create_does_not_enforce_uniqueness(self):
        store = MemoryEventStore()
        store.create("townhall")
        store.create("townhall")
        assert store.count("townhall") == 2


# ---------------------------------------------------------------------------
# MemoryQuestionStore
# ---------------------------------------------------------------------------


class TestMemoryQuestionCreate:

    def test_new_question_has_zero_votes_and_is_draft(self):
        store = MemoryQuestionStore()
        question_id = store.create("townhall", "What is our roadmap?")
        question = store.get(question_id)
        assert question.text == "What is our roadmap?"
        assert question.event_id == "townhall"
        assert (question.upvotes, question.downvotes) == (0, 0)
        assert question.external_message_id is None
        assert question.state == QuestionState.DRAFT

    def test_ids_are_unique(self):
        store = MemoryQuestionStore()
        assert store.create("e", "a") != store.create("e", "b")

    def test_get_unknown_returns_none(self):
        assert MemoryQuestionStore().get("nope") is None

    def test_find_by_event_preserves_order(self):
        store = MemoryQuestionStore()
        store.create("e1", "first")
        store.create("e2", "other")
        store.create("e1", "second")
        assert [q.text for q in store.find_by_event("e1")] == ["first", "second"]


class TestMemoryAttach:

    def test_attach_publishes_question(self):
        store = MemoryQuestionStore()
        question_id = _published(store, "123.456")
        question = store.get(question_id)
        assert question.external_message_id == "123.456"
        assert question.state == QuestionState.PUBLISHED

    def test_attach_unknown_question_raises(self):
        with pytest.raises(NotFoundError):
            MemoryQuestionStore().attach_external_message_id("nope", "1.2")

    def test_message_id_owned_by_another_question_conflicts(self):
        store = MemoryQuestionStore()
        first = _published(store, "1.1")
        second = store.create("townhall", "Another")

        with pytest.raises(ConflictError):
            store.attach_external_message_id(second, "1.1")

        assert store.get(first).external_message_id == "1.1"
        assert store.get(second).state == QuestionState.DRAFT
        assert store.apply_vote_delta("1.1", 1, 0).id == first

    def test_reattaching_same_id_is_a_no_op(self):
        store = MemoryQuestionStore()
        question_id = _published(store, "1.1")
        store.attach_external_message_id(question_id, "1.1")
        assert store.apply_vote_delta("1.1", 1, 0).upvotes == 1

    def test_new_message_id_replaces_old_one(self):
        store = MemoryQuestionStore()
        question_id = _published(store, "1.1")
        store.attach_external_message_id(question_id, "2.2")

        assert store.apply_vote_delta("1.1", 1, 0) is None
        assert store.apply_vote_delta("2.2", 1, 0).id == question_id


class TestMemoryVoteDelta:

    def test_round_trip(self):
        store = MemoryQuestionStore()
        _published(store, "1.1")

        up = store.apply_vote_delta("1.1", 1, 0)
        assert (up.upvotes, up.downvotes) == (1, 0)

        back = store.apply_vote_delta("1.1", -1, 0)
        assert back.upvotes == 0

    def test_unknown_message_returns_none(self):
        store = MemoryQuestionStore()
        assert store.apply_vote_delta("9.9", 1, 0) is None

    def test_draft_question_is_not_reachable(self):
        store = MemoryQuestionStore()
        store.create("townhall", "Draft")
        assert store.apply_vote_delta("", 1, 0) is None

    def test_counters_may_go_negative(self):
        store = MemoryQuestionStore()
        _published(store, "1.1")
        question = store.apply_vote_delta("1.1", 0, -1)
        assert question.downvotes == -1

    def test_returned_record_is_a_snapshot(self):
        store = MemoryQuestionStore()
        question_id = _published(store, "1.1")
        snapshot = store.apply_vote_delta("1.1", 1, 0)
        snapshot.upvotes = 100
        assert store.get(question_id).upvotes == 1

    def test_order_of_deltas_does_not_matter(self):
        deltas = [(1, 0), (0, 1), (-1, 0)]
        for order in itertools.permutations(deltas):
            store = MemoryQuestionStore()
            _published(store, "1.1")
            for up, down in order:
                result = store.apply_vote_delta("1.1", up, down)
            assert (result.upvotes, result.downvotes) == (0, 1)

    def test_concurrent_increments_are_not_lost(self):
        store = MemoryQuestionStore()
        question_id = _published(store, "1.1")

        def vote():
            for _ in range(200):
                store.apply_vote_delta("1.1", 1, 1)

        threads = [threading.Thread(target=vote) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        question = store.get(question_id)
        assert (question.upvotes, question.downvotes) == (1600, 1600)


# ---------------------------------------------------------------------------
# Mongo stores (mocked collections)
# ---------------------------------------------------------------------------


def _database():
    collections = {"events": MagicMock(), "questions": MagicMock()}
    database = MagicMock()
    database.__getitem__.side_effect = lambda name: collections[name]
    return database, collections


class TestMongoEventStore:

    def test_exists_queries_by_event_id(self):
        database, cols = _database()
        cols["events"].find_one.return_value = {"_id": ObjectId(), "eventId": "townhall"}
        assert MongoEventStore(database).exists("townhall") is True
        cols["events"].find_one.assert_called_once_with({"eventId": "townhall"})

    def test_exists_false_when_no_document(self):
        database, cols = _database()
        cols["events"].find_one.return_value = None
        assert MongoEventStore(database).exists("townhall") is False

    def test_create_inserts_document(self):
        database, cols = _database()
        oid = ObjectId()
        cols["events"].insert_one.return_value = MagicMock(inserted_id=oid)

        event = MongoEventStore(database).create("townhall")

        cols["events"].insert_one.assert_called_once_with({"eventId": "townhall"})
        assert event.id == str(oid)

    def test_driver_error_becomes_transient(self):
        database, cols = _database()
        cols["events"].find_one.side_effect = ServerSelectionTimeoutError("down")
        with pytest.raises(TransientInfraError):
            MongoEventStore(database).exists("townhall")


class TestMongoQuestionStore:

    def test_create_inserts_zeroed_question(self):
        database, cols = _database()
        oid = ObjectId()
        cols["questions"].insert_one.return_value = MagicMock(inserted_id=oid)

        question_id = MongoQuestionStore(database).create("townhall", "Why?")

        assert question_id == str(oid)
        cols["questions"].insert_one.assert_called_once_with(
            {"eventId": "townhall", "text": "Why?", "upvotes": 0, "downvotes": 0}
        )

    def test_attach_sets_slack_id(self):
        database, cols = _database()
        oid = ObjectId()
        cols["questions"].update_one.return_value = MagicMock(matched_count=1)

        MongoQuestionStore(database).attach_external_message_id(str(oid), "1.1")

        cols["questions"].update_one.assert_called_once_with(
            {"_id": oid}, {"$set": {MESSAGE_ID_FIELD: "1.1"}}
        )

    def test_attach_unmatched_raises_not_found(self):
        database, cols = _database()
        cols["questions"].update_one.return_value = MagicMock(matched_count=0)
        with pytest.raises(NotFoundError):
            MongoQuestionStore(database).attach_external_message_id(str(ObjectId()), "1.1")

    def test_attach_duplicate_message_id_conflicts(self):
        database, cols = _database()
        cols["questions"].update_one.side_effect = DuplicateKeyError("E11000 duplicate key")
        with pytest.raises(ConflictError):
            MongoQuestionStore(database).attach_external_message_id(str(ObjectId()), "1.1")

    def test_attach_malformed_id_raises_not_found(self):
        database, cols = _database()
        with pytest.raises(NotFoundError):
            MongoQuestionStore(database).attach_external_message_id("not-an-oid", "1.1")
        cols["questions"].update_one.assert_not_called()

    def test_apply_vote_delta_is_single_atomic_call(self):
        database, cols = _database()
        oid = ObjectId()
        cols["questions"].find_one_and_update.return_value = {
            "_id": oid,
            "eventId": "townhall",
            "text": "Why?",
            "upvotes": 1,
            "downvotes": 0,
            MESSAGE_ID_FIELD: "1.1",
        }

        question = MongoQuestionStore(database).apply_vote_delta("1.1", 1, 0)

        cols["questions"].find_one_and_update.assert_called_once_with(
            {MESSAGE_ID_FIELD: "1.1"},
            {"$inc": {"upvotes": 1, "downvotes": 0}},
            return_document=ReturnDocument.AFTER,
        )
        cols["questions"].find_one.assert_not_called()
        assert question.id == str(oid)
        assert (question.upvotes, question.downvotes) == (1, 0)
        assert question.external_message_id == "1.1"

    def test_apply_vote_delta_unknown_returns_none(self):
        database, cols = _database()
        cols["questions"].find_one_and_update.return_value = None
        assert MongoQuestionStore(database).apply_vote_delta("9.9", 1, 0) is None

    def test_get_malformed_id_returns_none(self):
        database, _ = _database()
        assert MongoQuestionStore(database).get("zzz") is None


class TestEnsureIndexes:

    def test_creates_unique_sparse_message_index(self):
        database, cols = _database()
        ensure_indexes(database)
        cols["events"].create_index.assert_called_once()
        _, kwargs = cols["questions"].create_index.call_args
        assert kwargs == {"unique": True, "sparse": True}
