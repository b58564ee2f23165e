"""MongoDB-backed event and question stores.

WHY: Events and questions must survive restarts and be shared by every
bot process. The deployed bot keeps them in two MongoDB collections.

HOW: One MongoClient is created per process by connect() and its database
handle is passed into both stores. Vote updates use find_one_and_update
with $inc and ReturnDocument.AFTER, which MongoDB applies atomically per
document, so concurrent reactions never lose increments.

RULES:
- Collections: ``events`` {eventId} and ``questions``
  {eventId, text, upvotes, downvotes, slackId?}
- slackId is the persisted name of Question.external_message_id
- ensure_indexes() adds a unique sparse index on questions.slackId and a
  plain index on events.eventId (event uniqueness stays best-effort)
- A duplicate slackId on attach is re-raised as ConflictError
- Any other PyMongoError is re-raised as TransientInfraError
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from qabot.core.errors import ConflictError, NotFoundError, TransientInfraError
from qabot.core.models import Event, Question
from qabot.store.base import EventStore, QuestionStore

logger = logging.getLogger(__name__)

EVENTS_COLLECTION = "events"
QUESTIONS_COLLECTION = "questions"

# Persisted field name for the Slack message timestamp
MESSAGE_ID_FIELD = "slackId"


def connect(uri: str, db_name: str) -> Database:
    """Open a MongoClient and return the named database handle."""
    client = MongoClient(uri)  # type: MongoClient
    logger.info("Connected to MongoDB database %s", db_name)
    return client[db_name]


def ensure_indexes(database: Database) -> None:
    """Create the indexes the stores rely on (idempotent)."""
    try:
        database[EVENTS_COLLECTION].create_index([("eventId", ASCENDING)])
        database[QUESTIONS_COLLECTION].create_index(
            [(MESSAGE_ID_FIELD, ASCENDING)], unique=True, sparse=True
        )
    except PyMongoError as exc:
        raise TransientInfraError("Failed to create indexes: {}".format(exc)) from exc


def _question_from_doc(doc: Dict[str, Any]) -> Question:
    return Question(
        id=str(doc["_id"]),
        event_id=doc.get("eventId", ""),
        text=doc.get("text", ""),
        upvotes=int(doc.get("upvotes", 0)),
        downvotes=int(doc.get("downvotes", 0)),
        external_message_id=doc.get(MESSAGE_ID_FIELD),
    )


def _object_id(question_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(question_id)
    except (InvalidId, TypeError):
        return None


class MongoEventStore(EventStore):
    """Events in the ``events`` collection."""

    def __init__(self, database: Database) -> None:
        self._collection = database[EVENTS_COLLECTION]

    def exists(self, event_id: str) -> bool:
        try:
            return self._collection.find_one({"eventId": event_id}) is not None
        except PyMongoError as exc:
            raise TransientInfraError("Event lookup failed: {}".format(exc)) from exc

    def create(self, event_id: str) -> Event:
        try:
            result = self._collection.insert_one({"eventId": event_id})
        except PyMongoError as exc:
            raise TransientInfraError("Event insert failed: {}".format(exc)) from exc

        logger.info("Stored event %s", event_id)
        return Event(event_id=event_id, id=str(result.inserted_id))


class MongoQuestionStore(QuestionStore):
    """Questions in the ``questions`` collection."""

    def __init__(self, database: Database) -> None:
        self._collection = database[QUESTIONS_COLLECTION]

    def create(self, event_id: str, text: str) -> str:
        doc = {
            "eventId": event_id,
            "text": text,
            "upvotes": 0,
            "downvotes": 0,
        }
        try:
            result = self._collection.insert_one(doc)
        except PyMongoError as exc:
            raise TransientInfraError("Question insert failed: {}".format(exc)) from exc

        question_id = str(result.inserted_id)
        logger.info("Stored question %s for event %s", question_id, event_id)
        return question_id

    def attach_external_message_id(
        self, question_id: str, external_message_id: str
    ) -> None:
        oid = _object_id(question_id)
        if oid is None:
            raise NotFoundError("Question {} not found".format(question_id))

        try:
            result = self._collection.update_one(
                {"_id": oid},
                {"$set": {MESSAGE_ID_FIELD: external_message_id}},
            )
        except DuplicateKeyError as exc:
            raise ConflictError(
                "Message {} already belongs to another question".format(
                    external_message_id
                )
            ) from exc
        except PyMongoError as exc:
            raise TransientInfraError("Question update failed: {}".format(exc)) from exc

        if result.matched_count == 0:
            raise NotFoundError("Question {} not found".format(question_id))

    def apply_vote_delta(
        self,
        external_message_id: str,
        upvote_delta: int,
        downvote_delta: int,
    ) -> Optional[Question]:
        try:
            doc = self._collection.find_one_and_update(
                {MESSAGE_ID_FIELD: external_message_id},
                {"$inc": {"upvotes": upvote_delta, "downvotes": downvote_delta}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            raise TransientInfraError("Vote update failed: {}".format(exc)) from exc

        if doc is None:
            return None
        return _question_from_doc(doc)

    def get(self, question_id: str) -> Optional[Question]:
        oid = _object_id(question_id)
        if oid is None:
            return None
        try:
            doc = self._collection.find_one({"_id": oid})
        except PyMongoError as exc:
            raise TransientInfraError("Question lookup failed: {}".format(exc)) from exc
        return _question_from_doc(doc) if doc is not None else None

    def find_by_event(self, event_id: str) -> List[Question]:
        try:
            cursor = self._collection.find({"eventId": event_id}).sort("_id", ASCENDING)
            return [_question_from_doc(doc) for doc in cursor]
        except PyMongoError as exc:
            raise TransientInfraError("Question lookup failed: {}".format(exc)) from exc
