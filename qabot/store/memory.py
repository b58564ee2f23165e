"""Thread-safe in-memory event and question stores.

WHY: Local development and the test suite need a store without a MongoDB
server. The HTTP server and the Bolt listener executor call into the store
from different threads, so every operation must be atomic.

HOW: Records live in plain dicts guarded by a threading.Lock. Questions
are indexed both by internal id and by external message id so reactions
resolve in O(1). Reads return copies; callers never hold live records.

RULES:
- All public methods acquire self._lock for their whole body
- Internal ids are UUID4 hex strings generated at creation time
- apply_vote_delta increments and snapshots under the same lock
- Insertion order is preserved for find_by_event()
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from typing import Dict, List, Optional

from qabot.core.errors import ConflictError, NotFoundError
from qabot.core.models import Event, Question
from qabot.store.base import EventStore, QuestionStore

logger = logging.getLogger(__name__)


class MemoryEventStore(EventStore):
    """Event records keyed by internal id, looked up by event_id."""

    def __init__(self) -> None:
        self._events: Dict[str, Event] = {}
        self._lock = threading.Lock()

    def exists(self, event_id: str) -> bool:
        with self._lock:
            return any(e.event_id == event_id for e in self._events.values())

    def create(self, event_id: str) -> Event:
        with self._lock:
            event = Event(event_id=event_id, id=uuid.uuid4().hex)
            self._events[event.id] = event

        logger.info("Stored event %s", event_id)
        return event

    def count(self, event_id: str) -> int:
        """Number of records carrying *event_id* (duplicates are possible)."""
        with self._lock:
            return sum(1 for e in self._events.values() if e.event_id == event_id)


class MemoryQuestionStore(QuestionStore):
    """Question records with a secondary index on external message id.

    RULES:
    - _by_message maps external_message_id -> internal id
    - Attaching a message id already owned by another question raises
      ConflictError and leaves both questions unchanged
    """

    def __init__(self) -> None:
        self._questions: Dict[str, Question] = {}
        self._by_message: Dict[str, str] = {}
        self._lock = threading.Lock()

    def create(self, event_id: str, text: str) -> str:
        with self._lock:
            question_id = uuid.uuid4().hex
            self._questions[question_id] = Question(
                id=question_id,
                event_id=event_id,
                text=text,
            )

        logger.info("Stored question %s for event %s", question_id, event_id)
        return question_id

    def attach_external_message_id(
        self, question_id: str, external_message_id: str
    ) -> None:
        with self._lock:
            question = self._questions.get(question_id)
            if question is None:
                raise NotFoundError("Question {} not found".format(question_id))

            owner = self._by_message.get(external_message_id)
            if owner is not None and owner != question_id:
                raise ConflictError(
                    "Message {} already belongs to question {}".format(
                        external_message_id, owner
                    )
                )

            if question.external_message_id is not None:
                self._by_message.pop(question.external_message_id, None)
            question.external_message_id = external_message_id
            self._by_message[external_message_id] = question_id

    def apply_vote_delta(
        self,
        external_message_id: str,
        upvote_delta: int,
        downvote_delta: int,
    ) -> Optional[Question]:
        with self._lock:
            question_id = self._by_message.get(external_message_id)
            if question_id is None:
                return None

            question = self._questions[question_id]
            question.upvotes += upvote_delta
            question.downvotes += downvote_delta
            return replace(question)

    def get(self, question_id: str) -> Optional[Question]:
        with self._lock:
            question = self._questions.get(question_id)
            return replace(question) if question is not None else None

    def find_by_event(self, event_id: str) -> List[Question]:
        with self._lock:
            return [
                replace(q) for q in self._questions.values()
                if q.event_id == event_id
            ]
