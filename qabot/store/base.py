"""Abstract store contracts for events and questions.

WHY: The router and reconciler must work the same against MongoDB in
production and an in-memory store in tests. These ABCs pin down the
operations both backends provide.

HOW: EventStore and QuestionStore are ABCs; concrete backends live in
memory.py and mongo.py and are injected into the core at startup.

RULES:
- EventStore.create does not enforce uniqueness; callers check exists()
  first and the check-then-insert race is accepted
- QuestionStore.apply_vote_delta is atomic: increment and return the
  post-update record in one operation, never read-then-write
- apply_vote_delta returns None for unknown message ids (no exception)
- attach_external_message_id raises NotFoundError for unknown question ids
  and ConflictError when the message id already belongs to another question
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from qabot.core.models import Event, Question


class EventStore(ABC):
    """CRUD over event records keyed by event identifier."""

    @abstractmethod
    def exists(self, event_id: str) -> bool:
        """True if an event with this identifier is stored."""

    @abstractmethod
    def create(self, event_id: str) -> Event:
        """Insert a new event record and return it."""


class QuestionStore(ABC):
    """CRUD over question records plus atomic vote increments."""

    @abstractmethod
    def create(self, event_id: str, text: str) -> str:
        """Insert a question with zeroed counters; return its internal id."""

    @abstractmethod
    def attach_external_message_id(
        self, question_id: str, external_message_id: str
    ) -> None:
        """Record the Slack message id the question was posted as.

        A message id identifies at most one question. Re-attaching the same
        id to the question that already owns it is a no-op.

        Raises:
            NotFoundError: if question_id does not resolve.
            ConflictError: if another question already carries
                external_message_id.
        """

    @abstractmethod
    def apply_vote_delta(
        self,
        external_message_id: str,
        upvote_delta: int,
        downvote_delta: int,
    ) -> Optional[Question]:
        """Atomically add the deltas and return the updated question.

        Returns:
            The post-update Question, or None if no question carries
            this external message id.
        """

    @abstractmethod
    def get(self, question_id: str) -> Optional[Question]:
        """Look up a question by internal id, or None."""

    @abstractmethod
    def find_by_event(self, event_id: str) -> List[Question]:
        """All questions for an event, oldest first."""
