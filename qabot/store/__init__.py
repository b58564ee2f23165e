"""Persistence backends for events and questions.

RULES:
- MemoryEventStore / MemoryQuestionStore: thread-safe, process-local
- MongoEventStore / MongoQuestionStore: ``events`` and ``questions`` collections
"""

from qabot.store.base import EventStore, QuestionStore
from qabot.store.memory import MemoryEventStore, MemoryQuestionStore

__all__ = [
    "EventStore",
    "QuestionStore",
    "MemoryEventStore",
    "MemoryQuestionStore",
]
