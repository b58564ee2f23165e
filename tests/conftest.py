"""Shared test fixtures for the qabot test suite.

WHY: Router, reconciler and server tests all need the same wiring: fresh
in-memory stores, a publisher that records what it was asked to post, and
settings that point at a fake channel and bot user.

HOW: FakePublisher implements MessagePublisher in memory and hands out
Slack-style message timestamps. Fixtures build one fresh instance of each
collaborator per test.

RULES:
- No test talks to Slack or MongoDB
- Every fixture returns a new object (no shared mutable state)
"""

from __future__ import annotations

from typing import Dict, List, Tuple

import pytest

from qabot.config import Settings
from qabot.core.reactions import ReactionReconciler
from qabot.core.router import CommandRouter
from qabot.slack.publisher import MessagePublisher
from qabot.store.memory import MemoryEventStore, MemoryQuestionStore

CHANNEL_ID = "C0QA"
BOT_USER_ID = "U0QABOT"
SIGNING_SECRET = "test-signing-secret"


class FakePublisher(MessagePublisher):
    """Records published and updated messages.

    RULES:
    - publish() returns "1700000000.000001", "1700000000.000002", ...
    - messages maps ts -> latest text
    """

    def __init__(self) -> None:
        self.posts: List[Tuple[str, str]] = []
        self.updates: List[Tuple[str, str, str]] = []
        self.messages: Dict[str, str] = {}
        self._counter = 0

    def publish(self, channel: str, text: str) -> str:
        self._counter += 1
        ts = "1700000000.{:06d}".format(self._counter)
        self.posts.append((channel, text))
        self.messages[ts] = text
        return ts

    def update(self, channel: str, external_message_id: str, text: str) -> None:
        self.updates.append((channel, external_message_id, text))
        self.messages[external_message_id] = text


@pytest.fixture
def settings() -> Settings:
    return Settings(
        bot_token="xoxb-test",
        signing_secret=SIGNING_SECRET,
        channel_id=CHANNEL_ID,
        bot_user_id=BOT_USER_ID,
    )


@pytest.fixture
def event_store() -> MemoryEventStore:
    return MemoryEventStore()


@pytest.fixture
def question_store() -> MemoryQuestionStore:
    return MemoryQuestionStore()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def router(event_store, question_store, publisher) -> CommandRouter:
    return CommandRouter(event_store, question_store, publisher, CHANNEL_ID)


@pytest.fixture
def reconciler(question_store, publisher) -> ReactionReconciler:
    return ReactionReconciler(question_store, publisher, BOT_USER_ID, CHANNEL_ID)


def reaction_payload(
    event_type: str = "reaction_added",
    reaction: str = "+1",
    ts: str = "1700000000.000001",
    item_user: str = BOT_USER_ID,
) -> Dict[str, object]:
    """Raw Slack reaction event dict as Bolt passes it to listeners."""
    return {
        "type": event_type,
        "user": "U0VOTER",
        "reaction": reaction,
        "item_user": item_user,
        "item": {"type": "message", "channel": CHANNEL_ID, "ts": ts},
        "event_ts": "1700000100.000100",
    }


@pytest.fixture
def make_reaction():
    """Factory fixture for raw reaction event dicts."""
    return reaction_payload
