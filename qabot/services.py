"""Process-wide wiring of clients, stores and core components.

WHY: The Slack WebClient and the MongoDB connection are expensive to
create and safe to share. They should be built once per process and
handed to every component, not re-opened per request.

HOW: build_services() turns Settings into a Services bundle. Individual
collaborators can be overridden (tests pass in-memory stores and a mocked
WebClient). get_services() caches one bundle for the process; reset is
available for test isolation.

RULES:
- MONGO_URI set -> Mongo stores (indexes ensured once); else memory stores
- One WebClient is shared by the publisher and the Bolt app
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from slack_bolt import App
from slack_sdk import WebClient

from qabot.config import Settings, load_settings
from qabot.core.reactions import ReactionReconciler
from qabot.core.router import CommandRouter
from qabot.slack.bot import create_app as create_slack_app
from qabot.slack.publisher import MessagePublisher, SlackMessagePublisher
from qabot.store.base import EventStore, QuestionStore
from qabot.store.memory import MemoryEventStore, MemoryQuestionStore

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the HTTP layer needs to serve requests."""

    settings: Settings
    events: EventStore
    questions: QuestionStore
    publisher: MessagePublisher
    router: CommandRouter
    reconciler: ReactionReconciler
    slack_app: App


def _build_stores(settings: Settings):
    if settings.mongo_uri:
        from qabot.store.mongo import (
            MongoEventStore,
            MongoQuestionStore,
            connect,
            ensure_indexes,
        )

        database = connect(settings.mongo_uri, settings.mongo_db_name)
        ensure_indexes(database)
        return MongoEventStore(database), MongoQuestionStore(database)

    logger.warning("MONGO_URI not set; events and questions are kept in memory")
    return MemoryEventStore(), MemoryQuestionStore()


def build_services(
    settings: Settings,
    events: Optional[EventStore] = None,
    questions: Optional[QuestionStore] = None,
    client: Optional[WebClient] = None,
) -> Services:
    """Assemble the stores, publisher, router, reconciler and Bolt app."""
    if events is None or questions is None:
        default_events, default_questions = _build_stores(settings)
        events = events or default_events
        questions = questions or default_questions

    client = client or WebClient(token=settings.bot_token)
    publisher = SlackMessagePublisher(client)

    router = CommandRouter(events, questions, publisher, settings.channel_id)
    reconciler = ReactionReconciler(
        questions, publisher, settings.bot_user_id, settings.channel_id
    )
    slack_app = create_slack_app(client, settings.signing_secret, reconciler)

    return Services(
        settings=settings,
        events=events,
        questions=questions,
        publisher=publisher,
        router=router,
        reconciler=reconciler,
        slack_app=slack_app,
    )


_services: Optional[Services] = None


def get_services() -> Services:
    """Return the process-wide Services, building them on first use."""
    global _services
    if _services is None:
        _services = build_services(load_settings())
    return _services


def reset_services() -> None:
    """Drop the cached Services (test isolation)."""
    global _services
    _services = None
