"""Slash command router: create events and add questions.

WHY: A single slash command serves two purposes. ``/qa create <id>`` opens
a new Q&A event; ``/qa <id> <question...>`` posts a question for it. The
router turns the raw command text into one of these flows and builds the
reply the issuer sees.

HOW: handle() parses the text and runs _check(), which raises
UserInputError / ConflictError / NotFoundError for commands that must not
proceed; those become plain 200 replies. Only then does it dispatch to
_create_event() or _add_question(), whose writes are never caught here.
Successful flows reply with 201.

RULES:
- First token ``create`` selects the create flow; the id is the 2nd token
- Otherwise the first token is the id and the rest is the question text,
  rejoined with single spaces; an id alone posts an empty question
- An invalid id is rejected before any store access
- Store and publisher errors propagate; partial writes are not rolled back
  (a question created but never attached stays in DRAFT forever)
- Event uniqueness is check-then-insert and can race
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

from qabot.core.errors import ConflictError, NotFoundError, UserInputError
from qabot.core.ids import is_valid_id
from qabot.slack.messages import (
    CANNOT_PARSE_REPLY,
    QUESTION_ADDED_REPLY,
    event_created_reply,
    event_exists_reply,
    event_missing_reply,
    format_new_question,
)
from qabot.slack.publisher import MessagePublisher
from qabot.store.base import EventStore, QuestionStore

logger = logging.getLogger(__name__)

STATUS_OK = 200
STATUS_CREATED = 201

# First token that switches a command into the create flow
CREATE_VERB = "create"


@dataclass(frozen=True)
class CommandResponse:
    """Reply text and HTTP status for a slash command."""

    text: str
    status_code: int = STATUS_OK


@dataclass(frozen=True)
class ParsedCommand:
    """Result of splitting the command text.

    RULES:
    - is_create is True only when the first token is exactly ``create``
    - question is "" for the create flow
    """

    is_create: bool
    event_id: str
    question: str = ""


def parse_command(text: str) -> ParsedCommand:
    """Split slash command text into flow, event id and question body."""
    tokens = (text or "").split()  # type: List[str]
    if not tokens:
        return ParsedCommand(is_create=False, event_id="")

    if tokens[0] == CREATE_VERB:
        event_id = tokens[1] if len(tokens) > 1 else ""
        return ParsedCommand(is_create=True, event_id=event_id)

    return ParsedCommand(
        is_create=False,
        event_id=tokens[0],
        question=" ".join(tokens[1:]),
    )


class CommandRouter:
    """Dispatches slash command text to the create / add-question flows."""

    def __init__(
        self,
        events: EventStore,
        questions: QuestionStore,
        publisher: MessagePublisher,
        channel_id: str,
    ) -> None:
        self._events = events
        self._questions = questions
        self._publisher = publisher
        self._channel_id = channel_id

    def handle(self, text: str) -> CommandResponse:
        """Run one slash command and return the reply for the issuer."""
        command = parse_command(text)

        try:
            self._check(command)
        except (UserInputError, ConflictError, NotFoundError) as exc:
            logger.debug("Command %r rejected: %s", text, exc)
            return CommandResponse(text=str(exc), status_code=STATUS_OK)

        if command.is_create:
            return self._create_event(command.event_id)
        return self._add_question(command.event_id, command.question)

    def _check(self, command: ParsedCommand) -> None:
        """Raise the user-facing error for a command that must not run."""
        if not is_valid_id(command.event_id):
            raise UserInputError(CANNOT_PARSE_REPLY)

        exists = self._events.exists(command.event_id)
        if command.is_create:
            if exists:
                raise ConflictError(event_exists_reply(command.event_id))
            return

        if not exists:
            raise NotFoundError(event_missing_reply(command.event_id))

    def _create_event(self, event_id: str) -> CommandResponse:
        self._events.create(event_id)
        logger.info("Created event %s", event_id)
        return CommandResponse(
            text=event_created_reply(event_id),
            status_code=STATUS_CREATED,
        )

    def _add_question(self, event_id: str, question: str) -> CommandResponse:
        question_id, message_id = self._publish_question(event_id, question)
        logger.info(
            "Added question %s to event %s as message %s",
            question_id, event_id, message_id,
        )
        return CommandResponse(text=QUESTION_ADDED_REPLY, status_code=STATUS_CREATED)

    def _publish_question(self, event_id: str, question: str) -> Tuple[str, str]:
        """Store, post, then attach the message id (three separate writes)."""
        question_id = self._questions.create(event_id, question)
        message_id = self._publisher.publish(
            self._channel_id, format_new_question(event_id, question)
        )
        self._questions.attach_external_message_id(question_id, message_id)
        return question_id, message_id
