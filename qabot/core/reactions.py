"""Reaction reconciler: turn thumbs reactions into vote tallies.

WHY: Votes are cast by reacting to the bot's question messages. Slack
delivers reaction_added / reaction_removed events asynchronously and in no
guaranteed order, possibly several at once for the same message. The
stored tallies must not lose increments, and one bad event must never stop
the bot from processing the next.

HOW: Each event is mapped to a VoteDelta, applied with the store's atomic
apply_vote_delta(), and the returned record is re-rendered into the Slack
message. Since integer addition commutes, the final tally is independent
of the order in which events are applied.

RULES:
- Only reactions on messages authored by the bot user are counted
- +1 / thumbsup is an upvote, -1 / thumbsdown a downvote; skin-tone
  variants count as their base reaction; anything else is ignored
- Unknown message ids (stale, or question still in DRAFT) are skipped
- Every failure is logged with event kind, message id and reason and
  then dropped; nothing is retried and nothing is raised
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from qabot.core.models import Question, VoteDelta
from qabot.slack.messages import format_question_tally
from qabot.slack.payloads import ReactionEvent, ReactionEventType, parse_reaction_event
from qabot.slack.publisher import MessagePublisher
from qabot.store.base import QuestionStore

logger = logging.getLogger(__name__)

UPVOTE = "upvote"
DOWNVOTE = "downvote"

# Reaction name (without colons or skin tone) -> polarity
REACTION_POLARITY = {
    "+1": UPVOTE,
    "thumbsup": UPVOTE,
    "-1": DOWNVOTE,
    "thumbsdown": DOWNVOTE,
}

_DELTAS = {
    (ReactionEventType.added, UPVOTE): VoteDelta(upvotes=1),
    (ReactionEventType.added, DOWNVOTE): VoteDelta(downvotes=1),
    (ReactionEventType.removed, UPVOTE): VoteDelta(upvotes=-1),
    (ReactionEventType.removed, DOWNVOTE): VoteDelta(downvotes=-1),
}


def reaction_polarity(reaction: str) -> Optional[str]:
    """Classify a reaction name as UPVOTE, DOWNVOTE, or None.

    >>> reaction_polarity("+1::skin-tone-4")
    'upvote'
    """
    base = reaction.split("::", 1)[0].strip(":")
    return REACTION_POLARITY.get(base)


def vote_delta(event_type: ReactionEventType, reaction: str) -> VoteDelta:
    """Signed vote change for one reaction event (zero if irrelevant)."""
    polarity = reaction_polarity(reaction)
    if polarity is None:
        return VoteDelta()
    return _DELTAS[(event_type, polarity)]


class ReactionReconciler:
    """Applies reaction events to question tallies and re-renders messages."""

    def __init__(
        self,
        questions: QuestionStore,
        publisher: MessagePublisher,
        bot_user_id: str,
        channel_id: str,
    ) -> None:
        self._questions = questions
        self._publisher = publisher
        self._bot_user_id = bot_user_id
        self._channel_id = channel_id

    def handle_payload(self, raw: Dict[str, Any]) -> Optional[Question]:
        """Validate a raw Slack event dict, then handle it.

        Malformed payloads are logged and dropped.
        """
        try:
            event = parse_reaction_event(raw)
        except ValidationError as exc:
            item = raw.get("item") if isinstance(raw, dict) else None
            logger.warning(
                "Dropped malformed %s event for message %s: %s",
                raw.get("type", "unknown") if isinstance(raw, dict) else "unknown",
                item.get("ts", "unknown") if isinstance(item, dict) else "unknown",
                "; ".join(err["msg"] for err in exc.errors()),
            )
            return None
        return self.handle(event)

    def handle(self, event: ReactionEvent) -> Optional[Question]:
        """Apply one reaction event.

        Returns:
            The updated Question, or None if the event was ignored,
            unmatched, or dropped after an error.
        """
        message_id = event.item.ts
        try:
            if event.item_user != self._bot_user_id:
                return None

            delta = vote_delta(event.type, event.reaction)
            if delta.is_zero:
                return None

            question = self._questions.apply_vote_delta(
                message_id, delta.upvotes, delta.downvotes
            )
            if question is None:
                logger.debug(
                    "No published question for message %s (%s)",
                    message_id, event.type.value,
                )
                return None

            self._publisher.update(
                self._channel_id, message_id, format_question_tally(question)
            )
            logger.info(
                "Reactions updated for question %s: +%d / -%d",
                question.id, question.upvotes, question.downvotes,
            )
            return question

        except Exception as exc:
            logger.exception(
                "Dropped %s event for message %s: %s",
                event.type.value, message_id, exc,
            )
            return None
