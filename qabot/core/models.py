"""Data model for events, questions, and vote deltas.

WHY: Both stores, the router and the reconciler pass the same records
around. Plain dataclasses keep them independent of the storage backend.

HOW: Event and Question mirror the persisted documents. A question's
lifecycle state is derived from whether the Slack message id has been
attached yet, so it can never disagree with the stored data.

RULES:
- Question.upvotes / downvotes start at 0 and change only via VoteDelta
- Counters may go transiently negative when a removal overtakes its add
- QuestionState.DRAFT questions cannot be reached by reactions
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class QuestionState(str, enum.Enum):
    """Lifecycle of a question record.

    RULES:
    - draft: stored, Slack message not posted or id not attached yet
    - published: external_message_id is set; votes can be reconciled
    """

    DRAFT = "draft"
    PUBLISHED = "published"


@dataclass(frozen=True)
class Event:
    """A named Q&A session such as a town hall."""

    event_id: str
    id: Optional[str] = None


@dataclass
class Question:
    """A submitted question and its current vote tallies."""

    id: str
    event_id: str
    text: str
    upvotes: int = 0
    downvotes: int = 0
    external_message_id: Optional[str] = None

    @property
    def state(self) -> QuestionState:
        if self.external_message_id is None:
            return QuestionState.DRAFT
        return QuestionState.PUBLISHED


@dataclass(frozen=True)
class VoteDelta:
    """Signed change to a question's (upvotes, downvotes)."""

    upvotes: int = 0
    downvotes: int = 0

    @property
    def is_zero(self) -> bool:
        return self.upvotes == 0 and self.downvotes == 0
