"""Pydantic schemas for inbound Slack payloads.

WHY: Slack delivers events as loosely-typed JSON. Validating them at the
boundary means the reconciler only ever sees the fields it relies on, and
a malformed event is rejected with a clear reason instead of a KeyError
halfway through a vote update.

HOW: ReactionEvent covers both ``reaction_added`` and ``reaction_removed``
(tagged by ``type``). SlashCommand covers the form fields of a slash
command POST. Unknown fields are ignored.

RULES:
- ReactionEvent.type is restricted to the two reaction event kinds
- item.ts is the external message id used for reconciliation
- item_user may be absent (e.g. reactions on files); such events are
  never ours and get ignored downstream
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ReactionEventType(str, Enum):
    """The two reaction event kinds the bot subscribes to."""

    added = "reaction_added"
    removed = "reaction_removed"


class ReactionItem(BaseModel):
    """The message a reaction was added to or removed from."""

    type: str = Field(default="message", description="Item type, normally 'message'.")
    channel: Optional[str] = Field(default=None, description="Channel of the message.")
    ts: str = Field(min_length=1, description="Message timestamp (external message id).")


class ReactionEvent(BaseModel):
    """A ``reaction_added`` or ``reaction_removed`` event body."""

    type: ReactionEventType = Field(description="Event kind.")
    reaction: str = Field(description="Reaction name without colons, e.g. '+1'.")
    item: ReactionItem = Field(description="Reacted-to item.")
    item_user: Optional[str] = Field(
        default=None, description="Author of the reacted-to message."
    )
    user: Optional[str] = Field(default=None, description="User who reacted.")


class SlashCommand(BaseModel):
    """Form fields of a slash command request."""

    text: str = Field(default="", description="Everything typed after the command.")
    command: Optional[str] = Field(default=None, description="The slash command, e.g. '/qa'.")
    user_id: Optional[str] = Field(default=None, description="Issuing user.")
    channel_id: Optional[str] = Field(default=None, description="Channel it was issued in.")


def parse_reaction_event(raw: Dict[str, Any]) -> ReactionEvent:
    """Validate a raw reaction event dict.

    Raises:
        pydantic.ValidationError: if required fields are missing or the
            event kind is not a reaction event.
    """
    return ReactionEvent.model_validate(raw)
