"""Message templates for posted questions and slash-command replies.

WHY: The same question text is rendered twice, once when first posted and
again every time its tallies change. Centralizing the templates keeps the
router, reconciler and tests agreeing on the exact wording.

HOW: Plain functions returning Slack mrkdwn strings. Reply texts for the
slash command are module constants or small formatters.

RULES:
- Event ids are wrapped in backticks, question bodies in bold
- Tallies use the :+1: / :-1: emoji codes Slack renders as thumbs
- Functions return str only; no Slack API calls here
"""

from __future__ import annotations

from qabot.core.models import Question

# ---------------------------------------------------------------------------
# Slash command replies
# ---------------------------------------------------------------------------

CANNOT_PARSE_REPLY = "Cannot parse event id."
QUESTION_ADDED_REPLY = "Question was successfully added."


def event_exists_reply(event_id: str) -> str:
    return "Event `{}` already exists.".format(event_id)


def event_missing_reply(event_id: str) -> str:
    return "Event `{}` does not yet exist.".format(event_id)


def event_created_reply(event_id: str) -> str:
    return (
        "Event created successfully. "
        "Use this ID to add questions: `{}`".format(event_id)
    )


# ---------------------------------------------------------------------------
# Question messages
# ---------------------------------------------------------------------------


def format_new_question(event_id: str, text: str) -> str:
    """Text of the message posted when a question is first added."""
    return "New question for event `{}`: \n *{}*".format(event_id, text)


def format_question_tally(question: Question) -> str:
    """Text of a question message after its votes have changed.

    RULES:
    - Starts with the same header as format_new_question()
    - Appends a line with the current upvote and downvote counts
    """
    return "{}\n:+1: = {}, :-1: = {}".format(
        format_new_question(question.event_id, question.text),
        question.upvotes,
        question.downvotes,
    )
