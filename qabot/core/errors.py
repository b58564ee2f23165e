"""Error taxonomy shared by the router, reconciler and stores.

WHY: Command handling reports user mistakes as ordinary replies but lets
infrastructure failures surface as server errors; reaction handling logs
everything. Distinct exception types let each caller pick its policy.

RULES:
- UserInputError / ConflictError / NotFoundError are expected outcomes
- TransientInfraError wraps store or Slack API failures
- All derive from QABotError so callers can catch the family at once
"""

from __future__ import annotations


class QABotError(Exception):
    """Base class for all bot errors."""


class UserInputError(QABotError):
    """Malformed command input, e.g. an invalid event identifier."""


class ConflictError(QABotError):
    """An event with this identifier already exists."""


class NotFoundError(QABotError):
    """Referenced event or question does not exist."""


class TransientInfraError(QABotError):
    """Store or messaging platform unavailable."""
