"""Slack Bolt app: reaction event listeners.

WHY: Votes arrive as Events API callbacks. Bolt verifies the request
signature, answers Slack's url_verification challenge, acks within the
3-second window, and dispatches reaction_added / reaction_removed to our
listeners.

HOW: create_app() builds a Bolt App and registers one listener for both
reaction event kinds. The listener hands the raw event dict to the
ReactionReconciler, which validates and applies it.

RULES:
- Listeners never raise; the reconciler is fail-soft
- Bolt acks Events API requests itself (process_before_response=False),
  so vote updates run after Slack has its 200
- token_verification_enabled is off so building the app makes no network
  call; the token is checked on first API use instead
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from slack_bolt import App
from slack_sdk import WebClient

from qabot.core.reactions import ReactionReconciler
from qabot.slack.payloads import ReactionEventType

logger = logging.getLogger(__name__)


def make_reaction_listener(
    reconciler: ReactionReconciler,
) -> Callable[[Dict[str, Any]], None]:
    """Build the Bolt listener bound to *reconciler*.

    Bolt injects listener arguments by parameter name, so the inner
    function must take ``event``.
    """

    def handle_reaction(event: Dict[str, Any]) -> None:
        reconciler.handle_payload(event)

    return handle_reaction


def create_app(
    client: WebClient,
    signing_secret: str,
    reconciler: ReactionReconciler,
) -> App:
    """Create the Bolt app with reaction listeners registered.

    *client* is the process-wide WebClient also used by the publisher.
    """
    app = App(
        client=client,
        signing_secret=signing_secret,
        token_verification_enabled=False,
    )

    listener = make_reaction_listener(reconciler)
    for event_type in ReactionEventType:
        app.event(event_type.value)(listener)

    logger.debug("Registered reaction listeners")
    return app
