"""Message publisher: posts and edits question messages in Slack.

WHY: The router posts each new question to the Q&A channel and the
reconciler edits it when votes change. Both go through this small
contract so the core can be tested with a fake publisher.

HOW: MessagePublisher is an ABC; SlackMessagePublisher implements it with
a slack_sdk WebClient (the same client Bolt hands to listeners).

RULES:
- publish() returns the message ``ts``, the reconciliation key
- SlackApiError is re-raised as TransientInfraError
- A post response without ``ts`` is treated as a failure
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from slack_sdk.errors import SlackApiError

from qabot.core.errors import TransientInfraError

logger = logging.getLogger(__name__)


class MessagePublisher(ABC):
    """Posts new messages and replaces the text of existing ones."""

    @abstractmethod
    def publish(self, channel: str, text: str) -> str:
        """Post *text* to *channel*; return the new message's id."""

    @abstractmethod
    def update(self, channel: str, external_message_id: str, text: str) -> None:
        """Replace the text of an existing message."""


class SlackMessagePublisher(MessagePublisher):
    """MessagePublisher backed by slack_sdk.WebClient."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def publish(self, channel: str, text: str) -> str:
        try:
            resp = self._client.chat_postMessage(channel=channel, text=text)
        except SlackApiError as exc:
            raise TransientInfraError(
                "chat.postMessage failed: {}".format(exc.response.get("error", exc))
            ) from exc

        ts = resp.get("ts")
        if not ts:
            raise TransientInfraError("chat.postMessage returned no message ts")

        logger.debug("Posted message %s to %s", ts, channel)
        return ts

    def update(self, channel: str, external_message_id: str, text: str) -> None:
        try:
            self._client.chat_update(
                channel=channel,
                ts=external_message_id,
                text=text,
            )
        except SlackApiError as exc:
            raise TransientInfraError(
                "chat.update failed for {}: {}".format(
                    external_message_id, exc.response.get("error", exc)
                )
            ) from exc
