"""Configuration constants and .env loading.

WHY: The bot needs Slack credentials, the channel it posts to, its own user
id (to recognise its own messages), and an optional MongoDB connection.
Keeping every knob in one module means nothing is read from os.environ
deep inside the logic.

HOW: python-dotenv loads the .env file on import. Constants are read with
defaults at module level; load_settings() collects them into a Settings
dataclass and fails loudly when a required value is missing.

RULES:
- Secrets are loaded from the environment, never hardcoded
- SLACK_BOT_TOKEN wins over the older SLACK_ACCESS_TOKEN name
- An unset MONGO_URI means "use the in-memory stores"
- load_settings() raises ValueError naming the missing variable
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_DB_NAME = "qabot"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000


@dataclass(frozen=True)
class Settings:
    """Resolved runtime configuration.

    RULES:
    - mongo_uri is None when persistence is process-local
    - signing_secret verifies both /command and /event requests
    """

    bot_token: str
    signing_secret: str
    channel_id: str
    bot_user_id: str
    mongo_uri: Optional[str] = None
    mongo_db_name: str = DEFAULT_DB_NAME
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


def _required(name: str, value: str) -> str:
    if not value:
        raise ValueError(
            "{} is not configured. Add it to the environment or the .env file.".format(name)
        )
    return value


def load_settings() -> Settings:
    """Build Settings from the environment.

    RULES:
    - SLACK_BOT_TOKEN (or SLACK_ACCESS_TOKEN), SLACK_SIGNING_SECRET,
      SLACK_CHANNEL_ID and SLACK_QABOT_USER_ID are required
    - QABOT_PORT must parse as an integer
    """
    bot_token = os.getenv("SLACK_BOT_TOKEN", "").strip() or os.getenv(
        "SLACK_ACCESS_TOKEN", ""
    ).strip()
    port_raw = os.getenv("QABOT_PORT", str(DEFAULT_PORT)).strip()
    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError("QABOT_PORT must be an integer, got {!r}".format(port_raw))

    return Settings(
        bot_token=_required("SLACK_BOT_TOKEN", bot_token),
        signing_secret=_required(
            "SLACK_SIGNING_SECRET", os.getenv("SLACK_SIGNING_SECRET", "").strip()
        ),
        channel_id=_required("SLACK_CHANNEL_ID", os.getenv("SLACK_CHANNEL_ID", "").strip()),
        bot_user_id=_required(
            "SLACK_QABOT_USER_ID", os.getenv("SLACK_QABOT_USER_ID", "").strip()
        ),
        mongo_uri=os.getenv("MONGO_URI", "").strip() or None,
        mongo_db_name=os.getenv("MONGO_DB_NAME", DEFAULT_DB_NAME).strip() or DEFAULT_DB_NAME,
        host=os.getenv("QABOT_HOST", DEFAULT_HOST).strip() or DEFAULT_HOST,
        port=port,
    )
