"""Package entry point for ``python -m qabot``.

WHY: The bot is one HTTP process that Slack calls for slash commands and
events. Running it should need nothing beyond the .env file.

HOW: Parses optional --host / --port / --log-level overrides, configures
logging, builds the FastAPI app from the environment, and serves it with
uvicorn.

RULES:
- Configuration errors exit with status 1 and a one-line message
- Command-line flags override QABOT_HOST / QABOT_PORT
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from qabot.config import load_settings
from qabot.server.app import create_app
from qabot.services import build_services

logger = logging.getLogger("qabot")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qabot",
        description="Slack Q&A bot: slash-command questions with reaction voting.",
    )
    parser.add_argument("--host", default=None, help="Bind address (default: QABOT_HOST or 0.0.0.0).")
    parser.add_argument("--port", type=int, default=None, help="Port (default: QABOT_PORT or 3000).")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        settings = load_settings()
    except ValueError as exc:
        print("Error: {}".format(exc), file=sys.stderr)
        sys.exit(1)

    app = create_app(build_services(settings))
    host = args.host or settings.host
    port = args.port or settings.port

    logger.info("Q&A bot listening at http://%s:%d", host, port)
    logger.info("Posting questions to channel %s", settings.channel_id)
    uvicorn.run(app, host=host, port=port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
