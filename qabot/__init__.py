"""Slack Q&A bot: collects questions for named events and tallies votes.

WHY: Town halls and all-hands meetings need a place where people can submit
questions ahead of time and vote on them. Slack already has the audience,
so the bot lives there: a slash command creates events and posts questions,
and thumbs-up/thumbs-down reactions on the posted messages become votes.

HOW: Two entry points share one core. The slash command is routed by
core.router into create-event / add-question flows; reaction events are
turned into vote deltas by core.reactions and applied atomically through
the question store. slack.publisher renders tallies back into the message.

RULES:
- Core modules talk to storage and Slack only through injected contracts
- Stores, publisher and Slack client are created once per process
- Reaction handling is fail-soft; command handling is fail-fast
"""

__version__ = "0.1.0"
