"""Slack integration: message templates, publisher, payloads, Bolt listeners."""
