"""HTTP server: FastAPI routes for slash commands and the Slack Events API."""
