"""Core logic: identifier validation, data model, command routing, votes."""
