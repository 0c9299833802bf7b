"""Assessment engine services."""
