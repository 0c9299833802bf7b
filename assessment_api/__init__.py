"""Assessment engine for course tests."""
