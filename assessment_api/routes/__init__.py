"""API route modules."""
from assessment_api.routes import attempts, content, sessions, templates

__all__ = ["attempts", "content", "sessions", "templates"]
