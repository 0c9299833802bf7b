"""Database models."""
from assessment_api.models.db.document import StoredDocument

__all__ = ["StoredDocument"]
