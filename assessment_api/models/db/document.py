"""
Stored JSON document model.
Each row holds one whole document addressed by its resource path.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

import sqlalchemy as sa
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from assessment_api.database import Base


class StoredDocument(Base):
    """One JSON document persisted as a whole (no partial updates)."""

    __tablename__ = "documents"

    path: Mapped[str] = mapped_column(String(255), primary_key=True, index=True)
    body_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    @property
    def body(self) -> Any:
        """Parse body from JSON."""
        if not self.body_json:
            return None
        try:
            return json.loads(self.body_json)
        except (json.JSONDecodeError, TypeError):
            return None

    @body.setter
    def body(self, value: Any) -> None:
        """Serialize body to JSON."""
        self.body_json = json.dumps(value, ensure_ascii=False) if value is not None else None

    def __repr__(self) -> str:
        return f"<StoredDocument(path='{self.path}')>"
