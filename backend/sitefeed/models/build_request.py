"""BuildRequest ORM — one row per CMS webhook delivery that asked for a rebuild.

Invariants:
    - status is a BuildStatus value
    - triggered_at is set only when status == triggered
    - error is set only when status == failed

Design Decisions:
    - Ignored events (not in build_trigger_events) are never persisted
    - Debounce reads the latest triggered row, so created_at is indexed
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from sitefeed.db.base import Base


class BuildRequest(Base):
    """BuildRequest entity — a recorded rebuild request."""
    __tablename__ = "build_requests"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    event: Mapped[str] = mapped_column(String(50), nullable=False)
    model: Mapped[str | None] = mapped_column(String(100), nullable=True)
    entry_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    entry_slug: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        default=lambda: datetime.now(timezone.utc),
    )
    triggered_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
