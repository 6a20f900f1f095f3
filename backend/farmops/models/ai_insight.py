"""AIInsight ORM — persisted, normalized model output attached to a farm.

Invariants:
    - Rows are only written through core/insight_normalization (severity, confidence
      and recommended_actions already clamped)
    - insight_type is "ai_insight" for generated rows

Design Decisions:
    - `metadata_` attribute mapped to the "metadata" column: `metadata` is reserved
      on declarative classes
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Float, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from farmops.db.base import Base


class AIInsight(Base):
    __tablename__ = "ai_insights"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    farm_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("farms.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False,
    )
    insight_type: Mapped[str] = mapped_column(
        String(50), nullable=False, default="ai_insight",
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    severity: Mapped[str] = mapped_column(
        String(10), nullable=False, default="medium",
    )
    recommended_actions: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    confidence: Mapped[float] = mapped_column(Float, nullable=False, default=0.7)
    metadata_: Mapped[dict] = mapped_column(
        "metadata", JSON, nullable=False, default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
