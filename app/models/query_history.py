import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class AggregationMode(str, enum.Enum):
    hourly = "hourly"
    day_of_month = "day_of_month"
    monthly = "monthly"


class QueryHistory(Base):
    """One accepted aggregation request. Append-only."""

    __tablename__ = "query_history"
    __table_args__ = (
        Index("idx_query_history_created_at", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # Stored as plain text (AggregationMode value), matching the SQL schema
    aggregation_type: Mapped[str] = mapped_column(Text, nullable=False)
    date_from: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    date_to: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
