"""Term archive model."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, BigInteger, DateTime, Index, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from school_archive.core.database import Base
from school_archive.models.base import IDMixin, TermScopedMixin, TimestampMixin

# Canonical term vocabulary shared with marks and remarks
TERMS = ["First Term", "Second Term", "Third Term"]


class Archive(Base, IDMixin, TimestampMixin, TermScopedMixin):
    """
    Marker recording that a term and academic year has been archived.

    An archive does not own any data: marks, remarks and students stay in
    their own tables and are looked up by (term, academic_year).
    """

    __tablename__ = "archives"

    archived_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )
    archived_by: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    # 'metadata' is reserved on declarative classes
    archive_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSON().with_variant(JSONB, "postgresql"),
        default=dict,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("term", "academic_year", name="uq_archive_term_year"),
        Index("idx_archives_term_year", "term", "academic_year"),
        Index("idx_archives_date", "archived_date"),
    )

    def __repr__(self) -> str:
        return f"<Archive(id={self.id}, term={self.term}, year={self.academic_year})>"
