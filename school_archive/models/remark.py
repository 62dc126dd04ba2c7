"""Remark (conduct report) model."""

from sqlalchemy import BigInteger, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from school_archive.core.database import Base
from school_archive.models.base import IDMixin, TermScopedMixin, TimestampMixin


class Remark(Base, IDMixin, TimestampMixin, TermScopedMixin):
    """Form master's remarks for one student for a term and academic year."""

    __tablename__ = "remarks"

    student_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    conduct: Mapped[str | None] = mapped_column(String(255), nullable=True)
    attitude: Mapped[str | None] = mapped_column(String(255), nullable=True)
    interest: Mapped[str | None] = mapped_column(String(255), nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    teacher_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "student_id", "term", "academic_year",
            name="uq_remark_student_term",
        ),
        Index("idx_remarks_term", "term", "academic_year"),
    )

    def __repr__(self) -> str:
        return f"<Remark(student_id={self.student_id}, term={self.term})>"
