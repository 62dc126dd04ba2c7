"""Mark (subject score) model."""

from decimal import Decimal

from sqlalchemy import DECIMAL, BigInteger, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from school_archive.core.database import Base
from school_archive.models.base import IDMixin, TermScopedMixin, TimestampMixin


class Mark(Base, IDMixin, TimestampMixin, TermScopedMixin):
    """Score for one student in one subject for a term and academic year."""

    __tablename__ = "marks"

    # No FK: marks outlive the student rows they were recorded against
    student_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    class_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    subject: Mapped[str] = mapped_column(String(100), nullable=False)
    class_score: Mapped[Decimal | None] = mapped_column(DECIMAL(5, 2), nullable=True)
    exams_score: Mapped[Decimal | None] = mapped_column(DECIMAL(5, 2), nullable=True)
    grade: Mapped[str | None] = mapped_column(String(5), nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    teacher_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "student_id", "class_name", "subject", "term", "academic_year",
            name="uq_mark_student_class_subject_term",
        ),
        Index("idx_marks_term", "term", "academic_year"),
    )

    def __repr__(self) -> str:
        return f"<Mark(student_id={self.student_id}, subject={self.subject}, term={self.term})>"
