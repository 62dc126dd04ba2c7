"""Student model."""

from datetime import date

from sqlalchemy import Date, String
from sqlalchemy.orm import Mapped, mapped_column

from school_archive.core.database import Base
from school_archive.models.base import IDMixin, TimestampMixin


class Student(Base, IDMixin, TimestampMixin):
    """Student identity and current class assignment."""

    __tablename__ = "students"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    id_number: Mapped[str | None] = mapped_column(String(50), nullable=True, unique=True)
    class_name: Mapped[str | None] = mapped_column(String(50), nullable=True)  # 'class' is reserved keyword
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, name={self.full_name}, class={self.class_name})>"
