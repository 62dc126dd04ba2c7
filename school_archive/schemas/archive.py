"""Archive schemas."""

from datetime import date, datetime
from typing import Any

from pydantic import ConfigDict, Field

from school_archive.schemas.common import BaseSchema


# ==========================================
# Archive Records
# ==========================================

class ArchiveCreate(BaseSchema):
    """Archive creation request.

    term and academic_year are optional here so that the service can reject
    missing values with its own message.
    """

    term: str | None = Field(None, max_length=50)
    academic_year: str | None = Field(None, max_length=20)
    archived_by: int | None = None
    metadata: dict[str, Any] | None = None


class ArchiveFilter(BaseSchema):
    """Archive list filtering options."""

    model_config = ConfigDict(str_strip_whitespace=True)

    term: str | None = None
    academic_year: str | None = None
    search: str | None = None  # Substring of term or academic year


class ArchiveResponse(BaseSchema):
    """Archive row as stored."""

    id: int
    term: str
    academic_year: str
    archived_date: datetime
    archived_by: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ArchiveCounts(BaseSchema):
    """Aggregate row counts for an archived term."""

    marks: int = 0
    remarks: int = 0
    students: int = 0


class ArchiveSummary(ArchiveResponse):
    """Archive row with aggregate counts, as returned by the list."""

    counts: ArchiveCounts = Field(default_factory=ArchiveCounts)


# ==========================================
# Archive Detail
# ==========================================

class ArchiveMarkResponse(BaseSchema):
    """Mark row joined with student identity."""

    id: int
    student_id: int
    student_name: str = ""
    id_number: str | None = None
    class_name: str | None = None
    subject: str
    class_score: float | None = None
    exams_score: float | None = None
    grade: str | None = None
    remarks: str | None = None


class ArchiveRemarkResponse(BaseSchema):
    """Remark row joined with student identity."""

    id: int
    student_id: int
    student_name: str = ""
    id_number: str | None = None
    conduct: str | None = None
    attitude: str | None = None
    interest: str | None = None
    remarks: str | None = None


class ArchiveStudentResponse(BaseSchema):
    """Student with at least one mark in the archived term."""

    id: int
    first_name: str
    last_name: str
    id_number: str | None = None
    class_name: str | None = None
    date_of_birth: date | None = None


class ArchiveDetail(BaseSchema):
    """Full archive payload."""

    archive: ArchiveResponse
    marks: list[ArchiveMarkResponse]
    remarks: list[ArchiveRemarkResponse]
    students: list[ArchiveStudentResponse]


# ==========================================
# Analytics & Comparison
# ==========================================

class PerformanceStats(BaseSchema):
    """Average/highest/lowest of total scores."""

    average: float = 0.0
    highest: float = 0.0
    lowest: float = 0.0
    count: int = 0


class SubjectPerformance(PerformanceStats):
    subject: str


class ClassPerformance(PerformanceStats):
    class_name: str


class ArchiveAnalytics(BaseSchema):
    """Performance breakdown of one archive's marks."""

    archive: ArchiveResponse
    classes: list[str]
    subjects: list[str]
    grade_distribution: dict[str, int]
    subject_performance: list[SubjectPerformance]
    class_performance: list[ClassPerformance]
    # Keys are range labels like "0-40", kept verbatim
    score_distribution: dict[str, int]


class ArchiveComparisonEntry(BaseSchema):
    """One archive's column in a comparison."""

    archive: ArchiveResponse
    stats: PerformanceStats
    students: int


class ArchiveComparison(BaseSchema):
    """Side-by-side statistics for several archives."""

    classes: list[str]
    subjects: list[str]
    entries: list[ArchiveComparisonEntry]
