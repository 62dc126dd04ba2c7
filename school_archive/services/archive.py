"""Archive service: term archive records, detail assembly and analytics."""

import logging

from sqlalchemy import distinct, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from school_archive.core.exceptions import ConflictError, NotFoundError, ValidationError
from school_archive.models.archive import Archive
from school_archive.models.mark import Mark
from school_archive.models.remark import Remark
from school_archive.models.student import Student
from school_archive.schemas.archive import (
    ArchiveAnalytics,
    ArchiveComparison,
    ArchiveComparisonEntry,
    ArchiveCounts,
    ArchiveCreate,
    ArchiveDetail,
    ArchiveFilter,
    ArchiveMarkResponse,
    ArchiveRemarkResponse,
    ArchiveResponse,
    ArchiveStudentResponse,
    ArchiveSummary,
)
from school_archive.schemas.common import MessageResponse
from school_archive.services import analytics

logger = logging.getLogger(__name__)

DATA_PRESERVED_NOTE = "Associated marks and remarks data has been preserved"

TermKey = tuple[str, str]


class ArchiveService:
    """Term archive management service."""

    def __init__(self, db: Session):
        self.db = db

    # ==========================================
    # Response mapping
    # ==========================================

    def _archive_to_response(self, archive: Archive) -> dict:
        """Convert Archive to response dict."""
        return {
            "id": archive.id,
            "term": archive.term,
            "academic_year": archive.academic_year,
            "archived_date": archive.archived_date,
            "archived_by": archive.archived_by,
            "metadata": archive.archive_metadata or {},
        }

    def _mark_to_response(self, mark: Mark, student: Student | None) -> dict:
        return {
            "id": mark.id,
            "student_id": mark.student_id,
            "student_name": student.full_name if student else "",
            "id_number": student.id_number if student else None,
            "class_name": mark.class_name,
            "subject": mark.subject,
            "class_score": mark.class_score,
            "exams_score": mark.exams_score,
            "grade": mark.grade,
            "remarks": mark.remarks,
        }

    def _remark_to_response(self, remark: Remark, student: Student | None) -> dict:
        return {
            "id": remark.id,
            "student_id": remark.student_id,
            "student_name": student.full_name if student else "",
            "id_number": student.id_number if student else None,
            "conduct": remark.conduct,
            "attitude": remark.attitude,
            "interest": remark.interest,
            "remarks": remark.remarks,
        }

    # ==========================================
    # Archive Records
    # ==========================================

    def get_archive(self, archive_id: int) -> Archive:
        """Get archive by ID."""
        result = self.db.execute(select(Archive).where(Archive.id == archive_id))
        archive = result.scalar_one_or_none()
        if not archive:
            raise NotFoundError("Archive", str(archive_id))
        return archive

    def list_archives(self, filters: ArchiveFilter | None = None) -> list[ArchiveSummary]:
        """List archives newest first, each with marks/remarks/student counts."""
        query = select(Archive)

        if filters:
            if filters.term:
                query = query.where(Archive.term == filters.term)
            if filters.academic_year:
                query = query.where(Archive.academic_year == filters.academic_year)
            if filters.search:
                search_term = f"%{filters.search}%"
                query = query.where(
                    or_(
                        Archive.term.ilike(search_term),
                        Archive.academic_year.ilike(search_term),
                    )
                )

        query = query.order_by(Archive.archived_date.desc(), Archive.id.desc())
        archives = list(self.db.execute(query).scalars().all())
        logger.debug(f"Found {len(archives)} archives")

        if not archives:
            return []

        counts = self._get_counts(archives)

        return [
            ArchiveSummary.model_validate(
                {
                    **self._archive_to_response(archive),
                    "counts": counts.get(archive.id, ArchiveCounts()),
                }
            )
            for archive in archives
        ]

    def create_archive(self, request: ArchiveCreate) -> ArchiveResponse:
        """Archive a term after checking it is new and has marks."""
        term = (request.term or "").strip()
        academic_year = (request.academic_year or "").strip()
        if not term or not academic_year:
            raise ValidationError("term and academicYear are required")

        existing = self.db.execute(
            select(Archive.id).where(
                Archive.term == term,
                Archive.academic_year == academic_year,
            )
        ).first()
        if existing:
            raise ConflictError("Archive already exists for this term and year")

        marks_count = self.db.execute(
            select(func.count())
            .select_from(Mark)
            .where(Mark.term == term, Mark.academic_year == academic_year)
        ).scalar() or 0
        if marks_count == 0:
            raise ValidationError("No marks data found to archive for this term and year")

        archive = Archive(
            term=term,
            academic_year=academic_year,
            archived_by=request.archived_by,
            archive_metadata=request.metadata or {},
        )
        # The unique constraint decides between concurrent creates
        try:
            with self.db.begin_nested():
                self.db.add(archive)
                self.db.flush()
        except IntegrityError:
            logger.info(f"Concurrent archive create lost for {term} {academic_year}")
            raise ConflictError("Archive already exists for this term and year")
        self.db.refresh(archive)

        logger.info(
            f"Archived {term} {academic_year} as archive {archive.id} ({marks_count} marks)"
        )
        return ArchiveResponse.model_validate(self._archive_to_response(archive))

    def delete_archive(self, archive_id: int) -> MessageResponse:
        """
        Delete an archive record.

        Only the archive marker is removed. Marks, remarks and students for
        the archived term are left exactly as they were.
        """
        archive = self.get_archive(archive_id)
        self.db.delete(archive)
        self.db.flush()

        logger.info(
            f"Deleted archive {archive_id} ({archive.term} {archive.academic_year}); data preserved"
        )
        return MessageResponse(
            message="Archive deleted successfully",
            note=DATA_PRESERVED_NOTE,
        )

    # ==========================================
    # Aggregate Counts
    # ==========================================

    def _get_counts(self, archives: list[Archive]) -> dict[int, ArchiveCounts]:
        """
        Counts for every archive in one grouped query per table.

        If the grouped queries fail, each archive is counted on its own and
        an archive whose counts cannot be read gets zeros.
        """
        try:
            with self.db.begin_nested():
                grouped = self._count_grouped(archives)
        except SQLAlchemyError:
            logger.warning("Grouped archive counts failed; counting per archive", exc_info=True)
        else:
            return {
                archive.id: grouped.get((archive.term, archive.academic_year), ArchiveCounts())
                for archive in archives
            }

        counts = {}
        for archive in archives:
            try:
                with self.db.begin_nested():
                    counts[archive.id] = self._count_for_term(archive.term, archive.academic_year)
            except SQLAlchemyError:
                logger.warning(
                    f"Could not count data for archive {archive.id}; reporting zeros",
                    exc_info=True,
                )
                counts[archive.id] = ArchiveCounts()
        return counts

    def _count_grouped(self, archives: list[Archive]) -> dict[TermKey, ArchiveCounts]:
        terms = sorted({a.term for a in archives})
        years = sorted({a.academic_year for a in archives})

        mark_rows = self.db.execute(
            select(
                Mark.term,
                Mark.academic_year,
                func.count().label("marks"),
                func.count(distinct(Mark.student_id)).label("students"),
            )
            .where(Mark.term.in_(terms), Mark.academic_year.in_(years))
            .group_by(Mark.term, Mark.academic_year)
        ).all()
        remark_rows = self.db.execute(
            select(
                Remark.term,
                Remark.academic_year,
                func.count().label("remarks"),
            )
            .where(Remark.term.in_(terms), Remark.academic_year.in_(years))
            .group_by(Remark.term, Remark.academic_year)
        ).all()

        grouped: dict[TermKey, ArchiveCounts] = {}
        for row in mark_rows:
            counts = grouped.setdefault((row.term, row.academic_year), ArchiveCounts())
            counts.marks = row.marks or 0
            counts.students = row.students or 0
        for row in remark_rows:
            counts = grouped.setdefault((row.term, row.academic_year), ArchiveCounts())
            counts.remarks = row.remarks or 0
        return grouped

    def _count_for_term(self, term: str, academic_year: str) -> ArchiveCounts:
        mark_row = self.db.execute(
            select(
                func.count().label("marks"),
                func.count(distinct(Mark.student_id)).label("students"),
            ).where(Mark.term == term, Mark.academic_year == academic_year)
        ).one()
        remarks = self.db.execute(
            select(func.count())
            .select_from(Remark)
            .where(Remark.term == term, Remark.academic_year == academic_year)
        ).scalar()
        return ArchiveCounts(
            marks=mark_row.marks or 0,
            remarks=remarks or 0,
            students=mark_row.students or 0,
        )

    # ==========================================
    # Archive Detail
    # ==========================================

    def get_archive_detail(self, archive_id: int) -> ArchiveDetail:
        """Archive with every mark, remark and marked student of its term."""
        archive = self.get_archive(archive_id)
        term, academic_year = archive.term, archive.academic_year

        mark_rows = self.db.execute(
            select(Mark, Student)
            .outerjoin(Student, Student.id == Mark.student_id)
            .where(Mark.term == term, Mark.academic_year == academic_year)
            .order_by(Mark.id)
        ).all()

        remark_rows = self.db.execute(
            select(Remark, Student)
            .outerjoin(Student, Student.id == Remark.student_id)
            .where(Remark.term == term, Remark.academic_year == academic_year)
            .order_by(Remark.id)
        ).all()

        # Only students with at least one mark in the term
        students = self.db.execute(
            select(Student)
            .join(Mark, Mark.student_id == Student.id)
            .where(Mark.term == term, Mark.academic_year == academic_year)
            .distinct()
            .order_by(Student.id)
        ).scalars().all()

        return ArchiveDetail(
            archive=ArchiveResponse.model_validate(self._archive_to_response(archive)),
            marks=[
                ArchiveMarkResponse.model_validate(self._mark_to_response(mark, student))
                for mark, student in mark_rows
            ],
            remarks=[
                ArchiveRemarkResponse.model_validate(self._remark_to_response(remark, student))
                for remark, student in remark_rows
            ],
            students=[ArchiveStudentResponse.model_validate(s) for s in students],
        )

    # ==========================================
    # Analytics & Comparison
    # ==========================================

    def get_archive_analytics(
        self,
        archive_id: int,
        class_name: str | None = None,
        subject: str | None = None,
    ) -> ArchiveAnalytics:
        """Grade, subject, class and score-range breakdowns for one archive."""
        detail = self.get_archive_detail(archive_id)
        marks = analytics.filter_marks(detail.marks, class_name, subject)

        return ArchiveAnalytics(
            archive=detail.archive,
            classes=analytics.unique_classes(detail.marks),
            subjects=analytics.unique_subjects(detail.marks),
            grade_distribution=analytics.grade_distribution(marks),
            subject_performance=analytics.subject_performance(marks),
            class_performance=analytics.class_performance(marks),
            score_distribution=analytics.score_distribution(marks),
        )

    def compare_archives(
        self,
        archive_ids: list[int],
        class_name: str | None = None,
        subject: str | None = None,
    ) -> ArchiveComparison:
        """Side-by-side score statistics for several archives, in request order."""
        if not archive_ids:
            raise ValidationError("At least one archive is required for comparison")

        entries = []
        classes: set[str] = set()
        subjects: set[str] = set()
        for archive_id in archive_ids:
            detail = self.get_archive_detail(archive_id)
            classes.update(analytics.unique_classes(detail.marks))
            subjects.update(analytics.unique_subjects(detail.marks))
            marks = analytics.filter_marks(detail.marks, class_name, subject)
            entries.append(
                ArchiveComparisonEntry(
                    archive=detail.archive,
                    stats=analytics.calculate_stats(marks),
                    students=len(detail.students),
                )
            )

        return ArchiveComparison(
            classes=sorted(classes),
            subjects=sorted(subjects),
            entries=entries,
        )
