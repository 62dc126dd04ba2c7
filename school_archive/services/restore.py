"""Restore service for copying archived term data into a live term."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from school_archive.core.exceptions import ValidationError
from school_archive.models.archive import Archive
from school_archive.models.mark import Mark
from school_archive.models.remark import Remark
from school_archive.schemas.restore import (
    OverwriteMode,
    RestorePreview,
    RestoreRequest,
    RestoreResult,
    RowCounts,
)
from school_archive.services.archive import ArchiveService

logger = logging.getLogger(__name__)

MARK_COLUMNS = (
    "student_id",
    "class_name",
    "subject",
    "class_score",
    "exams_score",
    "grade",
    "remarks",
    "teacher_id",
)
REMARK_COLUMNS = (
    "student_id",
    "conduct",
    "attitude",
    "interest",
    "remarks",
    "teacher_id",
)


def mark_key(row: dict[str, Any]) -> tuple:
    """Conflict key of a mark within one term."""
    return (row["student_id"], row["subject"])


def remark_key(row: dict[str, Any]) -> tuple:
    """Conflict key of a remark within one term."""
    return (row["student_id"],)


# ==========================================
# Overwrite Strategies
# ==========================================

class RestoreStrategy(ABC):
    """
    Writes source rows into the target term under one overwrite mode.

    ``apply_marks`` and ``apply_remarks`` return ``(restored, skipped)``.
    Source rows are plain dicts of column values without term or year.
    """

    mode: OverwriteMode

    def __init__(self, db: Session, target_term: str, target_year: str):
        self.db = db
        self.target_term = target_term
        self.target_year = target_year

    @abstractmethod
    def apply_marks(self, rows: list[dict[str, Any]]) -> tuple[int, int]:
        ...

    @abstractmethod
    def apply_remarks(self, rows: list[dict[str, Any]]) -> tuple[int, int]:
        ...

    def _insert_marks(self, rows: list[dict[str, Any]]) -> int:
        self.db.add_all(
            Mark(term=self.target_term, academic_year=self.target_year, **row)
            for row in rows
        )
        self.db.flush()
        return len(rows)

    def _insert_remarks(self, rows: list[dict[str, Any]]) -> int:
        self.db.add_all(
            Remark(term=self.target_term, academic_year=self.target_year, **row)
            for row in rows
        )
        self.db.flush()
        return len(rows)

    def _target_marks(self) -> list[tuple[int, tuple]]:
        """(id, conflict key) of every mark in the target term."""
        result = self.db.execute(
            select(Mark.id, Mark.student_id, Mark.subject).where(
                Mark.term == self.target_term,
                Mark.academic_year == self.target_year,
            )
        )
        return [(row.id, (row.student_id, row.subject)) for row in result.all()]

    def _target_remarks(self) -> list[tuple[int, tuple]]:
        result = self.db.execute(
            select(Remark.id, Remark.student_id).where(
                Remark.term == self.target_term,
                Remark.academic_year == self.target_year,
            )
        )
        return [(row.id, (row.student_id,)) for row in result.all()]


class ReplaceStrategy(RestoreStrategy):
    """Wipe the target term, then insert every source row."""

    mode = OverwriteMode.REPLACE

    def apply_marks(self, rows: list[dict[str, Any]]) -> tuple[int, int]:
        deleted = self.db.execute(
            delete(Mark).where(
                Mark.term == self.target_term,
                Mark.academic_year == self.target_year,
            )
        ).rowcount
        logger.warning(
            f"Replace restore deleted {deleted} marks for {self.target_term} {self.target_year}"
        )
        return self._insert_marks(rows), 0

    def apply_remarks(self, rows: list[dict[str, Any]]) -> tuple[int, int]:
        deleted = self.db.execute(
            delete(Remark).where(
                Remark.term == self.target_term,
                Remark.academic_year == self.target_year,
            )
        ).rowcount
        logger.warning(
            f"Replace restore deleted {deleted} remarks for {self.target_term} {self.target_year}"
        )
        return self._insert_remarks(rows), 0


class MergeStrategy(RestoreStrategy):
    """Overwrite target rows whose key is in the source; keep all others."""

    mode = OverwriteMode.MERGE

    def apply_marks(self, rows: list[dict[str, Any]]) -> tuple[int, int]:
        source_keys = {mark_key(row) for row in rows}
        conflicting = [mark_id for mark_id, key in self._target_marks() if key in source_keys]
        if conflicting:
            self.db.execute(delete(Mark).where(Mark.id.in_(conflicting)))
            logger.info(f"Merge restore overwriting {len(conflicting)} marks")
        return self._insert_marks(rows), 0

    def apply_remarks(self, rows: list[dict[str, Any]]) -> tuple[int, int]:
        source_keys = {remark_key(row) for row in rows}
        conflicting = [
            remark_id for remark_id, key in self._target_remarks() if key in source_keys
        ]
        if conflicting:
            self.db.execute(delete(Remark).where(Remark.id.in_(conflicting)))
            logger.info(f"Merge restore overwriting {len(conflicting)} remarks")
        return self._insert_remarks(rows), 0


class SkipStrategy(RestoreStrategy):
    """Insert only rows whose key is free in the target; leave conflicts alone."""

    mode = OverwriteMode.SKIP

    def apply_marks(self, rows: list[dict[str, Any]]) -> tuple[int, int]:
        existing = {key for _, key in self._target_marks()}
        fresh = [row for row in rows if mark_key(row) not in existing]
        return self._insert_marks(fresh), len(rows) - len(fresh)

    def apply_remarks(self, rows: list[dict[str, Any]]) -> tuple[int, int]:
        existing = {key for _, key in self._target_remarks()}
        fresh = [row for row in rows if remark_key(row) not in existing]
        return self._insert_remarks(fresh), len(rows) - len(fresh)


STRATEGIES: dict[OverwriteMode, type[RestoreStrategy]] = {
    strategy.mode: strategy for strategy in (MergeStrategy, ReplaceStrategy, SkipStrategy)
}

WARNINGS = {
    OverwriteMode.REPLACE: (
        "This will DELETE all existing marks and remarks for {term} {year} "
        "and replace them with archived data."
    ),
    OverwriteMode.MERGE: (
        "This will merge archived data into {term} {year}, overwriting any conflicts."
    ),
    OverwriteMode.SKIP: (
        "This will restore archived data to {term} {year}, skipping any conflicts."
    ),
}


# ==========================================
# Restore Service
# ==========================================

class RestoreService:
    """Archive restore service.

    Runs inside the caller's session transaction, so a failed restore leaves
    the target term as it was once the session rolls back.
    """

    def __init__(self, db: Session):
        self.db = db

    def _validate(self, request: RestoreRequest) -> tuple[Archive, str, str, OverwriteMode]:
        target_term = (request.target_term or "").strip()
        target_year = (request.target_year or "").strip()
        if request.archive_id is None or not target_term or not target_year:
            raise ValidationError("Missing required fields: archiveId, targetTerm, targetYear")

        archive = ArchiveService(self.db).get_archive(request.archive_id)
        return archive, target_term, target_year, request.overwrite_mode

    def _source_marks(self, archive: Archive) -> list[dict[str, Any]]:
        marks = self.db.execute(
            select(Mark)
            .where(Mark.term == archive.term, Mark.academic_year == archive.academic_year)
            .order_by(Mark.id)
        ).scalars().all()
        return [{column: getattr(mark, column) for column in MARK_COLUMNS} for mark in marks]

    def _source_remarks(self, archive: Archive) -> list[dict[str, Any]]:
        remarks = self.db.execute(
            select(Remark)
            .where(Remark.term == archive.term, Remark.academic_year == archive.academic_year)
            .order_by(Remark.id)
        ).scalars().all()
        return [{column: getattr(remark, column) for column in REMARK_COLUMNS} for remark in remarks]

    def _count(self, model: type[Mark] | type[Remark], term: str, academic_year: str) -> int:
        return self.db.execute(
            select(func.count())
            .select_from(model)
            .where(model.term == term, model.academic_year == academic_year)
        ).scalar() or 0

    def preview(self, request: RestoreRequest) -> RestorePreview:
        """Describe what a restore would do without writing anything."""
        archive, target_term, target_year, mode = self._validate(request)

        source = RowCounts(
            marks=self._count(Mark, archive.term, archive.academic_year),
            remarks=self._count(Remark, archive.term, archive.academic_year),
        )
        target = RowCounts(
            marks=self._count(Mark, target_term, target_year),
            remarks=self._count(Remark, target_term, target_year),
        )
        target_populated = bool(target.marks or target.remarks)

        return RestorePreview(
            source_term=archive.term,
            source_year=archive.academic_year,
            target_term=target_term,
            target_year=target_year,
            overwrite_mode=mode,
            source=source,
            target=target,
            destructive=target_populated and mode != OverwriteMode.SKIP,
            warning=WARNINGS[mode].format(term=target_term, year=target_year),
        )

    def restore(self, request: RestoreRequest) -> RestoreResult:
        """Copy an archive's marks and remarks into the target term."""
        archive, target_term, target_year, mode = self._validate(request)

        logger.info(
            f"Restoring archive {archive.id} ({archive.term} {archive.academic_year}) "
            f"into {target_term} {target_year} with mode={mode.value}"
        )

        # Snapshot before writing; the target may be the source term itself
        source_marks = self._source_marks(archive)
        source_remarks = self._source_remarks(archive)
        logger.info(f"Found {len(source_marks)} marks and {len(source_remarks)} remarks to restore")

        strategy = STRATEGIES[mode](self.db, target_term, target_year)
        restored_marks, skipped_marks = strategy.apply_marks(source_marks)
        restored_remarks, skipped_remarks = strategy.apply_remarks(source_remarks)

        if skipped_marks or skipped_remarks:
            logger.info(
                f"Skipped {skipped_marks} marks and {skipped_remarks} remarks already present"
            )
        logger.info(f"Restored {restored_marks} marks and {restored_remarks} remarks")

        return RestoreResult(
            restored_marks=restored_marks,
            restored_remarks=restored_remarks,
            skipped_marks=skipped_marks,
            skipped_remarks=skipped_remarks,
            source_term=archive.term,
            source_year=archive.academic_year,
            target_term=target_term,
            target_year=target_year,
            overwrite_mode=mode,
        )
