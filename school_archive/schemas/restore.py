"""Archive restore schemas."""

import enum

from pydantic import Field

from school_archive.schemas.common import BaseSchema


class OverwriteMode(str, enum.Enum):
    """How a restore treats rows already present in the target term."""

    MERGE = "merge"
    REPLACE = "replace"
    SKIP = "skip"


class RestoreRequest(BaseSchema):
    """Restore request body."""

    archive_id: int | None = None
    target_term: str | None = Field(None, max_length=50)
    target_year: str | None = Field(None, max_length=20)
    overwrite_mode: OverwriteMode = OverwriteMode.MERGE


class RestoreResult(BaseSchema):
    """Counts of rows written by a restore."""

    restored_marks: int = 0
    restored_remarks: int = 0
    skipped_marks: int = 0
    skipped_remarks: int = 0
    source_term: str
    source_year: str
    target_term: str
    target_year: str
    overwrite_mode: OverwriteMode


class RowCounts(BaseSchema):
    marks: int = 0
    remarks: int = 0


class RestorePreview(BaseSchema):
    """What a restore would touch, shown to the operator before running it."""

    source_term: str
    source_year: str
    target_term: str
    target_year: str
    overwrite_mode: OverwriteMode
    source: RowCounts
    target: RowCounts
    destructive: bool
    warning: str
