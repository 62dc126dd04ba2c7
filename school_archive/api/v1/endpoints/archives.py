"""Term archive endpoints."""

from fastapi import APIRouter, Query

from school_archive.core.database import DbSession
from school_archive.core.exceptions import ValidationError
from school_archive.models.archive import TERMS
from school_archive.schemas.archive import (
    ArchiveAnalytics,
    ArchiveComparison,
    ArchiveCreate,
    ArchiveDetail,
    ArchiveFilter,
    ArchiveResponse,
    ArchiveSummary,
)
from school_archive.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from school_archive.services.archive import ArchiveService

router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)


@router.get(
    "",
    response_model=ApiResponse[ArchiveDetail] | ApiResponse[list[ArchiveSummary]],
)
def get_archives(
    db: DbSession,
    archive_id: int | None = Query(None, alias="archiveId"),
    term: str | None = None,
    year: str | None = None,
    search: str | None = None,
):
    """
    Get one archive with its data, or list archives.

    With archiveId: the archive plus every mark, remark and marked student
    of its term. Without: archive summaries newest first, each with marks,
    remarks and distinct student counts, optionally filtered by term/year.
    """
    service = ArchiveService(db)

    if archive_id is not None:
        return ApiResponse[ArchiveDetail](data=service.get_archive_detail(archive_id))

    filters = ArchiveFilter(term=term, academic_year=year, search=search)
    return ApiResponse[list[ArchiveSummary]](data=service.list_archives(filters))


@router.post("", response_model=ApiResponse[ArchiveResponse])
def create_archive(
    request: ArchiveCreate,
    db: DbSession,
):
    """
    Archive a term.
    Fails when fields are missing, the term has no marks, or it is already archived.
    """
    service = ArchiveService(db)
    archive = service.create_archive(request)
    return ApiResponse[ArchiveResponse](
        message="Term archived successfully",
        data=archive,
    )


@router.delete("", response_model=MessageResponse)
def delete_archive(
    db: DbSession,
    archive_id: int | None = Query(None, alias="id"),
):
    """
    Delete an archive record.
    Marks, remarks and students of the archived term are preserved.
    """
    if archive_id is None:
        raise ValidationError("Archive ID is required")

    service = ArchiveService(db)
    return service.delete_archive(archive_id)


@router.get("/analytics", response_model=ApiResponse[ArchiveAnalytics])
def get_archive_analytics(
    db: DbSession,
    archive_id: int = Query(..., alias="archiveId"),
    class_name: str | None = Query(None, alias="className"),
    subject: str | None = None,
):
    """
    Grade, subject, class and score-range breakdowns for one archive.
    className and subject narrow the marks analysed ("all" means no filter).
    """
    service = ArchiveService(db)
    return ApiResponse[ArchiveAnalytics](
        data=service.get_archive_analytics(archive_id, class_name, subject)
    )


@router.get("/compare", response_model=ApiResponse[ArchiveComparison])
def compare_archives(
    db: DbSession,
    archive_ids: list[int] = Query([], alias="archiveIds"),
    class_name: str | None = Query(None, alias="className"),
    subject: str | None = None,
):
    """Compare score statistics across archives (repeat archiveIds per archive)."""
    service = ArchiveService(db)
    return ApiResponse[ArchiveComparison](
        data=service.compare_archives(archive_ids, class_name, subject)
    )


@router.get("/terms", response_model=ApiResponse[list[str]])
def get_terms():
    """Term names shared by archives, marks and remarks."""
    return ApiResponse[list[str]](data=TERMS)
