"""Archive restore endpoints."""

from fastapi import APIRouter

from school_archive.core.database import DbSession
from school_archive.schemas.common import ApiResponse, ErrorResponse
from school_archive.schemas.restore import RestorePreview, RestoreRequest, RestoreResult
from school_archive.services.restore import RestoreService

router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)


@router.post("", response_model=ApiResponse[RestoreResult])
def restore_archive(
    request: RestoreRequest,
    db: DbSession,
):
    """
    Restore an archive's marks and remarks into a target term.

    WARNING: replace deletes all existing target data and merge overwrites
    conflicting rows. Call /preview first to show the operator what will
    happen. The restore is all-or-nothing.
    """
    service = RestoreService(db)
    return ApiResponse[RestoreResult](
        message="Archive restored successfully",
        data=service.restore(request),
    )


@router.post("/preview", response_model=ApiResponse[RestorePreview])
def preview_restore(
    request: RestoreRequest,
    db: DbSession,
):
    """Report source/target row counts and the warning for a restore. Writes nothing."""
    service = RestoreService(db)
    preview = service.preview(request)
    return ApiResponse[RestorePreview](message=preview.warning, data=preview)
