"""Custom exception classes and error handling."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception.

    The ``detail`` is the response envelope itself so handlers can return it
    as-is.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        data: dict[str, Any] | None = None,
    ):
        self.message = message
        self.data = data
        detail: dict[str, Any] = {"status": "error", "message": message}
        if data:
            detail["data"] = data
        super().__init__(status_code=status_code, detail=detail)


class ValidationError(AppException):
    """Missing field or failed business precondition."""

    def __init__(
        self,
        message: str = "Validation error",
        data: dict[str, Any] | None = None,
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            message=message,
            data=data,
        )


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(
        self,
        resource: str = "Resource",
        identifier: str | None = None,
    ):
        self.identifier = identifier
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            message=f"{resource} not found",
        )


class ConflictError(AppException):
    """Resource already exists."""

    def __init__(self, message: str = "Resource already exists"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            message=message,
        )


class StoreError(AppException):
    """Record store query or connection failure.

    The underlying error is logged by whoever raises this; callers only ever
    see the generic message.
    """

    def __init__(self, message: str = "A database error occurred"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message=message,
        )
