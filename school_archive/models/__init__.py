"""Database models package."""

from school_archive.models.archive import TERMS, Archive
from school_archive.models.mark import Mark
from school_archive.models.remark import Remark
from school_archive.models.student import Student

__all__ = [
    # Archive
    "Archive",
    "TERMS",
    # Record store
    "Mark",
    "Remark",
    "Student",
]
