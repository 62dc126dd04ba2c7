import os

# Must be set before school_archive is imported
os.environ["DATABASE_URL"] = "sqlite://"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from school_archive.core.database import Base, SessionLocal, engine
from school_archive.main import app
from school_archive.models import Archive, Mark, Remark, Student


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def client():
    # No context manager: lifespan shutdown would dispose the in-memory database
    return TestClient(app)


class RecordFactory:
    """Creates and commits record store rows for tests."""

    def __init__(self, session):
        self.session = session
        self._counter = 0

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    def student(self, first_name="Ama", last_name="Mensah", class_name="BS 7", **kwargs):
        self._counter += 1
        kwargs.setdefault("id_number", f"STU{self._counter:04d}")
        return self._save(
            Student(first_name=first_name, last_name=last_name, class_name=class_name, **kwargs)
        )

    def mark(
        self,
        student_id,
        subject="Mathematics",
        term="First Term",
        academic_year="2024/2025",
        class_score=20,
        exams_score=50,
        grade="B",
        class_name="BS 7",
        **kwargs,
    ):
        return self._save(
            Mark(
                student_id=student_id,
                subject=subject,
                term=term,
                academic_year=academic_year,
                class_score=Decimal(str(class_score)) if class_score is not None else None,
                exams_score=Decimal(str(exams_score)) if exams_score is not None else None,
                grade=grade,
                class_name=class_name,
                **kwargs,
            )
        )

    def remark(
        self,
        student_id,
        term="First Term",
        academic_year="2024/2025",
        conduct="Good",
        attitude="Hardworking",
        interest="Reading",
        remarks="Keep it up",
        **kwargs,
    ):
        return self._save(
            Remark(
                student_id=student_id,
                term=term,
                academic_year=academic_year,
                conduct=conduct,
                attitude=attitude,
                interest=interest,
                remarks=remarks,
                **kwargs,
            )
        )

    def archive(self, term="First Term", academic_year="2024/2025", **kwargs):
        return self._save(Archive(term=term, academic_year=academic_year, **kwargs))


@pytest.fixture()
def factory():
    session = SessionLocal()
    try:
        yield RecordFactory(session)
    finally:
        session.close()
