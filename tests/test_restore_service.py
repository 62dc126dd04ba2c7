from decimal import Decimal

import pytest
from sqlalchemy import select

from school_archive.core.exceptions import NotFoundError, ValidationError
from school_archive.models import Mark, Remark
from school_archive.schemas.restore import OverwriteMode, RestoreRequest
from school_archive.services.restore import STRATEGIES, ReplaceStrategy, RestoreService

SOURCE = ("First Term", "2023/2024")
TARGET = ("First Term", "2024/2025")


def request(archive_id, mode, target=TARGET):
    return RestoreRequest(
        archive_id=archive_id,
        target_term=target[0],
        target_year=target[1],
        overwrite_mode=mode,
    )


def target_marks(db):
    rows = db.execute(
        select(Mark)
        .where(Mark.term == TARGET[0], Mark.academic_year == TARGET[1])
        .order_by(Mark.student_id, Mark.subject)
    ).scalars().all()
    return {(m.student_id, m.subject): (m.class_score, m.exams_score, m.grade) for m in rows}


def target_remarks(db):
    rows = db.execute(
        select(Remark).where(Remark.term == TARGET[0], Remark.academic_year == TARGET[1])
    ).scalars().all()
    return {r.student_id: r.conduct for r in rows}


@pytest.fixture()
def scenario(factory):
    """
    Source term: student A has Maths 30/60 and English; student B has Maths.
    Target term: student A Maths 10/20 (conflicts), student C Science (does not).
    """
    a = factory.student(first_name="A")
    b = factory.student(first_name="B")
    c = factory.student(first_name="C")

    factory.mark(a.id, "Mathematics", *SOURCE, class_score=30, exams_score=60, grade="A")
    factory.mark(a.id, "English", *SOURCE, class_score=25, exams_score=50, grade="B")
    factory.mark(b.id, "Mathematics", *SOURCE, class_score=15, exams_score=35, grade="D")
    factory.remark(a.id, *SOURCE, conduct="Excellent")
    factory.remark(b.id, *SOURCE, conduct="Good")

    factory.mark(a.id, "Mathematics", *TARGET, class_score=10, exams_score=20, grade="F")
    factory.mark(c.id, "Science", *TARGET, class_score=28, exams_score=62, grade="A")
    factory.remark(a.id, *TARGET, conduct="Poor")
    factory.remark(c.id, *TARGET, conduct="Fair")

    archive = factory.archive(term=SOURCE[0], academic_year=SOURCE[1])
    return {"archive": archive, "a": a, "b": b, "c": c}


def test_strategy_for_every_mode():
    assert set(STRATEGIES) == set(OverwriteMode)


def test_replace_leaves_only_source_rows(db, scenario):
    a, b = scenario["a"], scenario["b"]

    result = RestoreService(db).restore(request(scenario["archive"].id, OverwriteMode.REPLACE))

    assert result.restored_marks == 3
    assert result.restored_remarks == 2
    assert result.skipped_marks == 0
    assert target_marks(db) == {
        (a.id, "English"): (Decimal("25"), Decimal("50"), "B"),
        (a.id, "Mathematics"): (Decimal("30"), Decimal("60"), "A"),
        (b.id, "Mathematics"): (Decimal("15"), Decimal("35"), "D"),
    }
    assert target_remarks(db) == {a.id: "Excellent", b.id: "Good"}


def test_merge_overwrites_conflicts_and_keeps_others(db, scenario):
    a, b, c = scenario["a"], scenario["b"], scenario["c"]

    result = RestoreService(db).restore(request(scenario["archive"].id, OverwriteMode.MERGE))

    assert result.restored_marks == 3
    assert result.restored_remarks == 2
    marks = target_marks(db)
    assert marks[(a.id, "Mathematics")] == (Decimal("30"), Decimal("60"), "A")
    assert marks[(b.id, "Mathematics")] == (Decimal("15"), Decimal("35"), "D")
    assert marks[(c.id, "Science")] == (Decimal("28"), Decimal("62"), "A")
    assert len(marks) == 4
    assert target_remarks(db) == {a.id: "Excellent", b.id: "Good", c.id: "Fair"}


def test_skip_keeps_existing_rows_and_counts_skips(db, scenario):
    a, b, c = scenario["a"], scenario["b"], scenario["c"]

    result = RestoreService(db).restore(request(scenario["archive"].id, OverwriteMode.SKIP))

    assert result.restored_marks == 2
    assert result.skipped_marks == 1
    assert result.restored_remarks == 1
    assert result.skipped_remarks == 1
    marks = target_marks(db)
    assert marks[(a.id, "Mathematics")] == (Decimal("10"), Decimal("20"), "F")
    assert marks[(a.id, "English")] == (Decimal("25"), Decimal("50"), "B")
    assert marks[(c.id, "Science")] == (Decimal("28"), Decimal("62"), "A")
    assert target_remarks(db) == {a.id: "Poor", b.id: "Good", c.id: "Fair"}


def test_source_rows_are_untouched(db, scenario):
    service = RestoreService(db)
    before = db.execute(
        select(Mark.id).where(Mark.term == SOURCE[0], Mark.academic_year == SOURCE[1])
    ).scalars().all()

    service.restore(request(scenario["archive"].id, OverwriteMode.REPLACE))

    after = db.execute(
        select(Mark.id).where(Mark.term == SOURCE[0], Mark.academic_year == SOURCE[1])
    ).scalars().all()
    assert sorted(after) == sorted(before)


def test_replace_twice_reaches_same_state(db, scenario):
    service = RestoreService(db)

    service.restore(request(scenario["archive"].id, OverwriteMode.REPLACE))
    first = target_marks(db)
    service.restore(request(scenario["archive"].id, OverwriteMode.REPLACE))

    assert target_marks(db) == first


def test_restore_onto_source_term(db, scenario):
    result = RestoreService(db).restore(request(scenario["archive"].id, OverwriteMode.MERGE, target=SOURCE))

    assert result.restored_marks == 3
    count = db.execute(
        select(Mark.id).where(Mark.term == SOURCE[0], Mark.academic_year == SOURCE[1])
    ).scalars().all()
    assert len(count) == 3


def test_restore_validates_target_before_lookup(db):
    with pytest.raises(ValidationError):
        RestoreService(db).restore(request(999, OverwriteMode.MERGE, target=("", "2024/2025")))
    with pytest.raises(ValidationError):
        RestoreService(db).restore(RestoreRequest(target_term="First Term", target_year="2024/2025"))


def test_restore_missing_archive(db):
    with pytest.raises(NotFoundError):
        RestoreService(db).restore(request(999, OverwriteMode.MERGE))


def test_preview_flags_destructive_modes(db, scenario):
    service = RestoreService(db)
    archive_id = scenario["archive"].id

    replace = service.preview(request(archive_id, OverwriteMode.REPLACE))
    skip = service.preview(request(archive_id, OverwriteMode.SKIP))

    assert replace.destructive is True
    assert "DELETE all existing marks and remarks for First Term 2024/2025" in replace.warning
    assert replace.source.marks == 3
    assert replace.target.marks == 2
    assert replace.target.remarks == 2
    assert skip.destructive is False
    assert "skipping any conflicts" in skip.warning
    # Preview writes nothing
    assert len(target_marks(db)) == 2


def test_preview_into_empty_term_is_not_destructive(db, scenario):
    preview = RestoreService(db).preview(
        request(scenario["archive"].id, OverwriteMode.REPLACE, target=("Third Term", "2024/2025"))
    )

    assert preview.destructive is False
    assert preview.target.marks == 0


def test_replace_strategy_is_the_destructive_one():
    assert STRATEGIES[OverwriteMode.REPLACE] is ReplaceStrategy
