from decimal import Decimal

import pytest

from school_archive.services import analytics


def mark(subject="Mathematics", class_name="BS 7", class_score=20, exams_score=50, grade="B"):
    return {
        "subject": subject,
        "className": class_name,
        "classScore": class_score,
        "examsScore": exams_score,
        "grade": grade,
    }


def test_empty_input_returns_zeroed_results():
    assert analytics.grade_distribution([]) == {"A": 0, "B": 0, "C": 0, "D": 0, "E": 0, "F": 0}
    assert analytics.subject_performance([]) == []
    assert analytics.class_performance([]) == []
    assert analytics.score_distribution([]) == {
        "0-40": 0,
        "41-50": 0,
        "51-60": 0,
        "61-70": 0,
        "71-80": 0,
        "81-90": 0,
        "91-100": 0,
    }
    assert analytics.calculate_stats([]) == {"average": 0.0, "highest": 0.0, "lowest": 0.0, "count": 0}


def test_grade_distribution_counts_missing_and_unknown_grades_as_f():
    marks = [mark(grade="A"), mark(grade="A"), mark(grade="c"), mark(grade=None), mark(grade="X")]

    distribution = analytics.grade_distribution(marks)

    assert distribution == {"A": 2, "B": 0, "C": 1, "D": 0, "E": 0, "F": 2}


def test_grade_distribution_uses_stored_grade_not_scores():
    # 95 total would be an A, but the stored grade wins
    assert analytics.grade_distribution([mark(class_score=30, exams_score=65, grade="D")])["D"] == 1


@pytest.mark.parametrize(
    "class_score,exams_score,expected",
    [
        (0, 40, "0-40"),
        (10, 31, "41-50"),
        (20, 30, "41-50"),
        (20, 31, "51-60"),
        (30, 70, "91-100"),
        (30, 75, "91-100"),
        (None, None, "0-40"),
    ],
)
def test_score_distribution_boundaries(class_score, exams_score, expected):
    distribution = analytics.score_distribution([mark(class_score=class_score, exams_score=exams_score)])

    assert distribution[expected] == 1
    assert sum(distribution.values()) == 1


def test_subject_performance_sorted_by_average():
    marks = [
        mark(subject="English", class_score=10, exams_score=30),
        mark(subject="English", class_score=20, exams_score=40),
        mark(subject="Science", class_score=30, exams_score=60),
    ]

    performance = analytics.subject_performance(marks)

    assert [row["subject"] for row in performance] == ["Science", "English"]
    assert performance[1] == {
        "subject": "English",
        "average": 50.0,
        "highest": 60.0,
        "lowest": 40.0,
        "count": 2,
    }


def test_class_performance_treats_missing_scores_as_zero():
    marks = [
        mark(class_name="BS 8", class_score=None, exams_score=45),
        mark(class_name="BS 7", class_score=25, exams_score=60),
    ]

    performance = analytics.class_performance(marks)

    assert performance[0]["class_name"] == "BS 7"
    assert performance[1]["average"] == 45.0


def test_accepts_orm_style_objects_and_decimal_scores():
    class Row:
        subject = "Mathematics"
        class_name = "BS 9"
        class_score = Decimal("12.5")
        exams_score = Decimal("40.25")
        grade = "C"

    assert analytics.calculate_stats([Row()]) == {
        "average": 52.8,
        "highest": 52.8,
        "lowest": 52.8,
        "count": 1,
    }
    assert analytics.score_distribution([Row()])["51-60"] == 1


def test_non_numeric_scores_do_not_raise():
    marks = [mark(class_score="abc", exams_score="55"), mark(class_score=float("nan"), exams_score=10)]

    assert analytics.calculate_stats(marks)["highest"] == 55.0
    assert analytics.score_distribution(marks)["0-40"] == 1


def test_filter_and_unique_helpers():
    marks = [
        mark(subject="English", class_name="BS 7"),
        mark(subject="Science", class_name="BS 8"),
        mark(subject="English", class_name="BS 8"),
    ]

    assert analytics.unique_classes(marks) == ["BS 7", "BS 8"]
    assert analytics.unique_subjects(marks) == ["English", "Science"]
    assert len(analytics.filter_marks(marks, class_name="BS 8")) == 2
    assert len(analytics.filter_marks(marks, class_name="BS 8", subject="English")) == 1
    assert len(analytics.filter_marks(marks, class_name="all", subject="all")) == 3
