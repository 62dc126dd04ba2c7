"""Performance analytics over archived mark records.

All functions are pure and total: they accept ORM rows, response schemas or
plain mappings (snake_case or camelCase keys), treat missing or non-numeric
scores as 0, and return zeroed results for an empty input.
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

GRADES = ["A", "B", "C", "D", "E", "F"]

# (label, inclusive upper bound); anything above the last bound lands in it
SCORE_RANGES = [
    ("0-40", 40),
    ("41-50", 50),
    ("51-60", 60),
    ("61-70", 70),
    ("71-80", 80),
    ("81-90", 90),
    ("91-100", 100),
]


def _field(mark: Any, snake: str, camel: str) -> Any:
    if isinstance(mark, Mapping):
        if snake in mark:
            return mark[snake]
        return mark.get(camel)
    return getattr(mark, snake, None)


def _number(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not number.is_finite():
        return Decimal("0")
    return number


def total_score(mark: Any) -> Decimal:
    """classScore + examsScore, with missing parts counted as 0."""
    return _number(_field(mark, "class_score", "classScore")) + _number(
        _field(mark, "exams_score", "examsScore")
    )


def _round(value: Decimal) -> float:
    return float(value.quantize(Decimal("0.1")))


def filter_marks(
    marks: Iterable[Any],
    class_name: str | None = None,
    subject: str | None = None,
) -> list[Any]:
    """Narrow marks to one class and/or subject; None or "all" means no filter."""
    filtered = list(marks)
    if class_name and class_name != "all":
        filtered = [m for m in filtered if _field(m, "class_name", "className") == class_name]
    if subject and subject != "all":
        filtered = [m for m in filtered if _field(m, "subject", "subject") == subject]
    return filtered


def unique_classes(marks: Iterable[Any]) -> list[str]:
    return sorted({c for c in (_field(m, "class_name", "className") for m in marks) if c})


def unique_subjects(marks: Iterable[Any]) -> list[str]:
    return sorted({s for s in (_field(m, "subject", "subject") for m in marks) if s})


def grade_distribution(marks: Iterable[Any]) -> dict[str, int]:
    """Count marks per grade. The stored grade is used as-is; anything
    outside A-F (including a missing grade) counts as F."""
    distribution = {grade: 0 for grade in GRADES}
    for mark in marks:
        grade = _field(mark, "grade", "grade")
        grade = grade.strip().upper() if isinstance(grade, str) else None
        distribution[grade if grade in distribution else "F"] += 1
    return distribution


def calculate_stats(marks: Iterable[Any]) -> dict[str, float | int]:
    """Average, highest and lowest total score, rounded to one decimal."""
    totals = [total_score(m) for m in marks]
    if not totals:
        return {"average": 0.0, "highest": 0.0, "lowest": 0.0, "count": 0}
    return {
        "average": _round(sum(totals) / len(totals)),
        "highest": _round(max(totals)),
        "lowest": _round(min(totals)),
        "count": len(totals),
    }


def _grouped_performance(marks: Iterable[Any], snake: str, camel: str) -> list[dict[str, Any]]:
    groups: dict[Any, list[Any]] = {}
    for mark in marks:
        groups.setdefault(_field(mark, snake, camel), []).append(mark)

    performance = []
    for key, group in groups.items():
        stats = calculate_stats(group)
        stats[snake] = key if key is not None else ""
        performance.append(stats)
    # Stable sort keeps first-seen order among equal averages
    performance.sort(key=lambda row: row["average"], reverse=True)
    return performance


def subject_performance(marks: Iterable[Any]) -> list[dict[str, Any]]:
    """Per-subject {subject, average, highest, lowest, count}, best first."""
    return _grouped_performance(marks, "subject", "subject")


def class_performance(marks: Iterable[Any]) -> list[dict[str, Any]]:
    """Per-class {class_name, average, highest, lowest, count}, best first."""
    return _grouped_performance(marks, "class_name", "className")


def score_distribution(marks: Iterable[Any]) -> dict[str, int]:
    """Histogram of total scores over the fixed ranges, upper bounds inclusive."""
    distribution = {label: 0 for label, _ in SCORE_RANGES}
    for mark in marks:
        score = total_score(mark)
        for label, upper in SCORE_RANGES:
            if score <= upper:
                distribution[label] += 1
                break
        else:
            distribution[SCORE_RANGES[-1][0]] += 1
    return distribution
