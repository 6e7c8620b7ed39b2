"""
Grading policy for term results.

Pure functions: subject scores in, derived totals/grades/remarks out. Callers never
supply ``total``, ``grade`` or ``remark``; whatever they send is recomputed.
"""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Tuple

from schools.exceptions import ValidationError

SCORE_LIMITS = {"ca1": 10, "ca2": 10, "exam": 80}

GRADE_BANDS = [(80, "A"), (70, "B"), (60, "C"), (50, "D"), (40, "E")]
REMARK_BANDS = [(70, "Excellent"), (60, "Very Good"), (50, "Good"), (40, "Fair")]

TWO_PLACES = Decimal("0.01")


def grade_for(total) -> str:
    for floor, grade in GRADE_BANDS:
        if total >= floor:
            return grade
    return "F"


def remark_for(total) -> str:
    for floor, remark in REMARK_BANDS:
        if total >= floor:
            return remark
    return "Poor"


def _score(entry: dict, field: str, position: int) -> Decimal:
    raw = entry.get(field)
    if raw is None or raw == "":
        return Decimal(0)
    if isinstance(raw, bool):
        raise ValidationError(f"subjects[{position}].{field} must be a number")
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"subjects[{position}].{field} must be a number")
    if not value.is_finite() or value < 0 or value > SCORE_LIMITS[field]:
        raise ValidationError(
            f"subjects[{position}].{field} must be between 0 and {SCORE_LIMITS[field]}",
            field=field,
            value=str(raw),
        )
    return value


def _number(value: Decimal):
    # JSON friendly: 87 stays an int, 87.5 a float
    return int(value) if value == value.to_integral_value() else float(value)


def compute(subjects: Iterable[dict]) -> List[dict]:
    """Return a new list of subject scores with ``total``, ``grade`` and ``remark`` filled in."""
    graded = []
    for position, entry in enumerate(subjects or []):
        if not isinstance(entry, dict):
            raise ValidationError(f"subjects[{position}] must be an object")
        name = str(entry.get("subject_name") or "").strip()
        if not name:
            raise ValidationError(f"subjects[{position}].subject_name is required")
        ca1 = _score(entry, "ca1", position)
        ca2 = _score(entry, "ca2", position)
        exam = _score(entry, "exam", position)
        total = ca1 + ca2 + exam
        graded.append(
            {
                "subject_name": name,
                "ca1": _number(ca1),
                "ca2": _number(ca2),
                "exam": _number(exam),
                "total": _number(total),
                "grade": grade_for(total),
                "remark": remark_for(total),
            }
        )
    return graded


def summarize(graded: List[dict]) -> Tuple[Decimal, Decimal]:
    """(total_score, average_score). An empty list averages to 0."""
    total = sum((Decimal(str(s["total"])) for s in graded), Decimal(0))
    if not graded:
        return Decimal(0).quantize(TWO_PLACES), Decimal(0).quantize(TWO_PLACES)
    average = (total / len(graded)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return total.quantize(TWO_PLACES), average


def apply_grading(result) -> None:
    graded = compute(result.subjects)
    result.subjects = graded
    result.total_score, result.average_score = summarize(graded)
