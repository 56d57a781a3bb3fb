"""
services/marks_aggregator.py

Turns one enrollment's (TestComponent, StudentMark) pairs into category
subtotals, an overall percentage and a letter grade.

- Totals are a raw sum of obtained marks. Weightage is carried to the
  display rows and only used by `weighted_score`, which never feeds the grade.
- A missing mark (None) sums as 0 but stays None in the rows, so the UI can
  show "-" for "not graded yet".
- Nothing here touches the database; the caller loads the records.
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from services.exceptions import ValidationError
from services.grading import calc_percentage, grade_for_percentage

THEORY = "theory"
LAB = "lab"
CATEGORIES = (THEORY, LAB)


@dataclass(frozen=True)
class TestComponent:
    id: Optional[int]
    name: str
    category: str
    max_marks: float
    weight: float = 100.0


@dataclass(frozen=True)
class StudentMark:
    enrollment_id: Optional[int]
    test_component_id: Optional[int]
    marks_obtained: Optional[float] = None


@dataclass(frozen=True)
class ComponentRow:
    test_component_id: Optional[int]
    test_name: str
    marks_obtained: Optional[float]
    max_marks: float
    weightage: float

    @property
    def display_marks(self) -> str:
        if self.marks_obtained is None:
            return "-"
        return f"{self.marks_obtained:g}"


@dataclass(frozen=True)
class AggregatedResult:
    theory_total: float
    theory_max: float
    lab_total: float
    lab_max: float
    total_marks: float
    max_total_marks: float
    percentage: float
    grade: str
    theory_rows: Tuple[ComponentRow, ...] = field(default_factory=tuple)
    lab_rows: Tuple[ComponentRow, ...] = field(default_factory=tuple)

    @property
    def theory_percentage(self) -> float:
        return calc_percentage(self.theory_total, self.theory_max)

    @property
    def lab_percentage(self) -> float:
        return calc_percentage(self.lab_total, self.lab_max)


Record = Tuple[TestComponent, Optional[StudentMark]]


def _validate_component(component: TestComponent) -> None:
    if component.category not in CATEGORIES:
        raise ValidationError(
            f"Unknown test component category '{component.category}' for {component.name}",
            details={"test_component_id": component.id, "category": component.category},
        )
    if not component.max_marks > 0:
        raise ValidationError(
            f"Max marks must be positive for {component.name}",
            details={"test_component_id": component.id, "max_marks": component.max_marks},
        )
    if not component.weight > 0:
        raise ValidationError(
            f"Weightage must be positive for {component.name}",
            details={"test_component_id": component.id, "weightage": component.weight},
        )


def _validated_score(component: TestComponent, mark: Optional[StudentMark]) -> Optional[float]:
    if mark is None:
        return None
    if (
        mark.test_component_id is not None
        and component.id is not None
        and mark.test_component_id != component.id
    ):
        raise ValidationError(
            f"Mark for component {mark.test_component_id} paired with component {component.id}",
            details={"test_component_id": component.id, "mark_component_id": mark.test_component_id},
        )
    score = mark.marks_obtained
    if score is None:
        return None
    # NaN fails the range check as well
    if not 0 <= score <= component.max_marks:
        raise ValidationError(
            f"Marks obtained ({score}) out of range [0, {component.max_marks}] for {component.name}",
            details={
                "test_component_id": component.id,
                "marks_obtained": score,
                "max_marks": component.max_marks,
            },
        )
    return score


def _validated_rows(records: Iterable[Record]) -> List[Tuple[str, ComponentRow]]:
    rows = []
    for component, mark in records:
        _validate_component(component)
        score = _validated_score(component, mark)
        rows.append((
            component.category,
            ComponentRow(
                test_component_id=component.id,
                test_name=component.name,
                marks_obtained=score,
                max_marks=component.max_marks,
                weightage=component.weight,
            ),
        ))
    return rows


def _sum_obtained(rows: Sequence[ComponentRow]) -> float:
    return math.fsum(r.marks_obtained or 0 for r in rows)


def _sum_max(rows: Sequence[ComponentRow]) -> float:
    return math.fsum(r.max_marks for r in rows)


def aggregate(records: Iterable[Record]) -> AggregatedResult:
    """
    Aggregate one enrollment's component marks.

    Every record is validated before anything is summed, so a bad category
    or an out-of-range mark raises ValidationError without a partial result.
    Input order does not matter; rows keep the order they were given in.
    """
    rows = _validated_rows(records)
    theory_rows = tuple(row for category, row in rows if category == THEORY)
    lab_rows = tuple(row for category, row in rows if category == LAB)

    theory_total = _sum_obtained(theory_rows)
    theory_max = _sum_max(theory_rows)
    lab_total = _sum_obtained(lab_rows)
    lab_max = _sum_max(lab_rows)

    total_marks = theory_total + lab_total
    max_total_marks = theory_max + lab_max
    percentage = calc_percentage(total_marks, max_total_marks)

    return AggregatedResult(
        theory_total=theory_total,
        theory_max=theory_max,
        lab_total=lab_total,
        lab_max=lab_max,
        total_marks=total_marks,
        max_total_marks=max_total_marks,
        percentage=percentage,
        grade=grade_for_percentage(percentage),
        theory_rows=theory_rows,
        lab_rows=lab_rows,
    )


def weighted_score(records: Iterable[Record], scale: float = 50.0, *, round_to: int = 2) -> float:
    """
    Weight-normalized blend: sum((obtained / max) * weight) / sum(weight) * scale.

    Alternative scoring for the marks table; `aggregate` does not use it.
    """
    weighted_sum = 0.0
    total_weight = 0.0
    for _, row in _validated_rows(records):
        weighted_sum += ((row.marks_obtained or 0) / row.max_marks) * row.weightage
        total_weight += row.weightage
    if total_weight == 0:
        return 0.0
    return round((weighted_sum / total_weight) * scale, round_to)
