import math

import pytest

from services.exceptions import ValidationError
from services.marks_aggregator import (
    StudentMark,
    TestComponent as Component,
    aggregate,
    weighted_score,
)


def component(id, name, category, max_marks, weight=100.0):
    return Component(id=id, name=name, category=category, max_marks=max_marks, weight=weight)


def mark(component_id, obtained):
    return StudentMark(enrollment_id=1, test_component_id=component_id, marks_obtained=obtained)


MSE1 = component(1, "MSE1", "theory", 20)
MSE2 = component(2, "MSE2", "theory", 20)
TASK1 = component(3, "Task 1", "theory", 10, weight=50)
RECORD = component(4, "Lab Record", "lab", 30)
LAB_MSE = component(5, "Lab MSE", "lab", 20, weight=25)


# ─────────────────────────────────────────────────────────────────────
# Scenarios
# ─────────────────────────────────────────────────────────────────────

def test_one_theory_and_one_lab_component():
    result = aggregate([(MSE1, mark(1, 18)), (RECORD, mark(4, 21))])

    assert result.theory_total == 18
    assert result.theory_max == 20
    assert result.lab_total == 21
    assert result.lab_max == 30
    assert result.total_marks == 39
    assert result.max_total_marks == 50
    assert result.percentage == 78.00
    assert result.grade == "A"


def test_theory_only_course_has_no_lab_contribution():
    result = aggregate([(MSE1, mark(1, 15)), (MSE2, mark(2, 17))])

    assert result.lab_total == 0
    assert result.lab_max == 0
    assert result.lab_rows == ()
    assert result.lab_percentage == 0
    assert result.percentage == 80.0
    assert result.grade == "A+"


def test_no_components_at_all():
    result = aggregate([])

    assert result.max_total_marks == 0
    assert result.percentage == 0
    assert result.grade == "F"


def test_unknown_category_is_rejected_without_partial_result():
    practical = component(9, "Viva", "practical", 10)
    with pytest.raises(ValidationError, match="practical") as exc_info:
        aggregate([(MSE1, mark(1, 18)), (practical, mark(9, 5))])
    assert exc_info.value.details["category"] == "practical"


def test_category_match_is_exact():
    with pytest.raises(ValidationError):
        aggregate([(component(1, "MSE1", "Theory", 20), mark(1, 10))])


@pytest.mark.parametrize("obtained", [-1, 20.5, math.nan])
def test_out_of_range_marks_are_rejected(obtained):
    with pytest.raises(ValidationError, match="out of range"):
        aggregate([(MSE1, mark(1, obtained))])


def test_range_ends_are_accepted():
    result = aggregate([(MSE1, mark(1, 0)), (MSE2, mark(2, 20))])
    assert result.theory_total == 20


def test_non_positive_max_marks_is_rejected():
    with pytest.raises(ValidationError, match="Max marks"):
        aggregate([(component(1, "MSE1", "theory", 0), mark(1, None))])


@pytest.mark.parametrize("weight", [0, -10])
def test_non_positive_weight_is_rejected(weight):
    with pytest.raises(ValidationError, match="Weightage") as exc_info:
        aggregate([(component(1, "MSE1", "theory", 20, weight=weight), mark(1, 10))])
    assert exc_info.value.details["weightage"] == weight


def test_mark_paired_with_another_component_is_rejected():
    with pytest.raises(ValidationError):
        aggregate([(MSE1, mark(2, 10))])


# ─────────────────────────────────────────────────────────────────────
# Ungraded marks
# ─────────────────────────────────────────────────────────────────────

def test_all_ungraded_marks_sum_to_zero():
    result = aggregate([(MSE1, mark(1, None)), (RECORD, None), (LAB_MSE, mark(5, None))])

    assert result.total_marks == 0
    assert result.max_total_marks == 70
    assert result.percentage == 0
    assert result.grade == "F"


def test_ungraded_and_zero_stay_distinct_in_rows():
    result = aggregate([(MSE1, mark(1, None)), (MSE2, mark(2, 0))])

    mse1_row, mse2_row = result.theory_rows
    assert mse1_row.marks_obtained is None
    assert mse1_row.display_marks == "-"
    assert mse2_row.marks_obtained == 0
    assert mse2_row.display_marks == "0"
    assert result.theory_total == 0
    assert result.theory_max == 40


def test_rows_carry_weightage_for_display():
    result = aggregate([(TASK1, mark(3, 7.5))])
    row = result.theory_rows[0]
    assert row.test_name == "Task 1"
    assert row.weightage == 50
    assert row.display_marks == "7.5"


# ─────────────────────────────────────────────────────────────────────
# Properties
# ─────────────────────────────────────────────────────────────────────

MIXED_INPUTS = [
    [(MSE1, mark(1, 20)), (MSE2, mark(2, 20)), (RECORD, mark(4, 30))],
    [(TASK1, mark(3, 3.3)), (LAB_MSE, mark(5, 19.9)), (MSE2, None)],
    [(RECORD, mark(4, 0.1)), (MSE1, mark(1, 0.2)), (LAB_MSE, mark(5, 0.3))],
    [(LAB_MSE, mark(5, 11))],
]


@pytest.mark.parametrize("records", MIXED_INPUTS)
def test_category_totals_add_up(records):
    result = aggregate(records)
    assert result.theory_total + result.lab_total == result.total_marks
    assert result.theory_max + result.lab_max == result.max_total_marks


@pytest.mark.parametrize("records", MIXED_INPUTS)
def test_percentage_is_bounded(records):
    result = aggregate(records)
    assert 0 <= result.percentage <= 100


@pytest.mark.parametrize("records", MIXED_INPUTS)
def test_aggregate_is_idempotent(records):
    assert aggregate(records) == aggregate(records)


@pytest.mark.parametrize("records", MIXED_INPUTS)
def test_input_order_does_not_change_totals(records):
    forward = aggregate(records)
    backward = aggregate(list(reversed(records)))
    assert forward.percentage == backward.percentage
    assert forward.grade == backward.grade
    assert forward.total_marks == pytest.approx(backward.total_marks)


def test_generator_input_is_accepted():
    result = aggregate((r for r in [(MSE1, mark(1, 10))]))
    assert result.percentage == 50.0


# ─────────────────────────────────────────────────────────────────────
# Weighted blend
# ─────────────────────────────────────────────────────────────────────

def test_weighted_score_normalizes_to_scale():
    # (18/20)*100 + (21/30)*100 = 160 over weight 200 -> 0.8 * 50
    assert weighted_score([(MSE1, mark(1, 18)), (RECORD, mark(4, 21))]) == 40.0


def test_weighted_score_respects_weights():
    # (10/10)*50 + (0/20)*25 = 50 over weight 75 -> 0.6667 * 100
    records = [(TASK1, mark(3, 10)), (LAB_MSE, mark(5, 0))]
    assert weighted_score(records, scale=100) == 66.67


def test_weighted_score_does_not_change_the_grade():
    records = [(TASK1, mark(3, 10)), (LAB_MSE, mark(5, 0))]
    result = aggregate(records)
    assert result.percentage == 33.33
    assert result.grade == "F"


def test_weighted_score_of_nothing_is_zero():
    assert weighted_score([]) == 0.0


def test_weighted_score_validates_records():
    with pytest.raises(ValidationError):
        weighted_score([(MSE1, mark(1, 25))])
