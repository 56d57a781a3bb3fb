from typing import Dict, Iterable, List, Tuple

# (minimum percentage, letter), highest first
GRADE_BANDS: List[Tuple[float, str]] = [
    (90, "O"),
    (80, "A+"),
    (70, "A"),
    (60, "B+"),
    (50, "B"),
    (40, "C"),
]
FAIL_GRADE = "F"

GRADE_ORDER: List[str] = [letter for _, letter in GRADE_BANDS] + [FAIL_GRADE]


def calc_percentage(obtained: float, maximum: float, *, round_to: int = 2) -> float:
    """obtained / maximum * 100, or 0 when there is nothing to score against."""
    if maximum <= 0:
        return 0.0
    return round((obtained / maximum) * 100, round_to)


def grade_for_percentage(percentage: float) -> str:
    for minimum, letter in GRADE_BANDS:
        if percentage >= minimum:
            return letter
    return FAIL_GRADE


def grade_distribution(grades: Iterable[str]) -> Dict[str, int]:
    """Count grades per band, every band present (zero if unused), best band first."""
    distribution = {letter: 0 for letter in GRADE_ORDER}
    for grade in grades:
        if grade not in distribution:
            raise ValueError(f"Unsupported letter grade: {grade}")
        distribution[grade] += 1
    return distribution
