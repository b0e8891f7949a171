# Academia - derived grade fields
from decimal import Decimal
from numbers import Real

# (lower bound inclusive, letter, dashboard band), highest first
GRADE_THRESHOLDS: list[tuple[int, str, str]] = [
    (90, "A", "90+"),
    (80, "B", "80-89"),
    (70, "C", "70-79"),
    (60, "D", "60-69"),
]
FAILING_LETTER = "F"
FAILING_BAND = "<60"
LETTERS = ("A", "B", "C", "D", "F")


def score_to_letter(score: Decimal | Real) -> str:
    """Map a numeric score to A-F; boundaries are inclusive, so 90 is A and 89.999 is B."""
    for bound, letter, _ in GRADE_THRESHOLDS:
        if score >= bound:
            return letter
    return FAILING_LETTER


def resolve_letter(score: Decimal | Real, override: str | None = None) -> str:
    """An explicit letter from the caller always wins over the derived one."""
    if override:
        return override
    return score_to_letter(score)


def score_band(score: Decimal | Real) -> str:
    for bound, _, band in GRADE_THRESHOLDS:
        if score >= bound:
            return band
    return FAILING_BAND
