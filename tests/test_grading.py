from decimal import Decimal

import pytest

from access.grading import resolve_letter, score_band, score_to_letter


@pytest.mark.parametrize(
    "score, letter",
    [
        (100, "A"),
        (90, "A"),
        (89.999, "B"),
        (80, "B"),
        (79.5, "C"),
        (70, "C"),
        (60, "D"),
        (59.99, "F"),
        (0, "F"),
    ],
)
def test_score_to_letter_boundaries(score, letter):
    assert score_to_letter(score) == letter


def test_score_to_letter_accepts_decimal():
    assert score_to_letter(Decimal("90.00")) == "A"
    assert score_to_letter(Decimal("89.99")) == "B"


def test_override_wins_over_derived_letter():
    assert resolve_letter(95, "C") == "C"
    assert resolve_letter(42, "A") == "A"


def test_empty_override_falls_back_to_derivation():
    assert resolve_letter(95, None) == "A"
    assert resolve_letter(95, "") == "A"


def test_score_band_matches_letter_thresholds():
    assert score_band(95) == "90+"
    assert score_band(85) == "80-89"
    assert score_band(70) == "70-79"
    assert score_band(61) == "60-69"
    assert score_band(12) == "<60"
