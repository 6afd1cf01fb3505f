import math
import os
import sys
from datetime import date

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from validation import (
    validate_amounts,
    validate_date_range,
    validate_inputs,
    validate_withdrawal_rate,
)
from config import (
    DEFAULT_CURRENT_AGE,
    DEFAULT_LIFE_EXPECTANCY,
    DEFAULT_ANNUAL_EXPENSE,
    DEFAULT_BITCOIN_GROWTH_RATE,
    DEFAULT_ANNUAL_CONTRIBUTION,
    DEFAULT_WITHDRAWAL_RATE,
)


def test_defaults_pass() -> None:
    errors = validate_inputs(
        DEFAULT_CURRENT_AGE,
        DEFAULT_LIFE_EXPECTANCY,
        DEFAULT_ANNUAL_EXPENSE,
        DEFAULT_BITCOIN_GROWTH_RATE,
        DEFAULT_ANNUAL_CONTRIBUTION,
    )

    assert errors == []


def test_zero_contribution_allowed_with_positive_growth() -> None:
    errors = validate_inputs(
        DEFAULT_CURRENT_AGE,
        DEFAULT_LIFE_EXPECTANCY,
        DEFAULT_ANNUAL_EXPENSE,
        DEFAULT_BITCOIN_GROWTH_RATE,
        0.0,
    )

    assert not errors, "Zero contribution should pass validation even when growth rate is positive"


def test_negative_and_zero_growth_allowed() -> None:
    for rate in (0.0, -10.0, -99.9):
        assert validate_amounts(DEFAULT_ANNUAL_EXPENSE, rate, DEFAULT_ANNUAL_CONTRIBUTION) == []


def test_growth_of_minus_hundred_fails() -> None:
    errors = validate_amounts(DEFAULT_ANNUAL_EXPENSE, -100.0, DEFAULT_ANNUAL_CONTRIBUTION)

    assert any("growth rate" in error for error in errors)


def test_negative_contribution_fails() -> None:
    errors = validate_inputs(
        DEFAULT_CURRENT_AGE,
        DEFAULT_LIFE_EXPECTANCY,
        DEFAULT_ANNUAL_EXPENSE,
        DEFAULT_BITCOIN_GROWTH_RATE,
        -1.0,
    )

    assert any(
        "Annual contribution" in error for error in errors
    ), "Negative contribution should fail validation"


def test_life_expectancy_must_exceed_current_age() -> None:
    for life in (DEFAULT_CURRENT_AGE, DEFAULT_CURRENT_AGE - 1):
        errors = validate_inputs(
            DEFAULT_CURRENT_AGE,
            life,
            DEFAULT_ANNUAL_EXPENSE,
            DEFAULT_BITCOIN_GROWTH_RATE,
            DEFAULT_ANNUAL_CONTRIBUTION,
        )
        assert errors == ["Life expectancy must be greater than current age"]


def test_non_finite_and_non_numeric_values_fail() -> None:
    errors = validate_inputs(math.nan, "90", math.inf, None, True)

    assert len(errors) == 5
    assert all("finite number" in error for error in errors)


def test_fractional_age_fails() -> None:
    errors = validate_inputs(30.5, 90, 1.0, 0.0, 0.0)

    assert errors == ["Current age must be a non-negative whole number"]


def test_withdrawal_rate() -> None:
    assert validate_withdrawal_rate(DEFAULT_WITHDRAWAL_RATE) == []
    assert validate_withdrawal_rate(0.0) == ["Withdrawal rate must be positive"]
    assert validate_withdrawal_rate(-1.0) == ["Withdrawal rate must be positive"]
    assert validate_withdrawal_rate(math.nan) == ["Withdrawal rate must be a finite number"]


def test_date_range() -> None:
    today = date(2024, 6, 1)

    assert validate_date_range(date(2024, 5, 1), date(2024, 5, 31), today=today) == []
    assert validate_date_range(date(2024, 5, 1), date(2024, 5, 1), today=today) == []
    assert validate_date_range(None, date(2024, 5, 1), today=today) == [
        "Please select both a start and an end date"
    ]
    assert validate_date_range(date(2024, 5, 2), date(2024, 5, 1), today=today) == [
        "Start date must be on or before end date"
    ]
    assert validate_date_range(date(2024, 5, 2), date(2024, 6, 2), today=today) == [
        "End date cannot be in the future"
    ]
