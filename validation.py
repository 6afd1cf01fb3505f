# validation.py
import math
from datetime import date

from config import RATE_MIN


def _finite_errors(values):
    errors = []
    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            errors.append(f"{name} must be a finite number")
    return errors


def validate_amounts(annual_expense, bitcoin_growth_rate, annual_contribution):
    """Validate the money and growth inputs shared by both projection models"""
    errors = _finite_errors({
        "Annual expense": annual_expense,
        "Bitcoin growth rate": bitcoin_growth_rate,
        "Annual contribution": annual_contribution,
    })
    if errors:
        return errors

    if annual_expense <= 0:
        errors.append("Annual expense must be positive")

    if bitcoin_growth_rate <= -100:
        errors.append("Bitcoin growth rate must be greater than -100%")

    if annual_contribution < RATE_MIN:
        errors.append("Annual contribution cannot be negative")

    return errors


def validate_inputs(current_age, life_expectancy, annual_expense,
                    bitcoin_growth_rate, annual_contribution):
    """Validate all retirement calculator inputs and return any errors found"""
    errors = _finite_errors({
        "Current age": current_age,
        "Life expectancy": life_expectancy,
    })

    if not errors:
        if current_age < 0 or int(current_age) != current_age:
            errors.append("Current age must be a non-negative whole number")

        if int(life_expectancy) != life_expectancy:
            errors.append("Life expectancy must be a whole number")

        if life_expectancy <= current_age:
            errors.append("Life expectancy must be greater than current age")

    errors += validate_amounts(annual_expense, bitcoin_growth_rate, annual_contribution)
    return errors


def validate_withdrawal_rate(withdrawal_rate):
    errors = _finite_errors({"Withdrawal rate": withdrawal_rate})
    if not errors and withdrawal_rate <= RATE_MIN:
        errors.append("Withdrawal rate must be positive")
    return errors


def validate_date_range(start_date, end_date, today=None):
    """Validate a historical lookup range; the end date is inclusive."""
    if start_date is None or end_date is None:
        return ["Please select both a start and an end date"]

    errors = []
    if start_date > end_date:
        errors.append("Start date must be on or before end date")

    today = today or date.today()
    if end_date > today:
        errors.append("End date cannot be in the future")

    return errors
