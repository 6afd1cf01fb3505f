"""Financial calculations for the Bitcoin retirement planner."""

import math
from dataclasses import dataclass
from typing import Optional

from config import SAFE_WITHDRAWAL_HORIZON_YEARS
from exceptions import ValidationError
from pricing import PriceQuote
from validation import validate_amounts, validate_inputs, validate_withdrawal_rate


@dataclass(frozen=True)
class RetirementParameters:
    """Inputs for one projection run. Amounts are in the quote currency, contributions in BTC."""

    annual_expense: float
    current_age: int
    life_expectancy: int
    growth_rate_percent: float
    annual_contribution_units: float


@dataclass(frozen=True)
class RetirementProjection:
    """Results returned from :func:`project_retirement`.

    ``required_units_now`` is ``None`` when the quote carries no usable price.
    ``retirement_age`` is ``None`` when no accumulation length works.
    """

    feasible: bool
    years_to_retirement: int
    required_capital: float
    required_units_now: Optional[float]
    retirement_age: Optional[int]


@dataclass(frozen=True)
class SafeWithdrawalProjection:
    """Results returned from :func:`project_safe_withdrawal`."""

    feasible: bool
    years_to_retirement: Optional[int]
    required_capital: float
    required_units_now: Optional[float]
    horizon_years: int


def growth_multiplier(growth_rate_percent: float) -> float:
    return 1 + growth_rate_percent / 100


def simulate_accumulation(
    years: int,
    annual_contribution_units: float,
    start_price: float,
    growth_rate_percent: float,
) -> tuple[float, float]:
    """Buy ``annual_contribution_units`` each year, then grow the price.

    Returns ``(units, price)`` after ``years`` steps.
    """
    multiplier = growth_multiplier(growth_rate_percent)
    units = 0.0
    price = start_price
    for _ in range(years):
        units += annual_contribution_units
        price *= multiplier
    return units, price


def simulate_drawdown(
    units: float,
    price: float,
    years: int,
    annual_expense: float,
    growth_rate_percent: float,
) -> bool:
    """Sell enough BTC to cover ``annual_expense`` each year, then grow the price.

    Returns ``True`` if the balance never drops below zero.
    """
    multiplier = growth_multiplier(growth_rate_percent)
    balance = units
    for _ in range(years):
        if price <= 0:
            return False
        balance -= annual_expense / price
        if balance < 0:
            return False
        price *= multiplier
    return True


def _required_units_now(required_capital: float, quote: PriceQuote) -> Optional[float]:
    if quote.value <= 0:
        return None
    return required_capital / quote.value


def _check_parameters(params: RetirementParameters, quote: PriceQuote) -> None:
    errors = validate_inputs(
        params.current_age,
        params.life_expectancy,
        params.annual_expense,
        params.growth_rate_percent,
        params.annual_contribution_units,
    )
    if not math.isfinite(quote.value):
        errors.append("Bitcoin price must be a finite number")
    if errors:
        raise ValidationError(errors)


def project_retirement(params: RetirementParameters, quote: PriceQuote) -> RetirementProjection:
    """Find the fewest accumulation years after which drawdown lasts until life expectancy.

    Every candidate length from zero up to ``life_expectancy - current_age``
    is simulated from scratch, year by year, and the first one whose drawdown
    never goes negative is returned.

    Raises:
        ValidationError: If ``life_expectancy <= current_age`` or any input is
            non-finite or out of range.
    """
    _check_parameters(params, quote)

    max_years = int(params.life_expectancy - params.current_age)
    for years_to_work in range(max_years + 1):
        units, price = simulate_accumulation(
            years_to_work,
            params.annual_contribution_units,
            quote.value,
            params.growth_rate_percent,
        )
        survived = simulate_drawdown(
            units,
            price,
            max_years - years_to_work,
            params.annual_expense,
            params.growth_rate_percent,
        )
        if survived:
            required_capital = units * price
            return RetirementProjection(
                feasible=True,
                years_to_retirement=years_to_work,
                required_capital=required_capital,
                required_units_now=_required_units_now(required_capital, quote),
                retirement_age=int(params.current_age) + years_to_work,
            )

    return RetirementProjection(
        feasible=False,
        years_to_retirement=max_years,
        required_capital=0.0,
        required_units_now=None,
        retirement_age=None,
    )


def project_balance_path(
    params: RetirementParameters, quote: PriceQuote, years_to_work: int
) -> list[float]:
    """Project BTC holdings for each age from ``current_age`` to ``life_expectancy``.

    Mirrors the accumulation and drawdown steps of :func:`project_retirement`
    for a fixed retirement year. Holdings are floored at zero for charting.
    """
    _check_parameters(params, quote)
    max_years = int(params.life_expectancy - params.current_age)
    if not 0 <= years_to_work <= max_years:
        raise ValueError("years_to_work must be between 0 and life_expectancy - current_age")

    multiplier = growth_multiplier(params.growth_rate_percent)
    balance = 0.0
    price = quote.value
    holdings = [balance]
    for year in range(max_years):
        if year < years_to_work:
            balance += params.annual_contribution_units
        elif price > 0:
            balance = max(balance - params.annual_expense / price, 0.0)
        else:
            balance = 0.0
        price *= multiplier
        holdings.append(balance)
    return holdings


def project_safe_withdrawal(
    annual_expense: float,
    withdrawal_rate_percent: float,
    growth_rate_percent: float,
    annual_contribution_units: float,
    quote: PriceQuote,
    max_years: int = SAFE_WITHDRAWAL_HORIZON_YEARS,
) -> SafeWithdrawalProjection:
    """Years of accumulation until holdings reach ``expense / withdrawal rate``.

    Simpler model without a life expectancy. Gives up after ``max_years``.
    """
    errors = validate_withdrawal_rate(withdrawal_rate_percent)
    errors += validate_amounts(annual_expense, growth_rate_percent, annual_contribution_units)
    if not math.isfinite(quote.value):
        errors.append("Bitcoin price must be a finite number")
    if errors:
        raise ValidationError(errors)

    required_capital = annual_expense / (withdrawal_rate_percent / 100)
    required_units_now = _required_units_now(required_capital, quote)

    for years in range(max_years + 1):
        units, price = simulate_accumulation(
            years, annual_contribution_units, quote.value, growth_rate_percent
        )
        if units * price >= required_capital:
            return SafeWithdrawalProjection(
                feasible=True,
                years_to_retirement=years,
                required_capital=required_capital,
                required_units_now=required_units_now,
                horizon_years=max_years,
            )

    return SafeWithdrawalProjection(
        feasible=False,
        years_to_retirement=None,
        required_capital=required_capital,
        required_units_now=required_units_now,
        horizon_years=max_years,
    )


def units_to_currency(units: float, price: float) -> Optional[float]:
    """Convert a BTC amount to the quote currency at ``price``."""
    if price <= 0:
        return None
    return units * price


def currency_to_units(amount: float, price: float) -> Optional[float]:
    """Convert a quote-currency amount to BTC at ``price``."""
    if price <= 0:
        return None
    return amount / price


def project_holdings_value(units: float, future_price: float) -> float:
    return units * future_price
