import importlib

import pytest

from config import MODEL_LIFE_EXPECTANCY, MODEL_SAFE_WITHDRAWAL
from pricing import PriceQuote, PriceSource

main = importlib.import_module("main")


class DummyCtx:
    def __enter__(self):
        return self
    def __exit__(self, exc_type, exc, tb):
        pass


class DummyStreamlit:
    def __init__(self):
        self.written = []
        self.infos = []
        self.metrics = {}

    def columns(self, n):
        return [DummyCtx() for _ in range(n)]
    def write(self, text, *args, **kwargs):
        self.written.append(text)
    def info(self, text, *args, **kwargs):
        self.infos.append(text)
    def metric(self, label, value, *args, **kwargs):
        self.metrics[label] = value
    def warning(self, *args, **kwargs):
        pass


def make_inputs(**overrides):
    inputs = {
        "current_age": 30,
        "life_expectancy": 90,
        "annual_expense": 40000.0,
        "bitcoin_growth_rate": 8.0,
        "annual_contribution": 0.5,
        "projection_model": MODEL_LIFE_EXPECTANCY,
        "withdrawal_rate": 4.0,
    }
    inputs.update(overrides)
    return inputs


@pytest.fixture
def dummy_st(monkeypatch):
    st_stub = DummyStreamlit()
    charts = []
    monkeypatch.setattr(main, "st", st_stub)
    monkeypatch.setattr(
        main, "show_balance_visualization", lambda holdings, **kwargs: charts.append((holdings, kwargs))
    )
    st_stub.charts = charts
    return st_stub


def test_render_results_returns_projection(dummy_st):
    quote = PriceQuote(value=50000.0, source=PriceSource.COINGECKO_SIMPLE, is_estimated=False)

    projection = main.render_results(make_inputs(), quote)

    assert projection.feasible
    assert projection.years_to_retirement == 10
    assert dummy_st.metrics["Years to Retirement"] == 10
    assert "retire at age 40" in dummy_st.written[0]
    holdings, kwargs = dummy_st.charts[0]
    assert len(holdings) == 61
    assert kwargs == {"current_age": 30, "retirement_age": 40}


def test_render_results_flags_estimated_price(dummy_st):
    quote = PriceQuote(value=100000.0, source=PriceSource.STATIC_ESTIMATE, is_estimated=True)

    main.render_results(make_inputs(), quote)

    assert "estimated price" in dummy_st.infos[0]


def test_render_results_safe_withdrawal(dummy_st):
    quote = PriceQuote(value=50000.0, source=PriceSource.BINANCE_TICKER, is_estimated=False)
    inputs = make_inputs(
        projection_model=MODEL_SAFE_WITHDRAWAL,
        bitcoin_growth_rate=0.0,
        annual_contribution=0.0,
    )

    projection = main.render_results(inputs, quote)

    assert not projection.feasible
    assert "more than 100 years" in dummy_st.written[0]
    assert dummy_st.charts == []


def test_validate_form_inputs_by_model():
    assert main.validate_form_inputs(make_inputs()) == []
    assert main.validate_form_inputs(make_inputs(life_expectancy=30)) == [
        "Life expectancy must be greater than current age"
    ]
    # Life expectancy is not part of the safe withdrawal model
    assert main.validate_form_inputs(
        make_inputs(life_expectancy=30, projection_model=MODEL_SAFE_WITHDRAWAL)
    ) == []
    assert main.validate_form_inputs(
        make_inputs(withdrawal_rate=0.0, projection_model=MODEL_SAFE_WITHDRAWAL)
    ) == ["Withdrawal rate must be positive"]


def test_collect_form_inputs_maps_growth_label():
    state = {
        "current_age": 30,
        "life_expectancy": 90,
        "annual_expense": 40000.0,
        "bitcoin_growth_rate_label": "Flat (0%)",
        "annual_contribution": 0.5,
        "projection_model": MODEL_LIFE_EXPECTANCY,
        "withdrawal_rate": 4.0,
    }

    inputs = main.collect_form_inputs(state)

    assert inputs["bitcoin_growth_rate"] == 0.0
    assert main.to_parameters(inputs).life_expectancy == 90


def test_latest_quote_refreshes_stale_cache(monkeypatch):
    class FakeOracle:
        def __init__(self):
            self.refreshes = 0

        def refresh_if_stale(self):
            self.refreshes += 1
            return PriceQuote(value=70000.0, source=PriceSource.COINGECKO_SIMPLE, is_estimated=False)

        def current(self):
            raise AssertionError("a visible plan must not read a possibly stale quote")

    oracle = FakeOracle()
    monkeypatch.setattr(main, "get_price_oracle", lambda: oracle)

    quote = main.latest_quote()

    assert quote.value == 70000.0
    assert oracle.refreshes == 1
