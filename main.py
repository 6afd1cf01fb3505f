# main.py
from datetime import date, timedelta

import streamlit as st

from utils import (
    fmt_btc,
    fmt_money,
    initialize_session_state,
    load_from_query_params,
    update_query_params,
)
from calculations import (
    RetirementParameters,
    currency_to_units,
    project_balance_path,
    project_holdings_value,
    project_retirement,
    project_safe_withdrawal,
    units_to_currency,
)
from exceptions import HistoryFetchError, RateLimitedError, ValidationError
from history import fetch_price_range, summarize_prices
from pricing import PriceOracle
from validation import (
    validate_amounts,
    validate_date_range,
    validate_inputs,
    validate_withdrawal_rate,
)
from visualization import show_balance_visualization, show_history_chart
from config import (
    AGE_RANGE,
    BITCOIN_GROWTH_RATE_OPTIONS,
    CONTRIBUTION_MAX,
    CONTRIBUTION_STEP,
    CONVERTER_UNITS_STEP,
    EXPENSE_MIN,
    EXPENSE_STEP,
    HISTORY_DEFAULT_DAYS,
    MODEL_SAFE_WITHDRAWAL,
    PRICE_REFRESH_INTERVAL,
    PROJECTION_MODELS,
    RATE_MIN,
    SAFE_WITHDRAWAL_HORIZON_YEARS,
    WITHDRAWAL_RATE_STEP,
)


st.set_page_config(
   page_title="Retire On BTC | Dashboard",
   page_icon="📈",
   initial_sidebar_state="expanded",
)

st.markdown("""
  <style>
    /* Hide the entire top toolbar (hamburger + Deploy) */
    header {visibility: hidden;}
    [data-testid="stToolbar"] {visibility: hidden; height: 0; position: fixed;}
    footer {visibility: hidden;}
  </style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_price_oracle() -> PriceOracle:
    """One oracle (and price cache) per server process, resolved at startup."""
    oracle = PriceOracle()
    oracle.resolve_current_price()
    return oracle


# Historical prices do not change; cache them to stay under the API rate limit
@st.cache_data(ttl=PRICE_REFRESH_INTERVAL * 10)
def cached_fetch_price_range(start_date: date, end_date: date):
    return fetch_price_range(start_date, end_date)


def _on_input_change():
    st.session_state.calculator_expanded = True
    st.session_state.results_expanded = False
    st.session_state.results_available = False


@st.fragment(run_every=PRICE_REFRESH_INTERVAL)
def render_price_header():
    oracle = get_price_oracle()
    if st.button("🔄 Refresh price"):
        quote = oracle.resolve_current_price()
    else:
        quote = oracle.refresh_if_stale()

    if quote.is_estimated:
        st.markdown(f"**Current Bitcoin Price:** {fmt_money(quote.value)} *(estimated)*")
        for message in oracle.failure_messages():
            st.warning(message)
    else:
        st.markdown(
            f"**Current Bitcoin Price:** {fmt_money(quote.value)} "
            f"<small>via {quote.source.label} at {quote.fetched_at:%H:%M:%S}</small>",
            unsafe_allow_html=True,
        )


def render_calculator():
    with st.expander("🧮 Retirement Calculator", expanded=st.session_state.calculator_expanded):
        with st.form("calculator_form"):
            col1, col2 = st.columns(2)
            with col1:
                st.number_input(
                    "Current Age",
                    min_value=AGE_RANGE[0],
                    max_value=AGE_RANGE[1] - 1,
                    step=1,
                    help="Your current age in years",
                    key="current_age",
                )
            with col2:
                st.number_input(
                    "Life Expectancy",
                    min_value=AGE_RANGE[0] + 1,
                    max_value=AGE_RANGE[1],
                    step=1,
                    help="The age your savings must last until",
                    key="life_expectancy",
                )

            col3, col4 = st.columns(2)
            with col3:
                st.number_input(
                    "Annual Expense (USD)",
                    min_value=EXPENSE_MIN,
                    step=EXPENSE_STEP,
                    help="What you expect to spend each year in retirement",
                    key="annual_expense",
                )
            with col4:
                st.number_input(
                    "Annual Contribution (₿)",
                    min_value=RATE_MIN,
                    max_value=CONTRIBUTION_MAX,
                    step=CONTRIBUTION_STEP,
                    format="%.4f",
                    help="How much Bitcoin you add to your stack each year",
                    key="annual_contribution",
                )

            col5, col6 = st.columns(2)
            with col5:
                st.selectbox(
                    "Bitcoin Growth Rate Projection",
                    list(BITCOIN_GROWTH_RATE_OPTIONS.keys()),
                    key="bitcoin_growth_rate_label",
                )
            with col6:
                st.selectbox(
                    "Projection Model",
                    PROJECTION_MODELS,
                    key="projection_model",
                    help="Drawdown until life expectancy, or a fixed safe withdrawal rate",
                )

            st.number_input(
                "Safe Withdrawal Rate (%)",
                min_value=WITHDRAWAL_RATE_STEP,
                step=WITHDRAWAL_RATE_STEP,
                help="Only used by the safe withdrawal rate model",
                key="withdrawal_rate",
            )

            submitted = st.form_submit_button("🧮 Calculate Retirement Plan")
            if submitted:
                _on_input_change()
                inputs = collect_form_inputs(st.session_state)
                errors = validate_form_inputs(inputs)
                if errors:
                    for err in errors:
                        st.error(err)
                else:
                    st.session_state.last_inputs = inputs
                    st.session_state.results_available = True
                    st.session_state.results_expanded = True
                    st.session_state.calculator_expanded = False
                    update_query_params()
                    # Rerun so the updated expander states take effect immediately
                    st.rerun()


def collect_form_inputs(state) -> dict:
    return {
        "current_age": int(state["current_age"]),
        "life_expectancy": int(state["life_expectancy"]),
        "annual_expense": float(state["annual_expense"]),
        "bitcoin_growth_rate": float(BITCOIN_GROWTH_RATE_OPTIONS[state["bitcoin_growth_rate_label"]]),
        "annual_contribution": float(state["annual_contribution"]),
        "projection_model": state["projection_model"],
        "withdrawal_rate": float(state["withdrawal_rate"]),
    }


def validate_form_inputs(inputs):
    if inputs["projection_model"] == MODEL_SAFE_WITHDRAWAL:
        return validate_withdrawal_rate(inputs["withdrawal_rate"]) + validate_amounts(
            inputs["annual_expense"],
            inputs["bitcoin_growth_rate"],
            inputs["annual_contribution"],
        )
    return validate_inputs(
        inputs["current_age"],
        inputs["life_expectancy"],
        inputs["annual_expense"],
        inputs["bitcoin_growth_rate"],
        inputs["annual_contribution"],
    )


def to_parameters(inputs) -> RetirementParameters:
    return RetirementParameters(
        annual_expense=inputs["annual_expense"],
        current_age=inputs["current_age"],
        life_expectancy=inputs["life_expectancy"],
        growth_rate_percent=inputs["bitcoin_growth_rate"],
        annual_contribution_units=inputs["annual_contribution"],
    )


def render_results(inputs, quote):
    """Render the projection for ``inputs`` at ``quote`` and return it."""

    if quote.is_estimated:
        st.info(
            f"Live prices are unavailable, so this plan uses an estimated price of {fmt_money(quote.value)}."
        )

    if inputs["projection_model"] == MODEL_SAFE_WITHDRAWAL:
        return _render_safe_withdrawal(inputs, quote)

    params = to_parameters(inputs)
    projection = project_retirement(params, quote)

    if projection.feasible:
        years = projection.years_to_retirement
        years_word = "year" if years == 1 else "years"
        result = (
            f"🎉 Keep stacking for {years} {years_word} and you can retire at age {projection.retirement_age}. "
            f"At that point your Bitcoin should be worth {fmt_money(projection.required_capital)}, "
            f"enough to cover {fmt_money(params.annual_expense)} a year until age {params.life_expectancy}. "
            f"\n\n"
            f"That is {fmt_btc(projection.required_units_now)} at today's price."
        )
        st.write(result)
        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("Years to Retirement", years)
        with col2:
            st.metric("Required Capital", f"${projection.required_capital:,.0f}")
        with col3:
            st.metric("In Today's BTC", fmt_btc(projection.required_units_now))
        show_balance_visualization(
            project_balance_path(params, quote, years),
            current_age=params.current_age,
            retirement_age=projection.retirement_age,
        )
    else:
        st.write(
            f"🚨 No accumulation period before age {params.life_expectancy} funds "
            f"{fmt_money(params.annual_expense)} a year. Try a higher contribution or a lower expense."
        )

    st.info(
        "Note: Bitcoin prices are highly volatile. These calculations are estimates and should not be considered financial advice."
    )
    return projection


def _render_safe_withdrawal(inputs, quote):
    projection = project_safe_withdrawal(
        annual_expense=inputs["annual_expense"],
        withdrawal_rate_percent=inputs["withdrawal_rate"],
        growth_rate_percent=inputs["bitcoin_growth_rate"],
        annual_contribution_units=inputs["annual_contribution"],
        quote=quote,
    )
    target = (
        f"At a {inputs['withdrawal_rate']:g}% withdrawal rate you need "
        f"{fmt_money(projection.required_capital)} ({fmt_btc(projection.required_units_now)} at today's price)."
    )
    if projection.feasible:
        years = projection.years_to_retirement
        st.write(
            f"🎉 {target} Your contributions reach it in {years} {'year' if years == 1 else 'years'}, "
            f"at age {inputs['current_age'] + years}."
        )
    else:
        st.write(
            f"🚨 {target} Your contributions would take more than {SAFE_WITHDRAWAL_HORIZON_YEARS} years to get there."
        )
    st.info(
        "Note: Bitcoin prices are highly volatile. These calculations are estimates and should not be considered financial advice."
    )
    return projection


def latest_quote():
    # Refresh here too so a visible plan never trails the header by an interval
    return get_price_oracle().refresh_if_stale()


@st.fragment(run_every=PRICE_REFRESH_INTERVAL)
def render_results_section():
    inputs = st.session_state["last_inputs"]
    quote = latest_quote()
    with st.expander("📆 Retirement Summary", expanded=st.session_state.results_expanded):
        try:
            render_results(inputs, quote)
        except ValidationError as e:
            for err in e.errors:
                st.error(err)


def _sync_usd_from_btc(price):
    value = units_to_currency(st.session_state.converter_btc, price)
    if value is not None:
        st.session_state.converter_usd = round(value, 2)


def _sync_btc_from_usd(price):
    value = currency_to_units(st.session_state.converter_usd, price)
    if value is not None:
        st.session_state.converter_btc = round(value, 8)


def render_converter():
    price = get_price_oracle().current().value
    with st.expander("💱 BTC / USD Converter"):
        st.session_state.setdefault("converter_btc", 1.0)
        st.session_state.setdefault("converter_usd", round(price, 2))
        col1, col2 = st.columns(2)
        with col1:
            st.number_input(
                "Bitcoin (₿)",
                min_value=0.0,
                step=CONVERTER_UNITS_STEP,
                format="%.8f",
                key="converter_btc",
                on_change=_sync_usd_from_btc,
                args=(price,),
            )
        with col2:
            st.number_input(
                "US Dollars",
                min_value=0.0,
                step=100.0,
                format="%.2f",
                key="converter_usd",
                on_change=_sync_btc_from_usd,
                args=(price,),
            )

        st.markdown("**What would my stack be worth?**")
        col3, col4 = st.columns(2)
        with col3:
            holdings = st.number_input("Holdings (₿)", min_value=0.0, step=CONVERTER_UNITS_STEP, format="%.8f")
        with col4:
            future_price = st.number_input("Future Price (USD)", min_value=0.0, step=1000.0)
        st.markdown(f"Projected value: {fmt_money(project_holdings_value(holdings, future_price))}")


def render_history():
    with st.expander("📜 Historical Prices"):
        today = date.today()
        col1, col2 = st.columns(2)
        with col1:
            start_date = st.date_input(
                "Start Date",
                value=today - timedelta(days=HISTORY_DEFAULT_DAYS),
                max_value=today,
                key="history_start",
            )
        with col2:
            end_date = st.date_input("End Date", value=today, max_value=today, key="history_end")

        if st.button("Check Price History"):
            errors = validate_date_range(start_date, end_date, today=today)
            if errors:
                for err in errors:
                    st.error(err)
                return
            with st.spinner("Loading historical prices..."):
                try:
                    prices = cached_fetch_price_range(start_date, end_date)
                    summary = summarize_prices(start_date, end_date, prices)
                except RateLimitedError as e:
                    st.warning(e.message)
                    return
                except HistoryFetchError as e:
                    st.error(e.message)
                    return
            st.session_state.history_summary = (summary, prices)

        if st.session_state.history_summary:
            summary, prices = st.session_state.history_summary
            col3, col4, col5 = st.columns(3)
            with col3:
                st.metric("High", f"${summary.high:,.2f}")
            with col4:
                st.metric("Low", f"${summary.low:,.2f}")
            with col5:
                st.metric("Average", f"${summary.mean:,.2f}")
            st.caption(f"{summary.samples} prices from {summary.start} to {summary.end}")
            show_history_chart(prices)


def render_calculation_methodology():
    st.markdown(
        """
        1) **Price**: The current price comes from CoinGecko, then CoinGecko's market chart, then Binance. Each source gets 5 seconds. If all fail, a fixed estimate is used and marked as such. The price refreshes every minute.

        2) **Accumulation**: Each working year adds your contribution to your stack, then the price grows by the selected rate `g`.
           - After `y` years: `units = y * contribution`, `price = P_0 * (1 + g)^y`

        3) **Drawdown**: Each retirement year sells `expense / price` BTC, then the price grows again. A plan fails if the stack ever drops below zero before your life expectancy.

        4) **Search**: We try every retirement year from today up to your life expectancy and report the first one whose drawdown lasts.
           - Required capital: `units * price` at retirement
           - In today's BTC: `required capital / P_0`

        5) **Safe withdrawal rate**: The simpler model needs `expense / rate` in capital and counts the years of contributions to get there, up to 100 years.
        """
)


def main():
    st.markdown(
        "<h1 style='margin: -4rem 0rem -2rem -0.5rem;'>📈 Retire On BTC</h1>",
        unsafe_allow_html=True,
    )
    initialize_session_state()
    if not st.session_state.get("query_params_loaded"):
        load_from_query_params()
        st.session_state.query_params_loaded = True

    render_price_header()
    render_calculator()
    if st.session_state.get("results_available"):
        render_results_section()
    render_converter()
    render_history()
    with st.expander("🛠️ Calculation Methodology"):
        render_calculation_methodology()


if __name__ == "__main__":
    main()
