# visualization.py
import streamlit as st
import pandas as pd
import plotly.express as px
from collections.abc import Sequence

from calculations import RetirementParameters, project_balance_path
from pricing import PriceQuote


def show_balance_visualization(
    holdings: Sequence | None,
    current_age: int | None = None,
    retirement_age: int | None = None,
    params: RetirementParameters | None = None,
    quote: PriceQuote | None = None,
) -> None:
    """Visualize projected Bitcoin holdings by age.

    ``holdings`` is a BTC balance per year starting at ``current_age``. If it
    is ``None`` the series is derived from ``params`` and ``quote`` via
    :func:`project_balance_path`, retiring at ``retirement_age``.
    """

    if holdings is None:
        if params is None or quote is None or retirement_age is None:
            raise ValueError("Missing parameters for holdings projection")
        current_age = params.current_age
        holdings = project_balance_path(
            params, quote, retirement_age - params.current_age
        )

    holdings = list(holdings)
    start = current_age if current_age is not None else 0
    df = pd.DataFrame({
        "Age": list(range(start, start + len(holdings))),
        "Holdings (₿)": holdings,
    })

    fig = px.line(df, x="Age", y="Holdings (₿)")
    fig.update_traces(
        line_color="rgba(253, 150, 68, 1.0)",
        fill="tozeroy",
        fillcolor="rgba(253, 150, 68, 0.2)",
    )
    if retirement_age is not None:
        fig.add_vline(x=retirement_age, line_dash="dash", line_color="rgba(99, 110, 250, 1.0)")
    fig.update_layout(margin=dict(t=0, b=0, l=0, r=0), showlegend=False)
    st.plotly_chart(
        fig,
        use_container_width=True,
        config={"displayModeBar": False}
    )


def show_history_chart(prices: Sequence | None) -> None:
    """Render a line chart of ``(timestamp, price)`` pairs. Empty input renders nothing."""

    if not prices:
        return

    df = pd.DataFrame(list(prices), columns=["Date", "Price (USD)"])
    fig = px.line(df, x="Date", y="Price (USD)")
    fig.update_traces(line_color="rgba(253, 150, 68, 1.0)")
    fig.update_layout(margin=dict(t=0, b=0, l=0, r=0), showlegend=False)
    st.plotly_chart(fig, config={"displayModeBar": False})
