from __future__ import annotations

from typing import List

import pandas as pd
import plotly.express as px
import streamlit as st

from src.config import require_api_key
from src.agents.models import (
    INVESTMENT_TOOLS,
    RISK_LEVELS,
    AnalysisMode,
    PortfolioAnalysis,
    PortfolioInput,
    Transcript,
)
from src.agents.crews.chat_crew import new_chat, request_market_update, send_message
from src.agents.crews.portfolio_crew import run_portfolio_analysis
from src.agents.portfolio_math import chart_colors, format_inr, parse_amount
from src.rendering.html import markdown_to_html



# Streamlit page config & basic styling

st.set_page_config(
    page_title="FinMentor AI",
    page_icon="💹",
    layout="wide",
)

st.markdown(
    """
    <style>
    .small-text { font-size: 0.85rem; color: #666; }
    .fm-h1 { font-size: 1.25rem; font-weight: 700; margin: 1rem 0 0.5rem; }
    .fm-h2 { font-size: 1.1rem; font-weight: 600; margin: 0.75rem 0 0.25rem; }
    .fm-table-wrap { overflow-x: auto; margin: 1rem 0; }
    .fm-table { min-width: 100%; font-size: 0.85rem; border-collapse: collapse; }
    .fm-table th, .fm-table td { padding: 0.4rem 0.9rem; text-align: left; vertical-align: top; }
    .fm-table thead { background-color: #f0f2f6; }
    .fm-error { text-align: center; padding: 3rem 0; }
    </style>
    """,
    unsafe_allow_html=True,
)


# Startup: the API key is mandatory, there is no degraded mode

try:
    require_api_key()
except RuntimeError as e:
    st.error(f"{e}. Set it in your environment or a .env file and restart the app.")
    st.stop()



# Session-state setup

def init_session_state() -> None:
    """Initialize Streamlit session state on first load."""
    if "transcript" not in st.session_state:
        st.session_state.transcript = Transcript()

    if "portfolio_analysis" not in st.session_state:
        st.session_state.portfolio_analysis: PortfolioAnalysis | None = None


init_session_state()



# Sidebar

with st.sidebar:
    st.markdown("## 💹 FinMentor AI")
    st.caption("Indian Market Analysis")



# Chat tab

def render_chat(transcript: Transcript) -> None:
    st.subheader("AI Chat")
    st.caption("Ask about investing, savings, or your goals!")

    mode_col, update_col, reset_col = st.columns([3, 1, 1])
    with mode_col:
        mode_label = st.radio(
            "Analysis Mode",
            [mode.value for mode in AnalysisMode],
            horizontal=True,
            key="analysis_mode",
        )
    mode = AnalysisMode(mode_label)

    with update_col:
        market_update = st.button("✨ Market Update", use_container_width=True)
    with reset_col:
        if st.button("🔄 New Chat", use_container_width=True):
            new_chat(transcript)
            st.rerun()

    for msg in transcript:
        with st.chat_message("user" if msg.is_user else "assistant"):
            if msg.image:
                st.image(msg.image, caption="Generated Visualization")
            if msg.text:
                st.markdown(markdown_to_html(msg.text), unsafe_allow_html=True)
            st.caption(msg.timestamp.strftime("%H:%M"))

    user_input = st.chat_input("💬 Ask a financial question...")

    if market_update:
        with st.spinner("FinMentor is thinking..."):
            request_market_update(transcript)
        st.rerun()

    if user_input:
        with st.spinner("FinMentor is thinking..."):
            send_message(transcript, user_input, mode)
        st.rerun()



# Portfolio tab

def render_analysis(analysis: PortfolioAnalysis) -> None:
    st.markdown("## AI Analysis & Allocation")

    if analysis.failed:
        st.markdown(
            "<div class='fm-error'><h3>Analysis Error</h3>"
            f"{markdown_to_html(analysis.rationale)}</div>",
            unsafe_allow_html=True,
        )
        return

    col_chart, col_text = st.columns(2)

    with col_chart:
        slices = chart_colors(analysis.allocations)
        chart_df = pd.DataFrame(slices)
        fig = px.pie(
            chart_df,
            names="name",
            values="value",
            color="name",
            color_discrete_map={s["name"]: s["color"] for s in slices},
        )
        fig.update_layout(margin=dict(t=10, b=10, l=10, r=10))
        st.plotly_chart(fig, use_container_width=True)

    with col_text:
        st.markdown("### Investment Rationale")
        st.markdown(markdown_to_html(analysis.rationale), unsafe_allow_html=True)
        st.metric("Projected Annual Return", analysis.projected_return)

    st.markdown("### Detailed Allocation Plan")
    rows = [
        {
            "Asset Name": item.name,
            "Key Metrics": item.metrics,
            "Allocation": f"{item.percentage:g}%",
            "Lump Sum (₹)": format_inr(item.lump_sum),
            "Monthly SIP (₹)": format_inr(item.sip),
        }
        for item in analysis.allocations
    ]
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


def render_portfolio_generator() -> None:
    st.subheader("Portfolio Generator")
    st.caption("Create a personalized investment profile to get an AI-driven analysis.")

    col_a, col_b = st.columns(2)
    with col_a:
        capital_text = st.text_input("One-Time Capital (₹)", placeholder="e.g., 50000")
    with col_b:
        sip_text = st.text_input("Monthly SIP (₹)", placeholder="e.g., 10000")

    selected_tools: List[str] = st.multiselect(
        "Preferred Investment Tools", INVESTMENT_TOOLS
    )
    risk_appetite = st.radio(
        "Risk Appetite",
        RISK_LEVELS,
        index=RISK_LEVELS.index("Medium"),
        horizontal=True,
    )

    portfolio_input = PortfolioInput(
        initial_capital=parse_amount(capital_text),
        monthly_investment=parse_amount(sip_text),
        risk_appetite=risk_appetite,
        preferred_tools=selected_tools,
    )

    if st.button(
        "✨ Generate Smart Portfolio",
        type="primary",
        use_container_width=True,
    ):
        if not portfolio_input.has_investment():
            st.warning("Please enter either Initial Capital or Monthly SIP.")
        else:
            st.session_state.portfolio_analysis = None
            with st.spinner("Generating..."):
                st.session_state.portfolio_analysis = run_portfolio_analysis(
                    portfolio_input
                )

    if st.session_state.portfolio_analysis is not None:
        st.divider()
        render_analysis(st.session_state.portfolio_analysis)



# Layout section

tab_chat, tab_portfolio = st.tabs(["✨ AI Chat", "👛 Portfolio Generator"])

with tab_chat:
    render_chat(st.session_state.transcript)

with tab_portfolio:
    render_portfolio_generator()
