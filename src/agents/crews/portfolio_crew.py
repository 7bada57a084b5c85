from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from src.agents.llm import PORTFOLIO_CONFIG, generate_response
from src.agents.models import (
    AIPortfolioAnalysisResponse,
    PortfolioAnalysis,
    PortfolioInput,
)
from src.agents.portfolio_math import compute_allocation_amounts, format_inr


JSON_FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)

ANALYSIS_ERROR_MESSAGE = (
    "There was an error generating the portfolio analysis. The AI model's response "
    "was not in the expected format. Please try adjusting your inputs or try again later."
)


# Prompt


def build_portfolio_prompt(portfolio_input: PortfolioInput) -> str:
    """Single instruction turn describing the investor and the JSON we expect."""
    tools = ", ".join(portfolio_input.preferred_tools) or "All standard tools"

    return f"""
Analyze the following Indian investor profile and generate a diversified investment portfolio.

**Investor Profile:**
- **Risk Profile:** {portfolio_input.risk_appetite}
- **Initial Lump Sum:** ₹{format_inr(portfolio_input.initial_capital)}
- **Monthly SIP:** ₹{format_inr(portfolio_input.monthly_investment)}
- **Preferred Tools:** {tools}

**Your Task:**
1. Use your search tool to find 3-5 top-performing, relevant investment assets (Mutual Funds, Stocks from NSE/BSE, etc.) suitable for this profile.
2. Determine an appropriate percentage allocation for each asset. The total percentage must equal 100.
3. Provide a brief rationale for your strategy and a projected annual return range (e.g., "10-14%").
4. For each recommended asset, provide a concise string of key metrics (e.g., "1Y Return: 15.2%, Expense Ratio: 0.5%").
5. Return the entire response as a single JSON object inside a ```json markdown block. Do NOT include any text outside of the JSON block.

**JSON Structure:**
{{
  "rationale": "string",
  "projectedReturn": "string",
  "allocations": [
    {{
      "name": "string",
      "percentage": number,
      "metrics": "string"
    }}
  ]
}}
""".strip()


# Parse the model output


@dataclass
class PortfolioParseResult:
    ok: bool
    payload: Optional[AIPortfolioAnalysisResponse] = None
    error: Optional[str] = None


def _extract_json_text(raw: str) -> str:
    """Body of the first ```json fence, or the whole text if there is none."""
    text = (raw or "").strip()
    match = JSON_FENCE_PATTERN.search(text)
    return match.group(1).strip() if match else text


def parse_portfolio_response(raw: str) -> PortfolioParseResult:
    """
    Parse and validate the model's JSON answer.

    The model is only asked (not forced) to reply with a fenced JSON block,
    so any shape problem comes back as ok=False instead of an exception.
    """
    candidate = _extract_json_text(raw)
    if not candidate:
        return PortfolioParseResult(ok=False, error="Empty model response")

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        return PortfolioParseResult(ok=False, error=f"Invalid JSON: {e}")

    if not isinstance(data, dict):
        return PortfolioParseResult(ok=False, error="Top-level JSON is not an object")

    try:
        payload = AIPortfolioAnalysisResponse.model_validate(data)
    except ValidationError as e:
        missing = ", ".join(
            ".".join(str(p) for p in err["loc"]) for err in e.errors()
        )
        return PortfolioParseResult(ok=False, error=f"Invalid fields: {missing}")

    return PortfolioParseResult(ok=True, payload=payload)


def failed_analysis(rationale: str = ANALYSIS_ERROR_MESSAGE) -> PortfolioAnalysis:
    return PortfolioAnalysis(rationale=rationale, projected_return="N/A", allocations=[])


def analysis_from_response(
    result: PortfolioParseResult,
    portfolio_input: PortfolioInput,
) -> PortfolioAnalysis:
    if not result.ok or result.payload is None:
        return failed_analysis()

    payload = result.payload
    if not payload.allocations:
        # Model answered but proposed nothing; show its explanation as the error
        return failed_analysis(payload.rationale)

    # Amounts come from the user's inputs, never from the model
    allocations = compute_allocation_amounts(
        payload.allocations,
        portfolio_input.initial_capital,
        portfolio_input.monthly_investment,
    )
    return PortfolioAnalysis(
        rationale=payload.rationale,
        projected_return=payload.projectedReturn,
        allocations=allocations,
    )


# Main entry: portfolio generator


def run_portfolio_analysis(portfolio_input: PortfolioInput) -> PortfolioAnalysis:
    """
    Generate a portfolio for the given investor profile.

    Never raises for remote or format problems: a failed call comes back as
    REMOTE_ERROR_MESSAGE text, which fails to parse and yields the failed
    analysis (empty allocations, "N/A" return, explanatory rationale).
    """
    prompt = build_portfolio_prompt(portfolio_input)
    raw_answer = generate_response(
        [{"role": "user", "content": prompt}],
        PORTFOLIO_CONFIG,
    )

    result = parse_portfolio_response(raw_answer)
    if not result.ok:
        print(f"[ERROR] Could not parse portfolio analysis: {result.error}")

    return analysis_from_response(result, portfolio_input)


if __name__ == "__main__":
    # Quick local sanity check without going through Streamlit
    analysis = run_portfolio_analysis(
        PortfolioInput(
            initial_capital=50000,
            monthly_investment=10000,
            risk_appetite="Medium",
        )
    )
    print(json.dumps(
        {
            "rationale": analysis.rationale,
            "projected_return": analysis.projected_return,
            "allocations": [vars(a) for a in analysis.allocations],
        },
        indent=2,
    ))
