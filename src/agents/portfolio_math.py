from __future__ import annotations

import re
from typing import Dict, List, Sequence, Union

from src.agents.models import AIAllocation, Allocation


Number = Union[int, float]


# Monetary amounts per allocation


def compute_allocation_amounts(
    ai_allocations: Sequence[AIAllocation],
    initial_capital: Number,
    monthly_investment: Number,
) -> List[Allocation]:
    """
    Attach rupee amounts to each model-suggested allocation.

    The amounts are always computed here from what the user typed, never
    taken from the model output:

        lump_sum = percentage / 100 * initial_capital
        sip      = percentage / 100 * monthly_investment

    No rounding is applied. Order of allocations is preserved.
    """
    allocations: List[Allocation] = []
    for item in ai_allocations:
        share = item.percentage / 100
        allocations.append(
            Allocation(
                name=item.name,
                percentage=item.percentage,
                metrics=item.metrics,
                lump_sum=share * initial_capital,
                sip=share * monthly_investment,
            )
        )
    return allocations


# Form input helpers


def parse_amount(text: str) -> int:
    """
    Turn a free-text amount field into an integer.

    Everything that is not a digit (commas, spaces, the rupee sign) is
    dropped, so "1,00,000" and "₹ 100000" both give 100000. Empty -> 0.
    """
    digits = re.sub(r"\D", "", text or "")
    return int(digits) if digits else 0


def format_inr(value: Number) -> str:
    """
    Format a number with Indian digit grouping (en-IN), e.g. 1234567 ->
    "12,34,567". Up to three decimals are kept, trailing zeros dropped.
    """
    sign = "-" if value < 0 else ""
    text = f"{abs(float(value)):.3f}".rstrip("0").rstrip(".")
    whole, _, frac = text.partition(".")

    # Last three digits form one group, everything before it goes in pairs
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        pairs = []
        while len(head) > 2:
            pairs.insert(0, head[-2:])
            head = head[:-2]
        if head:
            pairs.insert(0, head)
        whole = ",".join(pairs + [tail])

    return sign + whole + (f".{frac}" if frac else "")


# Pie chart colors


GROWTH_COLORS = ["#10B981", "#34D399", "#6EE7B7", "#A7F3D0"]
COMMODITY_COLORS = ["#F59E0B", "#FBBF24", "#FCD34D"]
DEBT_COLORS = ["#6B7280", "#9CA3AF", "#D1D5DB"]


def chart_colors(allocations: Sequence[Allocation]) -> List[Dict[str, object]]:
    """
    Build pie-chart slices: one {name, value, color} per allocation.

    Gold/commodity holdings get the amber palette, debt/bond/FD holdings
    the grey one, everything else cycles through the green palette.
    """
    slices: List[Dict[str, object]] = []
    for index, item in enumerate(allocations):
        lower_name = item.name.lower()
        color = GROWTH_COLORS[index % len(GROWTH_COLORS)]
        if "gold" in lower_name or "commodity" in lower_name:
            color = COMMODITY_COLORS[index % len(COMMODITY_COLORS)]
        elif "debt" in lower_name or "bond" in lower_name or "fd" in lower_name:
            color = DEBT_COLORS[index % len(DEBT_COLORS)]

        slices.append({"name": item.name, "value": item.percentage, "color": color})
    return slices
