from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator




# ============================================
# CHAT
# ============================================


class MessageRole(str, Enum):
    USER = "user"
    MODEL = "model"


class AnalysisMode(str, Enum):
    STANDARD = "Standard"
    DEEP = "Deep Analysis"


@dataclass(frozen=True)
class ChatMessage:
    role: MessageRole
    text: str
    image: Optional[str] = None       # data URL, shown above the text
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_user(self) -> bool:
        return self.role == MessageRole.USER


WELCOME_TEXT = (
    "Welcome to **FinMentor AI**.\n\n"
    "I'm an AI financial analyst for the **Indian market (NSE/BSE)**. "
    'Use the "Analysis Mode" selector below to switch between standard '
    "search-powered responses or deep analysis for complex questions."
)


def initial_chat_message() -> ChatMessage:
    return ChatMessage(role=MessageRole.MODEL, text=WELCOME_TEXT)


class Transcript:
    """
    Ordered, append-only chat history owned by one chat session.

    Messages are never edited or removed. `new_chat()` swaps in a fresh
    history and bumps `generation`, so a reply computed against the old
    history can be recognised as stale and dropped.
    """

    def __init__(self, messages: Optional[List[ChatMessage]] = None):
        self._messages: List[ChatMessage] = (
            list(messages) if messages is not None else [initial_chat_message()]
        )
        self.generation = 0

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def append(self, message: ChatMessage) -> None:
        self._messages.append(message)

    def recent(self, n: int) -> List[ChatMessage]:
        if n <= 0:
            return []
        return self._messages[-n:]

    def new_chat(self) -> None:
        self._messages = [initial_chat_message()]
        self.generation += 1

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self._messages)




# ============================================
# PORTFOLIO INPUT
# ============================================


RISK_LEVELS = ["Low", "Medium", "High"]

INVESTMENT_TOOLS = ["Mutual Funds", "Stocks", "Bonds", "Debt Funds"]


@dataclass
class PortfolioInput:
    initial_capital: float = 0
    monthly_investment: float = 0
    risk_appetite: str = "Medium"     # Low | Medium | High
    preferred_tools: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.initial_capital < 0 or self.monthly_investment < 0:
            raise ValueError("Investment amounts must be non-negative")
        if self.risk_appetite not in RISK_LEVELS:
            raise ValueError(
                f"Unknown risk appetite {self.risk_appetite!r}; "
                f"expected one of {RISK_LEVELS}"
            )

    def has_investment(self) -> bool:
        """At least one of lump sum / SIP must be non-zero to build a plan."""
        return self.initial_capital > 0 or self.monthly_investment > 0




# ============================================
# RAW AI RESPONSE (untrusted)
# ============================================


class AIAllocation(BaseModel):
    # json.loads lets NaN / Infinity through; they are not usable percentages
    model_config = ConfigDict(allow_inf_nan=False)

    name: str
    percentage: float
    metrics: str = Field(
        default="",
        description='Key metrics, e.g. "1Y Return: 15.2%, Expense Ratio: 0.5%".',
    )


class AIPortfolioAnalysisResponse(BaseModel):
    rationale: str
    projectedReturn: str
    allocations: List[AIAllocation]

    @field_validator("rationale", "projectedReturn")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value




# ============================================
# FINAL ANALYSIS (what the UI shows)
# ============================================


@dataclass
class Allocation:
    name: str
    percentage: float
    metrics: str
    lump_sum: float
    sip: float


@dataclass
class PortfolioAnalysis:
    rationale: str
    projected_return: str
    allocations: List[Allocation] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        """Empty allocations is the marker for "no usable analysis"."""
        return not self.allocations
