from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from langchain_openai import ChatOpenAI

from src.agents.models import AnalysisMode
from src import config


# Per-mode model settings
#
# Each user-facing AnalysisMode maps to one fixed ModeConfig. The portfolio
# generator has its own config since it is not a chat mode.


@dataclass(frozen=True)
class ModeConfig:
    model: str
    web_search: bool = False
    reasoning_effort: Optional[str] = None    # low | medium | high
    temperature: Optional[float] = None


MODE_CONFIGS: Dict[AnalysisMode, ModeConfig] = {
    AnalysisMode.STANDARD: ModeConfig(
        model=config.DEFAULT_CHAT_MODEL,
        web_search=True,
        temperature=0.3,
    ),
    AnalysisMode.DEEP: ModeConfig(
        model=config.DEFAULT_DEEP_MODEL,
        reasoning_effort="high",
    ),
}

PORTFOLIO_CONFIG = ModeConfig(
    model=config.DEFAULT_PORTFOLIO_MODEL,
    web_search=True,
    temperature=0.2,
)

WEB_SEARCH_TOOL = {"type": "web_search_preview"}


SYSTEM_INSTRUCTION = """
You are FinMentor AI, an expert Indian financial research chatbot. Your goal is to provide
**brief, direct, and data-driven answers**. Use **bullet points** or short sentences.
**Avoid long paragraphs**.
- Your expertise is strictly the **Indian market (NSE/BSE)**.
- For complex queries, you perform deep analysis.
- For general queries, you use search to get real-time data.
- If a query is not about finance or the Indian market, politely state your purpose.
""".strip()

REMOTE_ERROR_MESSAGE = (
    "There was an error connecting to the financial data services. "
    "Please check your connection or API key and try again."
)


# LLM helper (OpenAI via LangChain)


def _get_openai_llm(mode_config: ModeConfig) -> Any:
    """
    Build the chat model for one call.

    Web search goes through the OpenAI Responses API as a built-in tool;
    reasoning models get their effort level instead of a temperature.
    """
    kwargs: Dict[str, Any] = {
        "model": mode_config.model,
        "api_key": config.require_api_key(),
        "timeout": config.DEFAULT_TIMEOUT_SECONDS,
    }
    if mode_config.temperature is not None:
        kwargs["temperature"] = mode_config.temperature
    if mode_config.reasoning_effort:
        kwargs["reasoning_effort"] = mode_config.reasoning_effort
    if mode_config.web_search:
        kwargs["use_responses_api"] = True

    llm = ChatOpenAI(**kwargs)
    if mode_config.web_search:
        return llm.bind_tools([WEB_SEARCH_TOOL])
    return llm


def _message_text(resp: Any) -> str:
    """
    Pull plain text out of an AIMessage.

    Responses API replies come back as a list of content blocks (text plus
    search annotations), chat completions as a bare string.
    """
    content = resp.content if hasattr(resp, "content") else resp
    if isinstance(content, str):
        return content

    if isinstance(content, list):
        parts: List[str] = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)

    return str(content)


# Main entry: one request/response round trip


def generate_response(
    history: List[Dict[str, str]],
    mode_config: ModeConfig,
    system_instruction: str = SYSTEM_INSTRUCTION,
) -> str:
    """
    Send `history` (list of {"role": "user"|"assistant", "content": ...})
    to the model and return its text.

    Any failure (network, auth, quota, model error) is logged and turned into
    REMOTE_ERROR_MESSAGE, so callers never see an exception from here.
    """
    messages = [{"role": "system", "content": system_instruction}] + list(history)

    try:
        llm = _get_openai_llm(mode_config)
        resp = llm.invoke(messages)
        return _message_text(resp)
    except Exception as e:
        print(f"[ERROR] OpenAI call failed for model {mode_config.model}: {e!r}")
        return REMOTE_ERROR_MESSAGE


def generate_standard_response(history: List[Dict[str, str]]) -> str:
    return generate_response(history, MODE_CONFIGS[AnalysisMode.STANDARD])


def generate_deep_analysis(history: List[Dict[str, str]]) -> str:
    return generate_response(history, MODE_CONFIGS[AnalysisMode.DEEP])
