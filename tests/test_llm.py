from unittest import mock

import pytest
from langchain_core.messages import AIMessage

from src.agents import llm
from src.agents.llm import (
    MODE_CONFIGS,
    PORTFOLIO_CONFIG,
    REMOTE_ERROR_MESSAGE,
    SYSTEM_INSTRUCTION,
    ModeConfig,
    generate_deep_analysis,
    generate_response,
    generate_standard_response,
)
from src.agents.models import AnalysisMode


def test_mode_configs_cover_every_mode():
    assert set(MODE_CONFIGS) == set(AnalysisMode)

    standard = MODE_CONFIGS[AnalysisMode.STANDARD]
    deep = MODE_CONFIGS[AnalysisMode.DEEP]
    assert standard.web_search and standard.reasoning_effort is None
    assert deep.reasoning_effort == "high" and not deep.web_search
    assert PORTFOLIO_CONFIG.web_search


def test_generate_response_prepends_system_instruction():
    fake_llm = mock.MagicMock()
    fake_llm.invoke.return_value = AIMessage(content="Nifty closed higher.")
    history = [{"role": "user", "content": "How is the market?"}]

    with mock.patch.object(llm, "_get_openai_llm", return_value=fake_llm) as factory:
        text = generate_response(history, MODE_CONFIGS[AnalysisMode.STANDARD])

    assert text == "Nifty closed higher."
    factory.assert_called_once_with(MODE_CONFIGS[AnalysisMode.STANDARD])
    sent = fake_llm.invoke.call_args.args[0]
    assert sent[0] == {"role": "system", "content": SYSTEM_INSTRUCTION}
    assert sent[1:] == history


def test_generate_response_joins_responses_api_blocks():
    fake_llm = mock.MagicMock()
    fake_llm.invoke.return_value = AIMessage(
        content=[
            {"type": "text", "text": "Sensex **up**", "annotations": []},
            {"type": "text", "text": " 1.2%"},
        ]
    )

    with mock.patch.object(llm, "_get_openai_llm", return_value=fake_llm):
        assert generate_standard_response([]) == "Sensex **up** 1.2%"


@pytest.mark.parametrize(
    "failure",
    [ConnectionError("network down"), RuntimeError("Missing OPENAI_API_KEY")],
)
def test_any_failure_becomes_fixed_message(failure):
    fake_llm = mock.MagicMock()
    fake_llm.invoke.side_effect = failure

    with mock.patch.object(llm, "_get_openai_llm", return_value=fake_llm):
        assert generate_deep_analysis([]) == REMOTE_ERROR_MESSAGE


def test_factory_failure_becomes_fixed_message():
    with mock.patch.object(llm, "_get_openai_llm", side_effect=ValueError("bad model")):
        assert generate_standard_response([]) == REMOTE_ERROR_MESSAGE


def test_openai_llm_for_search_mode(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    with mock.patch.object(llm, "ChatOpenAI") as chat_cls:
        result = llm._get_openai_llm(ModeConfig(model="gpt-4o-mini", web_search=True))

    kwargs = chat_cls.call_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["api_key"] == "sk-test"
    assert kwargs["use_responses_api"] is True
    assert "reasoning_effort" not in kwargs
    chat_cls.return_value.bind_tools.assert_called_once_with([{"type": "web_search_preview"}])
    assert result is chat_cls.return_value.bind_tools.return_value


def test_openai_llm_for_reasoning_mode(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    with mock.patch.object(llm, "ChatOpenAI") as chat_cls:
        result = llm._get_openai_llm(ModeConfig(model="o4-mini", reasoning_effort="high"))

    kwargs = chat_cls.call_args.kwargs
    assert kwargs["reasoning_effort"] == "high"
    assert "temperature" not in kwargs
    assert "use_responses_api" not in kwargs
    chat_cls.return_value.bind_tools.assert_not_called()
    assert result is chat_cls.return_value
