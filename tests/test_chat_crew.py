from unittest import mock

from src.agents.crews import chat_crew
from src.agents.crews.chat_crew import (
    MARKET_UPDATE_PROMPT,
    MARKET_UPDATE_REQUEST,
    build_context,
    new_chat,
    request_market_update,
    send_message,
)
from src.agents.llm import MODE_CONFIGS
from src.agents.models import (
    WELCOME_TEXT,
    AnalysisMode,
    ChatMessage,
    MessageRole,
    Transcript,
)


def _transcript_with_turns(n):
    """Transcript holding exactly n alternating user/model turns."""
    messages = [
        ChatMessage(
            role=MessageRole.USER if i % 2 == 0 else MessageRole.MODEL,
            text=f"turn {i}",
        )
        for i in range(n)
    ]
    return Transcript(messages)


def test_new_transcript_starts_with_welcome_message():
    transcript = Transcript()

    assert len(transcript) == 1
    assert transcript.messages[0].role == MessageRole.MODEL
    assert transcript.messages[0].text == WELCOME_TEXT


def test_context_is_last_five_turns_plus_query():
    transcript = _transcript_with_turns(7)

    context = build_context(transcript, "8th query")

    assert [c["content"] for c in context] == [
        "turn 2", "turn 3", "turn 4", "turn 5", "turn 6", "8th query",
    ]
    assert [c["role"] for c in context] == [
        "user", "assistant", "user", "assistant", "user", "user",
    ]


def test_context_with_short_history():
    context = build_context(Transcript(), "hi")

    assert context == [
        {"role": "assistant", "content": WELCOME_TEXT},
        {"role": "user", "content": "hi"},
    ]


def test_send_message_appends_both_turns_and_uses_mode_config():
    transcript = _transcript_with_turns(7)

    with mock.patch.object(
        chat_crew, "generate_response", return_value="**Buy** nothing"
    ) as generate:
        reply = send_message(transcript, "  Is TCS cheap?  ", AnalysisMode.DEEP)

    history, config = generate.call_args.args
    assert config == MODE_CONFIGS[AnalysisMode.DEEP]
    assert len(history) == 6
    assert history[-1] == {"role": "user", "content": "Is TCS cheap?"}

    assert len(transcript) == 9
    assert transcript.messages[-2].role == MessageRole.USER
    assert transcript.messages[-2].text == "Is TCS cheap?"
    assert transcript.messages[-1] is reply
    assert reply.role == MessageRole.MODEL and reply.text == "**Buy** nothing"


def test_send_message_ignores_blank_query():
    transcript = Transcript()

    with mock.patch.object(chat_crew, "generate_response") as generate:
        assert send_message(transcript, "   ") is None

    generate.assert_not_called()
    assert len(transcript) == 1


def test_reply_after_new_chat_is_discarded():
    transcript = _transcript_with_turns(3)

    def reset_while_waiting(history, config):
        new_chat(transcript)
        return "late answer"

    with mock.patch.object(chat_crew, "generate_response", side_effect=reset_while_waiting):
        assert send_message(transcript, "question") is None

    assert [m.text for m in transcript] == [WELCOME_TEXT]
    assert transcript.generation == 1


def test_market_update_sends_only_the_instruction():
    transcript = _transcript_with_turns(4)

    with mock.patch.object(
        chat_crew, "generate_response", return_value="**Here is your update**"
    ) as generate:
        reply = request_market_update(transcript)

    history, config = generate.call_args.args
    assert history == [{"role": "user", "content": MARKET_UPDATE_PROMPT}]
    assert config == MODE_CONFIGS[AnalysisMode.STANDARD]
    assert transcript.messages[-2].text == MARKET_UPDATE_REQUEST
    assert transcript.messages[-1] is reply


def test_new_chat_resets_to_welcome_message():
    transcript = _transcript_with_turns(6)

    new_chat(transcript)

    assert len(transcript) == 1
    assert transcript.messages[0].text == WELCOME_TEXT
