from __future__ import annotations

from typing import Dict, List, Optional

from src import config
from src.agents.llm import MODE_CONFIGS, generate_response
from src.agents.models import (
    AnalysisMode,
    ChatMessage,
    MessageRole,
    Transcript,
)


MARKET_UPDATE_REQUEST = "Give me the latest market update."

MARKET_UPDATE_PROMPT = (
    "Act as FinMentor AI. Use your search tool to find the top 3-5 Indian financial "
    "market news stories from today. Summarize them concisely for a retail investor. "
    'For each story, provide: a **Headline**, a **Brief Summary**, and **"Why it matters"**. '
    "Format as plain text with markdown. "
    'Start with: "**Here is your Indian Market Update for today:**"'
)


# Helper: build the context window sent with each query


def _api_role(role: MessageRole) -> str:
    return "user" if role == MessageRole.USER else "assistant"


def build_context(
    transcript: Transcript,
    query: str,
    window: int = config.CHAT_HISTORY_WINDOW,
) -> List[Dict[str, str]]:
    """
    Last `window` turns of the transcript plus the new query, oldest first.

    The full transcript is still what the UI shows; only the request is
    truncated.
    """
    context = [
        {"role": _api_role(msg.role), "content": msg.text}
        for msg in transcript.recent(window)
    ]
    context.append({"role": "user", "content": query})
    return context


def _append_reply(transcript: Transcript, reply: ChatMessage, generation: int) -> bool:
    """Append the model reply unless the chat was reset while we waited."""
    if transcript.generation != generation:
        print(
            f"[INFO] Dropping stale reply (generation {generation}, "
            f"transcript now at {transcript.generation})"
        )
        return False
    transcript.append(reply)
    return True


# Core step functions (one turn of the chat)


def send_message(
    transcript: Transcript,
    query: str,
    mode: AnalysisMode = AnalysisMode.STANDARD,
) -> Optional[ChatMessage]:
    """
    Run one chat turn.

    Args:
        transcript: the session's chat history; updated in place.
        query: latest user input. Blank input is ignored.
        mode: Standard (web search) or Deep Analysis (extended reasoning).

    Returns:
        The model's reply message, or None if nothing was sent or the reply
        arrived after a New Chat and was discarded.
    """
    query_text = (query or "").strip()
    if not query_text:
        return None

    generation = transcript.generation

    # Context is taken from the history as it was before this query
    api_history = build_context(transcript, query_text)
    transcript.append(ChatMessage(role=MessageRole.USER, text=query_text))

    response_text = generate_response(api_history, MODE_CONFIGS[mode])
    reply = ChatMessage(role=MessageRole.MODEL, text=response_text)

    if not _append_reply(transcript, reply, generation):
        return None
    return reply


def request_market_update(transcript: Transcript) -> Optional[ChatMessage]:
    """
    One-click summary of today's Indian market news.

    Shows a canned user message in the transcript, but sends only the
    synthesized instruction (no chat history) in Standard mode.
    """
    generation = transcript.generation
    transcript.append(ChatMessage(role=MessageRole.USER, text=MARKET_UPDATE_REQUEST))

    response_text = generate_response(
        [{"role": "user", "content": MARKET_UPDATE_PROMPT}],
        MODE_CONFIGS[AnalysisMode.STANDARD],
    )
    reply = ChatMessage(role=MessageRole.MODEL, text=response_text)

    if not _append_reply(transcript, reply, generation):
        return None
    return reply


def new_chat(transcript: Transcript) -> None:
    transcript.new_chat()


if __name__ == "__main__":
    # Quick local sanity check without going through Streamlit
    session = Transcript()
    answer = send_message(session, "How did the Nifty 50 do this week?")
    print("[DEBUG] Reply:\n", answer.text if answer else None)
