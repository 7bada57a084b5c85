from __future__ import annotations

import os

from dotenv import load_dotenv


# Environment setup
#
# Loads a local .env (if any) before reading the settings below.
# OPENAI_API_KEY is required; everything else has a default.

load_dotenv()


DEFAULT_CHAT_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
DEFAULT_DEEP_MODEL = os.getenv("OPENAI_DEEP_MODEL", "o4-mini")
DEFAULT_PORTFOLIO_MODEL = os.getenv("OPENAI_PORTFOLIO_MODEL", "gpt-4o")
DEFAULT_TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "120"))

# How many prior chat turns are sent along with a new query
CHAT_HISTORY_WINDOW = 5


def require_api_key() -> str:
    """Return the OpenAI API key, failing hard if it is not configured."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError("Missing OPENAI_API_KEY environment variable")
    return api_key
