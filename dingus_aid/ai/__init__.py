"""
The `ai` package turns a query plus the session history into a suggested shell
command: prompt construction, the LLM client and the suggestion flow.
"""

from .agent import Agent
from .history import History, HistoryEntry, SessionStore
from .prompt import build_prompt
from .assistants.suggest import Suggestion, do, suggest


__all__ = [
    "Agent",
    "History",
    "HistoryEntry",
    "SessionStore",
    "Suggestion",
    "build_prompt",
    "do",
    "suggest",
]
