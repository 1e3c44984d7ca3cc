import json
import os

from typing import List, Optional, Tuple

from pydantic import BaseModel, ValidationError

from ..errors import ConfigIOError


class HistoryEntry(BaseModel):
    query: str
    response: str


def _trailing_words(text: str, max_words: int) -> str:
    words = text.split()
    if len(words) <= max_words:
        return text.strip()
    return " ".join(words[-max_words:])


class History:
    """
    The most recent queries and the output of the commands they produced.

    Only the newest `max_entries` entries are kept, oldest evicted first, and
    every response is cut down to its last `max_words` words before it is stored.
    """

    def __init__(self, max_entries: int = 8, max_words: int = 160):
        if max_entries <= 0:
            raise ValueError("max_entries must be a positive integer.")
        if max_words <= 0:
            raise ValueError("max_words must be a positive integer.")
        self.max_entries = max_entries
        self.max_words = max_words
        self._entries: List[HistoryEntry] = []

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, query: str, response: str):
        self._entries.append(
            HistoryEntry(query=query, response=_trailing_words(response, self.max_words))
        )
        if len(self._entries) > self.max_entries:
            del self._entries[: len(self._entries) - self.max_entries]

    def context(self) -> str:
        """Renders the entries oldest first, ready to be dropped into a prompt."""
        return "\n\n".join(
            f"User query: {entry.query}\nPrior output: {entry.response}"
            for entry in self._entries
        )


class SessionStore:
    """Keeps a `History` in a JSON file between invocations.

    The file is rewritten in full on every save; there is no locking, so the
    last invocation to save wins.
    """

    def __init__(self, path: str):
        self.path = path

    def load(self, max_entries: int = 8, max_words: int = 160) -> History:
        history = History(max_entries=max_entries, max_words=max_words)
        for entry in self._read() or []:
            history.add(entry.query, entry.response)
        return history

    def save(self, history: History):
        try:
            os.makedirs(os.path.dirname(self.path), exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as session_file:
                json.dump([e.model_dump() for e in history.entries], session_file, indent=2)
        except OSError as e:
            raise ConfigIOError(f"failed to write {self.path}: {e}") from e

    def _read(self) -> Optional[List[HistoryEntry]]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as session_file:
                data = json.load(session_file)
        except json.JSONDecodeError:
            return None
        except OSError as e:
            raise ConfigIOError(f"failed to read {self.path}: {e}") from e

        if not isinstance(data, list):
            return None
        try:
            return [HistoryEntry.model_validate(item) for item in data]
        except ValidationError:
            return None
