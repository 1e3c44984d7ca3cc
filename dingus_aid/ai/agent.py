from typing import Dict, List

from ..config import Settings
from .llm import LLMClient, LLMCompletionResponse


class Agent:
    """Sends one system + user exchange to the configured model."""

    def __init__(self, settings: Settings, system_prompt: str = ""):
        self.settings = settings
        self.llm = LLMClient(self.settings.provider_configs)
        self._messages: List[Dict] = []
        if system_prompt:
            self._messages.append(LLMClient.format_system_message(system_prompt))

    def run(self, user_task: str, **kwargs) -> LLMCompletionResponse:
        self._messages.append(LLMClient.format_user_message(user_task))
        return self.llm.completion(
            model=self.settings.model,
            messages=self._messages[:],  # Pass a copy of _messages
            max_tokens=self.settings.max_tokens,
            **kwargs
        )
