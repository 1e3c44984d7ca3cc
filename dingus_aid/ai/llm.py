from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aisuite
import openai
from aisuite.provider import LLMError
from pydantic import BaseModel, ValidationError

from ..errors import MalformedResponseError, UpstreamError


class CompletionMessage(BaseModel):
    content: Optional[str] = None


class CompletionChoice(BaseModel):
    message: CompletionMessage


class CompletionUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0


class ChatCompletionPayload(BaseModel):
    """The part of a chat completion response body we rely on."""

    choices: List[CompletionChoice]
    usage: Optional[CompletionUsage] = None


@dataclass
class LLMCompletionResponse:
    """The first choice of a completion plus the token usage reported for it."""

    content: str
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @classmethod
    def from_payload(cls, payload: Any) -> "LLMCompletionResponse":
        """Accepts a response body as a dict or as the objects aisuite/openai return."""
        try:
            parsed = ChatCompletionPayload.model_validate(payload, from_attributes=True)
        except ValidationError as e:
            raise MalformedResponseError(f"no valid response from OpenAI API: {e}") from e

        if not parsed.choices or parsed.choices[0].message.content is None:
            raise MalformedResponseError("no valid response from OpenAI API")

        usage = parsed.usage or CompletionUsage()
        return cls(
            content=parsed.choices[0].message.content,
            prompt_tokens=usage.prompt_tokens,
            completion_tokens=usage.completion_tokens,
        )


def _find_status_error(error: BaseException) -> Optional[openai.APIStatusError]:
    seen = set()
    while error is not None and id(error) not in seen:
        if isinstance(error, openai.APIStatusError):
            return error
        seen.add(id(error))
        error = error.__cause__ or error.__context__
    return None


class LLMClient:
    """
    A wrapper for the LLM client to abstract away the specific provider library.
    This allows for easier swapping of LLM providers in the future.
    """

    def __init__(self, provider_configs: Dict):
        """
        Initializes the LLM client.

        Args:
            provider_configs: A dictionary containing configuration for the LLM provider.
        """
        self.client = aisuite.Client(provider_configs)

    @staticmethod
    def format_system_message(content: str) -> Dict:
        return {"role": "system", "content": content}

    @staticmethod
    def format_user_message(content: str) -> Dict:
        return {"role": "user", "content": content}

    def completion(self, model: str, messages: List[Dict], **kwargs) -> LLMCompletionResponse:
        """
        Sends a single chat completion request. There is no retry: a non-success
        status is raised as `UpstreamError` with the response body attached.
        """
        try:
            response = self.client.chat.completions.create(
                model=model, messages=messages, **kwargs
            )
        except openai.APIStatusError as e:
            raise UpstreamError(e.status_code, e.response.text) from e
        except LLMError as e:
            # aisuite wraps provider failures; recover the HTTP status if there is one.
            status_error = _find_status_error(e)
            if status_error is None:
                raise
            raise UpstreamError(status_error.status_code, status_error.response.text) from e

        return LLMCompletionResponse.from_payload(response)
