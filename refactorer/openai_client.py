"""
OpenAI client wrapper for the refactorer CLI.

This module encapsulates interactions with OpenAI's Chat Completions
API.  It centralizes error handling, token estimation, and configuration
of API requests.  By abstracting the OpenAI library here, the batch
runner only sees a `complete(model, instruction, content)` capability
and can be exercised in tests with a deterministic stand-in.

Every SDK failure is translated into a `CompletionError` subclass.  The
SDK's own retry loop is switched off: a failed request is reported once
and the batch moves on to the next file.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import openai
import tiktoken

from .config import CompletionSettings
from .errors import (
    AuthenticationFailedError,
    CompletionError,
    MalformedResponseError,
    NetworkError,
    RateLimitedError,
)
from .prompt_builder import build_request, extract_changed_contents

logger = logging.getLogger(__name__)


class OpenAIClient:
    """Wrapper around the OpenAI API with token estimation and error mapping."""

    def __init__(
        self,
        api_key: str,
        settings: Optional[CompletionSettings] = None,
        base_url: Optional[str] = None,
        client: Any = None,
    ) -> None:
        if not api_key:
            raise ValueError("OPENAI_API_KEY is required but not provided.")
        self.api_key = api_key
        self.settings = settings or CompletionSettings()
        # One SDK client for the whole batch; it is safe to share across threads.
        self.client = client or openai.OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=self.settings.request_timeout,
            max_retries=0,
        )

    def estimate_tokens(self, text: str, model: str) -> int:
        """Estimate the number of tokens used by a text for the given model."""
        try:
            encoding = tiktoken.encoding_for_model(model)
        except KeyError:
            # Default to cl100k_base if model unknown
            encoding = tiktoken.get_encoding("cl100k_base")
        return len(encoding.encode(text))

    @staticmethod
    def _supports_temperature(model: str) -> bool:
        """Reasoning-first models generally don't accept temperature/top_p.
        Return False for those to avoid server-side errors."""
        m = (model or "").lower()
        if m.startswith(("o1", "o3", "o4", "gpt-5")) or "reasoning" in m:
            return False
        return True

    def _log_estimate(self, messages: List[Dict[str, str]], model: str) -> None:
        try:
            input_tokens = self.estimate_tokens("\n".join(m["content"] for m in messages), model)
        except Exception as exc:
            # Encodings are fetched lazily; an offline machine must still be able to run.
            logger.debug("Token estimation unavailable: %s", exc)
            return
        logger.info("Request to %s will use ~%s input tokens", model, input_tokens)

    @staticmethod
    def extract_output_text(response: Any) -> str:
        """Pull the assistant text out of a chat completion response."""
        choices = getattr(response, "choices", None) or []
        if not choices:
            raise MalformedResponseError("response contained no choices")
        message = getattr(choices[0], "message", None)
        text = getattr(message, "content", None)
        if not isinstance(text, str) or not text.strip():
            finish = getattr(choices[0], "finish_reason", None)
            raise MalformedResponseError(f"empty completion (finish_reason={finish})")
        return text

    def _request_kwargs(self, model: str, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"model": model, "messages": messages}
        if self._supports_temperature(model):
            kwargs["temperature"] = self.settings.temperature
        else:
            logger.debug("Model '%s' does not use temperature; sending request without it.", model)
        if self.settings.max_output_tokens:
            kwargs["max_completion_tokens"] = self.settings.max_output_tokens
        return kwargs

    def complete(self, model: str, instruction: str, content: str) -> str:
        """Rewrite `content` according to `instruction` and return the new file text.

        Raises a `CompletionError` subclass on authentication failure, rate
        limiting, network failure, or a reply that carries no usable file.
        The original content's trailing newline, if any, is preserved.
        """
        request = build_request(instruction, content, model)
        self._log_estimate(request.messages, model)
        kwargs = self._request_kwargs(request.model, request.messages)
        logger.debug("Final kwargs keys for chat.completions.create: %s", list(kwargs.keys()))

        try:
            response = self.client.chat.completions.create(**kwargs)
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            raise AuthenticationFailedError(str(exc)) from exc
        except openai.RateLimitError as exc:
            raise RateLimitedError(str(exc)) from exc
        except openai.APIConnectionError as exc:
            # Includes APITimeoutError.
            raise NetworkError(str(exc)) from exc
        except openai.APIError as exc:
            raise CompletionError(str(exc)) from exc

        output = self.extract_output_text(response)
        logger.debug(
            "API response summary: id=%s output_len=%s",
            getattr(response, "id", None),
            len(output),
        )
        text = extract_changed_contents(output)
        if content.endswith("\n") and not text.endswith("\n"):
            text += "\r\n" if content.endswith("\r\n") else "\n"
        return text
