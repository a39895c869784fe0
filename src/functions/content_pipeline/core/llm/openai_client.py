"""OpenAI chat-completions client that turns shaped content into narration scripts."""

from __future__ import annotations

import logging
from typing import Any, Optional

from openai import APIConnectionError, APIError, APITimeoutError, OpenAI

from ..contracts.errors import CapabilityError, CapabilityUnavailableError
from .prompts import PromptMessages

logger = logging.getLogger(__name__)

CAPABILITY = "text_generation"


class OpenAIScriptGenerator:
    """Generates one narration script per call.

    Failures are raised as CapabilityError (or the builtin TimeoutError /
    ConnectionError) so the caller's retry loop decides whether to try again.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: str = "gpt-4o",
        timeout_seconds: float = 30.0,
        client: Optional[Any] = None,
    ) -> None:
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._api_key = api_key
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise CapabilityUnavailableError("OPENAI_API_KEY is not configured")
            # Retries are handled by the pipeline's retry policy
            self._client = OpenAI(api_key=self._api_key, timeout=self.timeout_seconds, max_retries=0)
        return self._client

    def generate(self, messages: PromptMessages) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": messages.system},
                    {"role": "user", "content": messages.user},
                ],
                max_tokens=messages.max_tokens,
                temperature=messages.temperature,
                timeout=self.timeout_seconds,
            )
        except APITimeoutError as exc:
            raise TimeoutError(f"{self.model} request timed out after {self.timeout_seconds}s") from exc
        except APIConnectionError as exc:
            raise ConnectionError(f"{self.model} connection failed: {exc}") from exc
        except APIError as exc:
            status = getattr(exc, "status_code", None)
            raise CapabilityError(CAPABILITY, f"{self.model} API error: {exc}", status_code=status) from exc

        choices = getattr(response, "choices", None) or []
        if not choices:
            raise CapabilityError(CAPABILITY, f"{self.model} returned empty choices")

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str):
            raise CapabilityError(CAPABILITY, f"{self.model} returned invalid message structure")

        script = content.strip()
        if not script:
            raise CapabilityError(CAPABILITY, f"No script generated from {self.model}")

        logger.debug("Generated script of %d chars with %s", len(script), self.model)
        return script
