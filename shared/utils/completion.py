"""
Chat-completion client for the OpenRouter-compatible endpoint.

SDK retries are disabled: a failed call surfaces as one of the typed
pipeline errors and the caller decides what to do with it.
"""

from typing import Optional

from openai import (APIConnectionError, APIStatusError, APITimeoutError,
                    AsyncOpenAI)

from shared.app_logging.logger import get_logger
from shared.config.settings import CompletionSettings
from shared.utils.errors import (CompletionServiceError,
                                 CompletionTimeoutError, ConfigurationError,
                                 NetworkError, StructuralError)

logger = get_logger("shared.completion")

SYSTEM_PROMPT = (
    "You are a JSON API. You only respond with valid JSON objects, "
    "never markdown or explanations."
)


class CompletionClient:
    def __init__(self, settings: CompletionSettings, client=None):
        self.settings = settings
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self.settings.api_key) or self._client is not None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.settings.api_key:
                raise ConfigurationError("OPENROUTER_API_KEY is not set")
            headers = {"X-Title": self.settings.app_title}
            if self.settings.referer:
                headers["HTTP-Referer"] = self.settings.referer
            self._client = AsyncOpenAI(
                api_key=self.settings.api_key,
                base_url=self.settings.base_url,
                timeout=self.settings.timeout,
                max_retries=0,
                default_headers=headers,
            )
        return self._client

    async def complete(self, prompt: str, max_tokens: Optional[int] = None) -> str:
        """Send ``prompt`` and return the first choice's message text."""
        client = self._get_client()
        logger.debug(f"Requesting completion ({len(prompt)} prompt chars)")
        try:
            response = await client.chat.completions.create(
                model=self.settings.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=max_tokens or self.settings.max_tokens,
                temperature=self.settings.temperature,
            )
        except APITimeoutError as e:
            raise CompletionTimeoutError(
                f"Completion timed out after {self.settings.timeout:g}s"
            ) from e
        except APIStatusError as e:
            raise CompletionServiceError(
                f"Completion service error: {e.status_code} - {e.response.text}",
                status_code=e.status_code,
            ) from e
        except APIConnectionError as e:
            raise NetworkError(f"Completion request failed: {e}") from e

        choices = getattr(response, "choices", None)
        message = getattr(choices[0], "message", None) if choices else None
        if message is None:
            logger.error(f"Unexpected completion response structure: {response!r}"[:500])
            raise StructuralError("Invalid response structure from completion service")

        return message.content or ""
