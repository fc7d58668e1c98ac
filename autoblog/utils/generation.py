"""
Structured generation client for autoblog.

Wraps the OpenAI chat API in JSON mode. The service is optional: a missing
key, an API failure or an unusable response all yield ``None`` and callers
fall back to deterministic logic.
"""
import json
import logging
from typing import Any, Dict, Optional

import backoff
import openai

from autoblog.config import config as default_config

# Configure logging
logger = logging.getLogger(__name__)

RETRYABLE = (openai.RateLimitError, openai.APIConnectionError, openai.APITimeoutError)


class StructuredGenerator:
    """
    Requests JSON objects from a chat model.
    """
    def __init__(self, config=None, client=None):
        """
        Initialize the generator.

        Args:
            config: Config instance (defaults to the global configuration)
            client: Pre-built AsyncOpenAI client, mainly for tests
        """
        self.config = config or default_config
        self.api_key = self.config.get('openai.api_key') or ''
        self.model = self.config.get('openai.model', 'gpt-4.1-mini')
        self.temperature = float(self.config.get('openai.temperature', 0.2))
        self._client = client

    @property
    def available(self) -> bool:
        return bool(self._client is not None or self.api_key)

    @property
    def client(self):
        if self._client is None:
            self._client = openai.AsyncOpenAI(
                api_key=self.api_key,
                timeout=float(self.config.get('openai.timeout_seconds', 60)),
            )
        return self._client

    @backoff.on_exception(backoff.expo, RETRYABLE, max_tries=3)
    async def _complete(self, system_prompt: str, user_prompt: str):
        return await self.client.chat.completions.create(
            model=self.model,
            temperature=self.temperature,
            response_format={'type': 'json_object'},
            messages=[
                {'role': 'system', 'content': system_prompt},
                {'role': 'user', 'content': user_prompt},
            ],
        )

    async def generate(self, system_prompt: str, user_prompt: str) -> Optional[Dict[str, Any]]:
        """
        Ask the model for a JSON object.

        Args:
            system_prompt: Instructions for the model
            user_prompt: The request itself

        Returns:
            Parsed JSON object, or None if no credential is configured or the
            call did not produce a usable object
        """
        if not self.available:
            return None

        try:
            response = await self._complete(system_prompt, user_prompt)
        except openai.OpenAIError as e:
            logger.warning(f"Structured generation failed: {e}")
            return None

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            logger.warning(f"Structured generation returned no choices: {e}")
            return None

        if not content or not isinstance(content, str):
            logger.warning("Structured generation response missing content")
            return None

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(f"Structured generation returned invalid JSON: {e}")
            return None

        if not isinstance(payload, dict):
            logger.warning(f"Structured generation returned {type(payload).__name__}, expected object")
            return None

        return payload
