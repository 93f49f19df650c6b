"""Claude API client used as a generation collaborator."""

import os
import logging
from typing import Dict, List, Optional
from anthropic import AsyncAnthropic, APIConnectionError, APIError, RateLimitError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.errors import GenerationError
from .base import build_prompt

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class ClaudeClient:
    """Client for the Claude API with streaming support for long outputs."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 8000,
    ):
        """Initialize Claude client with async support."""
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable or api_key parameter is required")

        self.client = AsyncAnthropic(api_key=self.api_key)
        self.model = model
        self.max_tokens = max_tokens
        # Long outputs must stream to stay under the request timeout
        self.use_streaming = max_tokens > 10000

    # Only transport trouble is retried; bad requests fail straight away
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=10),
        retry=retry_if_exception_type((APIConnectionError, RateLimitError)),
        reraise=True,
    )
    async def _make_request(self, messages: List[Dict[str, str]]) -> str:
        """Make a request to Claude API with retry logic and streaming support."""
        if self.use_streaming:
            return await self._make_streaming_request(messages)

        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=messages,
            timeout=600.0,
        )
        return "".join(block.text for block in response.content if hasattr(block, "text"))

    async def _make_streaming_request(self, messages: List[Dict[str, str]]) -> str:
        """Make a streaming request to Claude API for long operations."""
        full_response = []

        async with self.client.messages.stream(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=messages,
        ) as stream:
            async for text in stream.text_stream:
                full_response.append(text)

        return ''.join(full_response)

    async def generate(
        self,
        prompt: str,
        context: Optional[str] = None,
        memory: Optional[Dict[str, str]] = None,
    ) -> str:
        """Generate text for one task marker."""
        messages = [
            {
                "role": "user",
                "content": build_prompt(prompt, context, memory),
            }
        ]

        try:
            text = await self._make_request(messages)
        except APIError as e:
            logger.error(f"API request failed: {e}")
            raise GenerationError(f"Claude API request failed: {e}", diagnostics=repr(e)) from e

        return text.strip()
