"""
Async OpenAI client with strict JSON parsing.
"""
import json
import logging
from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError

from ..config import get_config
from ..errors import MalformedResponseError, MissingCredentialError, UpstreamCallError


logger = logging.getLogger(__name__)


class LLMClient:
    """
    Thin async wrapper over the OpenAI SDK.
    Transport failures surface as UpstreamCallError, unparseable JSON as
    MalformedResponseError.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[Any] = None,
    ):
        config = get_config()
        self.api_key = config.openai.api_key if api_key is None else api_key
        self.model = model or config.openai.drafting_model
        self.max_tokens = config.openai.max_tokens
        self.temperature = config.openai.temperature

        if client is not None:
            self.client = client
        elif not self.api_key:
            logger.warning("No OpenAI API key configured")
            self.client = None
        else:
            self.client = AsyncOpenAI(api_key=self.api_key)

    def is_available(self) -> bool:
        """Check if the LLM client is properly configured."""
        return self.client is not None

    def _require_client(self) -> Any:
        if not self.client:
            raise MissingCredentialError("OpenAI API key is missing. Please configure it in settings.")
        return self.client

    async def _call(
        self,
        messages: list[dict[str, Any]],
        response_format: Optional[dict] = None,
        model: Optional[str] = None,
    ) -> str:
        """Make a chat completion call and return the response text."""
        client = self._require_client()

        kwargs = {
            "model": model or self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

        if response_format:
            kwargs["response_format"] = response_format

        try:
            response = await client.chat.completions.create(**kwargs)
        except OpenAIError as e:
            raise UpstreamCallError("OpenAI request failed", cause=e) from e

        if not response.choices:
            raise MalformedResponseError("OpenAI returned no choices")
        return response.choices[0].message.content or ""

    async def call_raw(self, system_prompt: str, user_prompt: str) -> str:
        """Make a raw API call without JSON parsing."""
        return await self._call([
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ])

    async def call_json(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
        """Make an API call in JSON mode and return the parsed object."""
        response_text = await self._call(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
        )
        if not response_text.strip():
            raise MalformedResponseError("OpenAI did not return a JSON response")

        try:
            data = json.loads(response_text)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON from LLM: {e}")
            raise MalformedResponseError("OpenAI returned invalid JSON", cause=e) from e

        if not isinstance(data, dict):
            raise MalformedResponseError("OpenAI JSON response is not an object")
        return data

    async def call_with_image(
        self,
        prompt: str,
        image_data_url: str,
        model: Optional[str] = None,
    ) -> str:
        """Send a prompt together with one image (as a data: URL)."""
        return await self._call(
            [{
                "role": "user",
                "content": [
                    {"type": "image_url", "image_url": {"url": image_data_url}},
                    {"type": "text", "text": prompt},
                ],
            }],
            model=model,
        )

    async def web_search(
        self,
        prompt: str,
        model: Optional[str] = None,
    ) -> tuple[str, list[tuple[str, Optional[str]]]]:
        """
        Answer a prompt with the web search tool.

        Returns:
            Tuple of (answer_text, [(url, title), ...]) from url citations
        """
        client = self._require_client()

        try:
            response = await client.responses.create(
                model=model or self.model,
                tools=[{"type": "web_search_preview"}],
                input=prompt,
            )
        except OpenAIError as e:
            raise UpstreamCallError("OpenAI web search failed", cause=e) from e

        citations = []
        for item in getattr(response, "output", None) or []:
            if getattr(item, "type", None) != "message":
                continue
            for content in getattr(item, "content", None) or []:
                for annotation in getattr(content, "annotations", None) or []:
                    if getattr(annotation, "type", None) == "url_citation":
                        citations.append((annotation.url, getattr(annotation, "title", None)))

        return getattr(response, "output_text", "") or "", citations
