from abc import ABC, abstractmethod
from typing import List, Optional
from langchain_openai import ChatOpenAI
from langchain_core.messages import BaseMessage

from chatrelay.config import Settings
from chatrelay.utils.errors import ServerError


class ChatProvider(ABC):
    @abstractmethod
    async def complete(
        self, model: str, messages: List[BaseMessage], temperature: float
    ) -> str:
        pass


class OpenAIChatProvider(ChatProvider):
    """OpenAI-backed provider. A ChatOpenAI model is built per call, so a
    missing key only fails the request that needs it."""

    def __init__(self, settings: Settings):
        self.api_key = settings.openai_api_key
        self.base_url = settings.openai_base_url

    def _llm(self, model: str, temperature: float) -> ChatOpenAI:
        if not self.api_key:
            raise ServerError("OPENAI_API_KEY is not configured")

        return ChatOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            model=model,
            temperature=temperature,
        )

    async def complete(
        self, model: str, messages: List[BaseMessage], temperature: float
    ) -> str:
        llm = self._llm(model, temperature)
        response = await llm.ainvoke(messages)
        return extract_text(response.content)


def extract_text(content: Optional[str | list]) -> str:
    """Flatten message content into plain text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content

    # extract text from all content items
    text_parts = []
    for item in content:
        if isinstance(item, str):
            text_parts.append(item)
        elif isinstance(item, dict) and item.get("type") == "text":
            text_parts.append(item.get("text", ""))
    return "".join(text_parts)
