from loguru import logger
from langchain_core.messages import SystemMessage, HumanMessage

from chatrelay.config import Settings
from chatrelay.utils.llm import ChatProvider


class ChatRelay:
    """Forwards one user turn to the model provider."""

    def __init__(self, provider: ChatProvider, settings: Settings):
        self.provider = provider
        self.model = settings.openai_model
        self.temperature = settings.openai_temperature
        self.system_prompt = settings.system_prompt

    def _build_prompt(self, message: str):
        return [
            SystemMessage(content=self.system_prompt),
            HumanMessage(content=message),
        ]

    async def answer(self, message: str, request_id: str) -> str:
        log = logger.bind(request_id=request_id)
        log.info(f"Relaying message ({len(message)} chars) to {self.model}")

        answer = await self.provider.complete(
            model=self.model,
            messages=self._build_prompt(message),
            temperature=self.temperature,
        )

        log.info(f"Provider answered with {len(answer or '')} chars")
        return answer or ""
