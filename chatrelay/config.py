from typing import Optional
from pydantic_settings import BaseSettings

from chatrelay.services.prompts import SYSTEM_PROMPT


class Settings(BaseSettings):
    # Model provider
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.2
    system_prompt: str = SYSTEM_PROMPT

    # Server
    host: str = "0.0.0.0"
    port: int = 8787
    cors_origin: Optional[str] = None
    max_body_bytes: int = 1024 * 1024  # 1mb JSON body limit
    log_level: str = "info"

    # Client
    api_url: str = "http://localhost:8787/api/chat"
    request_timeout: float = 180
    speech_model: str = "whisper-1"
    speech_language: str = "ru"

    class Config:
        # Later files win, so ./.env overrides ../.env
        env_file = ("../.env", ".env")
        extra = "ignore"


settings = Settings()
