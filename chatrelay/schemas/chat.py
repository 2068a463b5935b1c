from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

MAX_MESSAGE_LENGTH = 4000


class ChatRequest(BaseModel):
    message: str = Field(..., description="User message, trimmed, 1-4000 chars")

    @field_validator("message")
    @classmethod
    def trim_message(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise PydanticCustomError("message_required", "Message is required")
        if len(value) > MAX_MESSAGE_LENGTH:
            raise PydanticCustomError("message_too_long", "Message is too long")
        return value


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    request_id: str = Field(..., alias="requestId")
    answer: str = ""


class ErrorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    request_id: str = Field(..., alias="requestId")
    error: str


class HealthResponse(BaseModel):
    ok: bool = True
