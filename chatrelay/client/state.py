from enum import Enum, auto
from typing import Optional
from pydantic import BaseModel


class Status(Enum):
    idle = auto()
    submitting = auto()
    succeeded = auto()
    failed = auto()


class ChatState(BaseModel):
    """UI state of the chat page.

    `detail` holds the answer when the status is `succeeded` and the error
    message when it is `failed`, so answer and error never coexist.
    """

    input: str = ""
    status: Status = Status.idle
    detail: Optional[str] = None
    is_listening: bool = False

    @property
    def is_loading(self) -> bool:
        return self.status is Status.submitting

    @property
    def answer(self) -> Optional[str]:
        return self.detail if self.status is Status.succeeded else None

    @property
    def error(self) -> Optional[str]:
        return self.detail if self.status is Status.failed else None

    def submitting(self) -> "ChatState":
        return self.model_copy(update={"status": Status.submitting, "detail": None})

    def succeeded(self, answer: str) -> "ChatState":
        return self.model_copy(update={"status": Status.succeeded, "detail": answer})

    def failed(self, message: str) -> "ChatState":
        return self.model_copy(update={"status": Status.failed, "detail": message})

    def cleared(self) -> "ChatState":
        """Drop a previous error, keep anything else."""
        if self.status is Status.failed:
            return self.model_copy(update={"status": Status.idle, "detail": None})
        return self
