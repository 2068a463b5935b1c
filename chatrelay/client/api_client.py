from typing import Optional
import requests
from loguru import logger
from pydantic import BaseModel

from chatrelay.config import settings


class ChatApiError(Exception):
    """Any chat round-trip failure, reduced to a readable message."""


class ChatReply(BaseModel):
    request_id: Optional[str] = None
    answer: str


class ChatApiClient:
    def __init__(
        self,
        api_url: str = settings.api_url,
        timeout: float = settings.request_timeout,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def ask(self, message: str) -> ChatReply:
        """POST one message to the relay and return its answer."""
        try:
            response = self.session.post(
                self.api_url,
                json={"message": message},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise ChatApiError("Request timed out. Please try again.") from e
        except requests.exceptions.ConnectionError as e:
            raise ChatApiError("Connection failed. Is the server running?") from e
        except requests.exceptions.RequestException as e:
            raise ChatApiError(str(e) or "Request failed") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.ok:
            if isinstance(data, dict) and isinstance(data.get("error"), str):
                raise ChatApiError(data["error"])
            raise ChatApiError(f"Request failed with status {response.status_code}")

        if not isinstance(data, dict) or not isinstance(data.get("answer"), str):
            raise ChatApiError("Invalid response from server")

        logger.info(f"Chat reply received, request_id={data.get('requestId')}")
        return ChatReply(request_id=data.get("requestId"), answer=data["answer"])
