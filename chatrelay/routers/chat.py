from fastapi import APIRouter, Depends, Request
from loguru import logger

from chatrelay.schemas.chat import ChatRequest, ChatResponse, ErrorResponse
from chatrelay.services.relay import ChatRelay
from chatrelay.utils.errors import RelayError, ServerError
from chatrelay.utils.request_id import get_request_id

chat_router = APIRouter()


def get_relay(request: Request) -> ChatRelay:
    return request.app.state.relay


@chat_router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def chat(
    request: Request,
    chat_request: ChatRequest,
    relay: ChatRelay = Depends(get_relay),
):
    """Relay one message to the model provider and return its answer"""
    request_id = get_request_id(request)

    try:
        answer = await relay.answer(chat_request.message, request_id=request_id)
    except RelayError:
        raise
    except Exception as e:
        logger.bind(request_id=request_id).error(f"Provider call failed: {e}")
        raise ServerError(str(e) or "Internal server error") from e

    return ChatResponse(request_id=request_id, answer=answer)
