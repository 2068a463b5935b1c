import uuid
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from chatrelay.utils.errors import ClientError, RelayError

REQUEST_ID_HEADER = "x-request-id"
BODY_TOO_LARGE = "Request body too large"


def resolve_request_id(incoming: str | None) -> str:
    """Echo a non-empty caller id, otherwise mint a new one."""
    if incoming and incoming.strip():
        return incoming.strip()
    return str(uuid.uuid4())


def get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or resolve_request_id(
        request.headers.get(REQUEST_ID_HEADER)
    )


def error_response(request_id: str, status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"requestId": request_id, "error": message},
        headers={REQUEST_ID_HEADER: request_id},
    )


async def request_id_middleware(request: Request, call_next):
    """Attach a correlation id to the request and to every response."""
    request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
    request.state.request_id = request_id

    try:
        response = await call_next(request)
    except RelayError as e:
        return error_response(request_id, e.status_code, e.message)
    except Exception as e:
        logger.bind(request_id=request_id).exception(f"Unhandled error: {e}")
        return error_response(request_id, 500, str(e) or "Internal server error")

    response.headers[REQUEST_ID_HEADER] = request_id
    return response


class BodySizeLimitMiddleware:
    """Reject request bodies larger than `max_bytes` with 413.

    A declared Content-Length is checked up front; bodies without one
    (chunked) are counted as they are received.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > self.max_bytes:
            error = ClientError(BODY_TOO_LARGE, status_code=413)
            response = error_response(get_request_id(request), error.status_code, error.message)
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    # Raised while the route reads the body
                    raise HTTPException(status_code=413, detail=BODY_TOO_LARGE)
            return message

        await self.app(scope, limited_receive, send)
