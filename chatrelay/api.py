from fastapi import APIRouter

from chatrelay.routers.chat import chat_router
from chatrelay.routers.health import health_router


api_router = APIRouter(prefix="/api")


api_router.include_router(health_router, tags=["Health"])
api_router.include_router(chat_router, tags=["Chat"])
