from fastapi import APIRouter

from chatrelay.schemas.chat import HealthResponse

health_router = APIRouter()


@health_router.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(ok=True)
