import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from app.core.database import Base, engine
from app.core.config import settings
from app.core.exceptions import RelayError, UnauthenticatedError
from app import models  # noqa: F401  registers tables on Base.metadata
from app.api.v1.main import api_router
from app.api.v1.endpoints import email

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create all database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "X-Client-Info", "ApiKey", "Content-Type"],
)

app.include_router(api_router, prefix=settings.API_V1_STR)
app.include_router(email.router, tags=["email"])


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(UnauthenticatedError)
async def unauthenticated_error_handler(request: Request, exc: UnauthenticatedError):
    return JSONResponse(status_code=401, content={"detail": str(exc)})


@app.get("/health")
async def health():
    return {"status": "ok", "message": f"{settings.PROJECT_NAME} API is running"}


@app.on_event("startup")
async def on_startup():
    logger.info("[Startup] Image provider: %s (storage backend: %s)", settings.IMAGE_PROVIDER, settings.STORAGE_BACKEND)
    if not settings.GEMINI_API_KEY:
        logger.warning("[Startup] GEMINI_API_KEY is not set; image generation requests will fail")
    logger.info("[Startup] Email provider: %s", settings.EMAIL_PROVIDER)


if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
