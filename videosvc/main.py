import logging
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from videosvc.api.videos import get_data_manager, get_store, router as video_router
from videosvc.core.config import settings
from videosvc.core.errors import VideoServiceError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Video Service API", version="0.1.0")

cors_origins = ["http://localhost:3000"]
if settings.allowed_origins:
    cors_origins.extend([origin.strip() for origin in settings.allowed_origins.split(",")])

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(video_router)


@app.exception_handler(VideoServiceError)
async def video_service_error_handler(request: Request, exc: VideoServiceError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.on_event("startup")
async def startup_event():
    """Initialize storage backends on startup."""
    logger.info("Starting application startup sequence...")
    logger.info(f"Store backend: {settings.store_backend}, data backend: {settings.data_backend}")
    logger.info(f"Data URLs rooted at {settings.api_base_url}")
    get_store()
    get_data_manager()
    logger.info("Application startup sequence completed - server ready to accept requests")


@app.get("/health")
async def health():
    return {"status": "ok"}


def run():
    """Console entry point: serve the API with uvicorn."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
