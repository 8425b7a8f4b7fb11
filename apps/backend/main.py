from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
from contextlib import asynccontextmanager
import os
import logging
import traceback

load_dotenv()

from app.config import Capabilities, get_env_presence
from app.applications import router as applications_router
from app.auth_routes import router as auth_router
from app.scrape import router as scrape_router
from app.rate_limit import limiter
from app.db_config import db_config
from metrics import metrics_app
from slowapi.errors import RateLimitExceeded
from slowapi import _rate_limit_exceeded_handler

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def is_dev_env() -> bool:
    return os.getenv("TRACKER_ENV", "production").lower() == "dev"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application lifecycle events."""
    tracker_env = os.getenv("TRACKER_ENV", "production").lower()
    if tracker_env == "dev":
        logger.info("[tracker] env: TRACKER_ENV=dev (detailed errors and X-Dev-User bypass enabled)")
    else:
        logger.info(f"[tracker] env: TRACKER_ENV={tracker_env}")

    if not db_config.is_db_enabled:
        logger.warning("[tracker] No database configured; /api/applications will return 503")

    yield


app = FastAPI(title="Internship Tracker API", version="0.1.0", lifespan=lifespan)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.middleware("http")
async def error_masking_middleware(request: Request, call_next):
    """Mask detailed errors in production; show full errors in dev."""
    try:
        return await call_next(request)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(e)}")
        if is_dev_env():
            logger.error(traceback.format_exc())
            return JSONResponse(
                status_code=500,
                content={
                    "status": "error",
                    "error": str(e),
                    "traceback": traceback.format_exc()
                }
            )
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "error": "An internal error occurred. Please try again later."
            }
        )


cors_origins = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(scrape_router)
app.include_router(auth_router)
app.include_router(applications_router)

app.mount("/metrics", metrics_app)


@app.get("/api/healthz")
async def healthz():
    return Capabilities.get_status()


@app.get("/api/capabilities")
async def capabilities():
    return Capabilities.get_capabilities()


@app.get("/api/config/env")
async def env_presence():
    """Which configuration variables are set (dev only, never values)."""
    if not is_dev_env():
        raise HTTPException(status_code=404, detail="Not found")
    return get_env_presence()
