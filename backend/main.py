"""
Aether Intel - Competitor Intelligence Backend

FastAPI service that:
1. Stores competitors and their social accounts (SQLAlchemy)
2. Scrapes competitor websites and social profiles (httpx)
3. Analyzes the scraped content with Google Gemini and stores insights
4. Tracks the user's own brand sentiment from YouTube and Reddit comments

Run:
    uvicorn main:app --reload --port 8000
"""
import os
import logging

# Configure logging early; handlers are installed below once env is loaded
logger = logging.getLogger(__name__)


# ==============================================================================
# ENVIRONMENT LOADING
# ==============================================================================
def _load_env():
    """Load .env from the working directory (existing variables win)."""
    from dotenv import load_dotenv

    loaded = load_dotenv(override=False)
    if loaded:
        logger.info("[ENV] Loaded environment variables from .env")
    return loaded


_load_env()
# ==============================================================================

from contextlib import asynccontextmanager  # noqa: E402

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from slowapi import _rate_limit_exceeded_handler  # noqa: E402
from slowapi.errors import RateLimitExceeded  # noqa: E402
from starlette.middleware.gzip import GZipMiddleware  # noqa: E402

from constants import __version__  # noqa: E402
from database import DATABASE_URL, init_db  # noqa: E402
from errors import ScanError  # noqa: E402
from middleware import (  # noqa: E402
    CorrelationIdFilter,
    CorrelationIdMiddleware,
    MetricsMiddleware,
    SecurityHeadersMiddleware,
)
from rate_limit import limiter  # noqa: E402
from routers import (  # noqa: E402
    competitors as competitors_router,
    health as health_router,
    insights as insights_router,
    scan as scan_router,
    social_accounts as social_accounts_router,
    user_sentiment as user_sentiment_router,
)


# ==============================================================================
# LOGGING
# ==============================================================================
def _configure_logging():
    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter())

    if os.getenv("JSON_LOGGING", "false").lower() == "true":
        from pythonjsonlogger import jsonlogger

        handler.setFormatter(jsonlogger.JsonFormatter(
            '%(asctime)s %(name)s %(levelname)s %(correlation_id)s %(message)s',
            rename_fields={"asctime": "timestamp", "levelname": "level"}
        ))
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"
        ))

    logging.root.handlers = [handler]
    logging.root.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())


_configure_logging()
logger.info(f"[ENV] Database URL: {DATABASE_URL.split('@')[-1]}")


# ============== FastAPI App ==============

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Aether Intel Backend v{__version__} starting...")
    logger.info("=" * 60)

    if not os.getenv("SECRET_KEY"):
        logger.error("ERROR: Missing required environment variable: SECRET_KEY")
        raise ValueError("Missing required env vars: SECRET_KEY")

    optional_features = {
        "GEMINI_API_KEY": "Content analysis (competitor scans, brand sentiment)",
        "YOUTUBE_API_KEY": "YouTube comments for brand sentiment",
    }
    logger.info("Optional Features:")
    for env_var, feature in optional_features.items():
        if os.getenv(env_var):
            logger.info(f"[OK] {feature} - ENABLED")
        else:
            logger.warning(f"[!] {feature} - DISABLED (set {env_var} to enable)")

    init_db()
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("Aether Intel Backend shutting down")


app = FastAPI(
    title="Aether Intel API",
    description="Competitor scraping, AI insight generation and brand sentiment",
    version=__version__,
    lifespan=lifespan
)


# ============== Error handling ==============

@app.exception_handler(ScanError)
async def scan_error_handler(request: Request, exc: ScanError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else (first.get("msg") or "Invalid request")
    return JSONResponse(status_code=400, content={"error": message, "code": "VALIDATION_ERROR"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "INTERNAL_SERVER_ERROR"},
    )


# ============== Middleware ==============

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)


# ============== Routers ==============

app.include_router(health_router.router)  # Health, readiness, version, metrics
app.include_router(competitors_router.router)  # Competitors CRUD
app.include_router(social_accounts_router.router)  # Social accounts CRUD
app.include_router(insights_router.router)  # Insights list / manual entry
app.include_router(scan_router.router)  # Competitor scrape + analysis
app.include_router(user_sentiment_router.router)  # Brand sentiment


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "false").lower() == "true",
    )
