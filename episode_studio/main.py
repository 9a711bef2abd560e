"""
Episode Studio - Main Application

Generates serialized story episodes, has the characters themselves review
each draft, revises once when they are unhappy and delivers the result.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import uvicorn
from contextlib import asynccontextmanager
from pathlib import Path
import hmac
import logging
import sys
from datetime import datetime

from episode_studio.config import get_settings
from episode_studio.services.logger import init_logger
from episode_studio.services.llm_router import init_llm_router
from episode_studio.api.routes import router, set_workflow, get_workflow
from episode_studio.services.notification import NotificationDispatcher
from episode_studio.workflows import build_episode_workflow

# Configure logging to both file and console
log_dir = Path("logs")
log_dir.mkdir(exist_ok=True)
log_file = log_dir / f"episode_studio_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

file_formatter = logging.Formatter(
    '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
console_formatter = logging.Formatter('%(message)s')

# File handler (detailed logs)
file_handler = logging.FileHandler(log_file, encoding='utf-8')
file_handler.setLevel(logging.DEBUG)
file_handler.setFormatter(file_formatter)

# Console handler (user-friendly output)
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(get_settings().log_level.upper())
console_handler.setFormatter(console_formatter)

logging.basicConfig(
    level=logging.DEBUG,
    handlers=[file_handler, console_handler]
)

# LiteLLM is chatty at DEBUG
logging.getLogger("LiteLLM").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)
logger.info(f"📝 Logging to: {log_file}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifecycle management for the application.

    Builds the workflow on startup and releases it on shutdown.
    """
    settings = get_settings()
    logger.info("🎬 Initializing Episode Studio...")

    init_logger(settings=settings)

    debug_flags = []
    if settings.debug_agent_io:
        debug_flags.append("Agent I/O")
    if settings.debug_api_calls:
        debug_flags.append("API Calls")
    if debug_flags:
        logger.info(f"🐛 Debug logging enabled: {', '.join(debug_flags)}")
        logger.info(f"📊 Debug logs: {settings.debug_log_dir}/")

    llm_router = init_llm_router(settings.models_config_path)
    logger.info("📋 LLM Router initialized")
    llm_router.log_configuration()

    if not settings.bearer_key:
        logger.warning("⚠️  BEARER_KEY is not set, /api/* is unauthenticated")
    if not settings.directory_configured:
        logger.warning("⚠️  Recipient directory not configured, deliveries will be reported as failed")
    if not settings.line_channel_access_token and not settings.email_api_key:
        logger.warning("⚠️  No notification credentials configured")

    dispatcher = NotificationDispatcher.from_settings(settings)
    set_workflow(build_episode_workflow(dispatcher=dispatcher, settings=settings))
    logger.info(f"🎬 Episode Studio ready on port {settings.port}!")

    yield

    logger.info("👋 Shutting down Episode Studio...")
    set_workflow(None)
    dispatcher.close()


app = FastAPI(
    title="Episode Studio",
    description="""
    Character-reviewed episode generation.

    - Composes a writing brief from story, episode and cast
    - Drafts the episode
    - Every character scores the draft from their own point of view
    - One revision pass when any character scores it below 4.0
    - Delivers the result by push message or email
    """,
    version="1.0.0",
    lifespan=lifespan
)


@app.middleware("http")
async def bearer_auth(request: Request, call_next):
    """Require `Authorization: Bearer <BEARER_KEY>` on /api/* routes."""
    bearer_key = get_settings().bearer_key
    if bearer_key and request.url.path.startswith("/api/"):
        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return JSONResponse(status_code=401, content={"detail": "Unauthorized"})
        if not hmac.compare_digest(auth_header[len("Bearer "):].encode(), bearer_key.encode()):
            return JSONResponse(status_code=401, content={"detail": "Invalid token"})
    return await call_next(request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    error_details = []
    for error in errors:
        input_val = error.get('input', 'N/A')
        if isinstance(input_val, str) and len(input_val) > 100:
            input_val = input_val[:100] + "..."
        error_details.append(f"{error['loc']}: {error['msg']} (input: {input_val})")

    logger.error(f"❌ Validation Error on {request.url.path}: " + " | ".join(error_details))
    return JSONResponse(
        status_code=422,
        content={"detail": [{k: v for k, v in e.items() if k != "ctx"} for e in errors]}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch all unhandled exceptions (model backend failures included).
    Logs the error and returns an error id to look up in the server logs.
    """
    import traceback
    error_id = datetime.now().strftime('%Y%m%d_%H%M%S_%f')

    logger.error(f"❌ UNHANDLED EXCEPTION [{error_id}]")
    logger.error(f"   Path: {request.url.path}")
    logger.error(f"   Error: {type(exc).__name__}: {exc}")
    logger.error(f"   Traceback:\n{traceback.format_exc()}")

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please try again."
        }
    )


app.include_router(router)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": get_settings().app_name,
        "workflow_initialized": get_workflow() is not None
    }


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "episode_studio.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower()
    )
