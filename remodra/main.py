import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import all models to ensure they're registered with SQLAlchemy Base
from . import (
    models,  # noqa: F401
    models_achievement,  # noqa: F401
    models_invoice,  # noqa: F401
)
from .achievement_seeds import seed_achievements
from .config import ALLOWED_ORIGINS, SECURITY_HEADERS_ENABLED, SLOW_REQUEST_THRESHOLD
from .database import Base, check_database_connection, engine, session_scope
from .domain.agents import router as agents_router
from .domain.billing import router as billing_router
from .domain.clients import data_router as client_data_router
from .domain.clients import router as clients_router
from .domain.estimates import router as estimates_router
from .domain.invoices import router as invoices_router
from .domain.projects import router as projects_router
from .routes.achievements import router as achievements_router
from .routes.ai import router as ai_router
from .routes.attachments import router as attachments_router
from .routes.auth import router as auth_router
from .routes.events import router as events_router
from .routes.follow_ups import router as follow_ups_router
from .routes.materials import router as materials_router
from .routes.measurements import router as measurements_router
from .routes.messages import portal_router as client_portal_router
from .routes.messages import router as messages_router
from .routes.pricing import router as price_configurations_router
from .routes.pricing import services_router
from .routes.public import router as public_router
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def prepare_database():
    """Create missing tables and make sure the achievement catalogue exists"""
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
    except Exception as e:
        # Several workers can race on CREATE TABLE; the loser sees these errors
        if "already exists" not in str(e) and "duplicate key" not in str(e):
            logger.error(f"❌ Failed to create database tables: {e}")
            return

    try:
        with session_scope() as db:
            seed_achievements(db)
    except Exception as e:
        logger.error(f"❌ Failed to seed achievements: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Remodra API starting up")
    prepare_database()
    yield
    logger.info("Remodra API shutting down")


app = FastAPI(title="Remodra API", version="1.0.0", lifespan=lifespan)


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Field errors without the raw exception objects pydantic puts in ctx"""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_errors(exc)
    logger.warning(f"⚠️ Validation error on {request.method} {request.url.path}: {errors}")
    return JSONResponse(status_code=400, content={"detail": "Validation error", "errors": errors})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.middleware("http")
async def log_slow_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started
    if elapsed > SLOW_REQUEST_THRESHOLD:
        logger.warning(
            f"🐌 Slow request: {request.method} {request.url.path} took {elapsed:.2f}s ({response.status_code})"
        )
    return response


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(
        SecurityHeadersMiddleware, exclude_paths=["/api/health", "/docs", "/openapi.json"]
    )
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(auth_router)
app.include_router(clients_router)
app.include_router(client_data_router)
app.include_router(projects_router)
app.include_router(estimates_router)
app.include_router(invoices_router)
app.include_router(agents_router)
app.include_router(events_router)
app.include_router(materials_router)
app.include_router(attachments_router)
app.include_router(follow_ups_router)
app.include_router(measurements_router)
app.include_router(price_configurations_router)
app.include_router(services_router)
app.include_router(messages_router)
app.include_router(client_portal_router)
app.include_router(public_router)
app.include_router(ai_router)
app.include_router(achievements_router)
app.include_router(billing_router)


@app.get("/")
def root():
    return {"message": "Remodra API is running"}


@app.get("/api/health")
def health():
    if check_database_connection():
        return {"status": "healthy", "database": "connected"}
    return JSONResponse(
        status_code=503, content={"status": "unhealthy", "database": "disconnected"}
    )
