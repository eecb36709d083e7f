import logging
from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from trustbadges.api.badges import router as badges_router
from trustbadges.api.display import router as display_router
from trustbadges.api.session import router as session_router
from trustbadges.api.settings import router as settings_router
from trustbadges.core.cache import get_settings_cache
from trustbadges.core.config import settings
from trustbadges.core.database import AsyncSessionLocal, create_tables, engine
from trustbadges.core.errors import TrustBadgesError, ValidationError
from trustbadges.repositories.unit_of_work import SqlAlchemyUnitOfWork
from trustbadges.services.settings_store import SettingsStore

API_PREFIX = "/api/trust-badges/v1"

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(),
    ],
)

# Completely disable SQLAlchemy logging
logging.getLogger("sqlalchemy").setLevel(logging.CRITICAL)
logging.getLogger("sqlalchemy.engine").setLevel(logging.CRITICAL)
logging.getLogger("sqlalchemy.pool").setLevel(logging.CRITICAL)

logger = logging.getLogger(__name__)

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        send_default_pii=False,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting up {settings.PROJECT_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(
        f"Database URL: {settings.DATABASE_URL.split('@')[-1] if '@' in settings.DATABASE_URL else 'local'}"
    )

    try:
        await create_tables()
        logger.info("Database tables created/verified")
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise

    async with AsyncSessionLocal() as session:
        store = SettingsStore(SqlAlchemyUnitOfWork(session), get_settings_cache())
        await store.seed_defaults()

    yield

    logger.info(f"Shutting down {settings.PROJECT_NAME}...")


app = FastAPI(title=f"{settings.PROJECT_NAME} API", lifespan=lifespan)

# configure logfire only if token exists and not using fake token
if settings.LOGFIRE_TOKEN and settings.LOGFIRE_TOKEN != "fake-token-for-testing":
    try:
        logfire.configure(token=settings.LOGFIRE_TOKEN)
        logfire.instrument_fastapi(app, capture_headers=True, excluded_urls="/health")
        logfire.instrument_sqlalchemy(engine)
    except Exception as e:
        logger.warning(f"Failed to configure Logfire: {e}")


# Security middleware
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["Strict-Transport-Security"] = (
        "max-age=31536000; includeSubDomains"
    )
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    max_age=60 * 60 * 24 * 14,  # two weeks
    same_site="strict",
    https_only=(settings.ENVIRONMENT == "production"),
)


@app.exception_handler(TrustBadgesError)
async def trust_badges_error_handler(request: Request, exc: TrustBadgesError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    error = ValidationError("Invalid request", errors=errors)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# Include API routers
app.include_router(session_router, prefix=API_PREFIX)
app.include_router(settings_router, prefix=API_PREFIX)
app.include_router(badges_router, prefix=API_PREFIX)
app.include_router(display_router, prefix=API_PREFIX)


@app.get("/health", include_in_schema=False)
async def health_check():
    return {"status": "healthy"}
