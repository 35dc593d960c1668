"""
app/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Builds the storage backend and stores (dependency injection via app.state)
- Route guard and request timing middleware
- Registers API and page routes
- No business logic should be written here
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from contextlib import asynccontextmanager
import time

from app.core.config import settings, validate_settings
from app.core.errors import add_exception_handlers, error_response
from app.core.exceptions import AuthorizationError
from app.core.logging import setup_logging, get_logger
from app.db.storage import create_storage, close_storage
from app.services.access_service import AccessPolicy
from app.services.record_service import RecordStore
from app.services.session_service import SessionStore
from app.api import analytics, auth, pages, records
from app.api.deps import clear_session_cookie
from utils.constants import UNAUTHORIZED_MESSAGE

# Initialize logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("🚀 Starting admin dashboard...")

    try:
        logger.info("Validating configuration...")
        validate_settings()
        logger.info("✅ Configuration validated")

        storage = await create_storage(settings)
        logger.info(f"✅ Storage backend ready: {storage.name}")

        session_store = SessionStore(
            storage,
            seed_password=settings.SEED_PASSWORD,
            password_min_length=settings.PASSWORD_MIN_LENGTH,
        )
        record_store = RecordStore(storage, seed_product_count=settings.SEED_PRODUCT_COUNT)

        await session_store.load()
        await record_store.load()
        logger.info("✅ Stores loaded")

        app.state.storage = storage
        app.state.session_store = session_store
        app.state.record_store = record_store
        app.state.access_policy = AccessPolicy()

        logger.info("🎉 Admin dashboard started successfully!")
        logger.info(f"Environment: {settings.ENVIRONMENT}")

    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    yield  # Application runs here

    logger.info("🛑 Shutting down admin dashboard...")
    try:
        await close_storage(app.state.storage)
        logger.info("👋 Admin dashboard shut down successfully")
    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}", exc_info=True)


app = FastAPI(
    title="Admin Dashboard API",
    description="Users, products and analytics behind role-based access",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

add_exception_handlers(app)


@app.middleware("http")
async def route_guard(request: Request, call_next):
    """
    Redirects or rejects page requests before they reach a handler.

    Signed-in visitors are sent from the public pages to the dashboard,
    anonymous visitors from protected pages to the login page, and roles
    missing from the permission table get a 403.
    """
    path = request.url.path
    policy: AccessPolicy = request.app.state.access_policy
    if not policy.is_guarded(path):
        return await call_next(request)

    token = request.cookies.get(settings.SESSION_COOKIE_NAME) or ""
    identity = request.app.state.session_store.identity_from_token(token) if token else None
    decision = policy.evaluate(path, identity, has_token=bool(token))

    if decision.action == "redirect":
        target = request.url.replace(path=decision.location, query="")
        response = RedirectResponse(str(target), status_code=307)
        if decision.clear_session:
            clear_session_cookie(response)
        return response
    if decision.action == "forbid":
        return error_response(AuthorizationError(UNAUTHORIZED_MESSAGE, details={"path": path}))

    return await call_next(request)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to all responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Log slow requests
    if process_time > 5.0:
        logger.warning(
            f"Slow request detected: {request.method} {request.url.path}",
            extra={"process_time": process_time}
        )

    return response


# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Register API routes
app.include_router(auth.router, prefix=settings.API_PREFIX, tags=["Auth"])
app.include_router(records.users_router, prefix=settings.API_PREFIX, tags=["Users"])
app.include_router(records.products_router, prefix=settings.API_PREFIX, tags=["Products"])
app.include_router(analytics.router, prefix=settings.API_PREFIX, tags=["Analytics"])
app.include_router(pages.router)


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """
    Health check endpoint.
    Checks storage connectivity and store status.
    """
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "version": "1.0.0",
        "checks": {}
    }

    storage = request.app.state.storage
    try:
        storage_healthy = await storage.is_healthy()
        health_status["checks"]["storage"] = "healthy" if storage_healthy else "unhealthy"
        if not storage_healthy:
            health_status["status"] = "degraded"
    except Exception as e:
        logger.error(f"Storage health check failed: {str(e)}")
        health_status["checks"]["storage"] = "unhealthy"
        health_status["status"] = "unhealthy"

    health_status["checks"]["backend"] = storage.name

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)


# Readiness check (for Kubernetes/orchestration)
@app.get("/ready", tags=["Health"])
async def readiness_check(request: Request):
    """
    Readiness check - indicates if app is ready to receive traffic.
    """
    try:
        if await request.app.state.storage.is_healthy():
            return {"status": "ready"}
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": "storage_unavailable"}
        )
    except Exception as e:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": str(e)}
        )


# Liveness check (for Kubernetes/orchestration)
@app.get("/live", tags=["Health"])
async def liveness_check():
    """
    Liveness check - indicates if app is alive.
    """
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
