# Essential imports
import time
from fastapi import FastAPI, Request, status, HTTPException
from fastapi.exceptions import RequestValidationError
from routers import auth, oauth, sessions, shortener
from contextlib import asynccontextmanager

# Import all models for SQLAlchemy relationship resolution
import models  # This triggers the imports in models/__init__.py
from core.database import Base, engine

# Rate limiter imports
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from middleware.rate_limiter import limiter

# Logging imports
from core.logging_config import setup_logging
from utils.logger import get_logger
from middleware import RequestIDMiddleware, AuthenticationMiddleware, get_request_id
from core.config import settings
from fastapi.responses import JSONResponse

# Session (flash messages) and CORS imports
from starlette.middleware.sessions import SessionMiddleware
from fastapi.middleware.cors import CORSMiddleware

# Initialize logging
setup_logging(
    log_level=settings.LOG_LEVEL,
    log_dir=settings.LOG_DIR
)

logger = get_logger(__name__)

# Lifecycle events logging
@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("Application startup complete", extra={"event": "startup", "env": settings.ENV})
    yield
    logger.info("Application shutting down", extra={"event": "shutdown"})


app = FastAPI(
    title="URL Shortener",
    description="URL shortener with cookie based JWT sessions",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,                    # Auth lives in cookies
    allow_methods=["*"],
    allow_headers=["*"],
)

# Resolves request.state.user from the auth cookies
app.add_middleware(AuthenticationMiddleware)

# Signed cookie backing the flash messages
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    session_cookie="flash",
    same_site="lax",
    https_only=settings.COOKIE_SECURE
)


# HTTP Request Logging Middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log all HTTP requests with method, path, status code, and duration.
    """
    start_time = time.time()

    response = await call_next(request)

    duration = (time.time() - start_time) * 1000

    client_ip = request.client.host if request.client else "unknown"

    logger.info(
        f'{client_ip} - "{request.method} {request.url.path} HTTP/1.1" {response.status_code}',
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration, 2),
            "client_ip": client_ip
        }
    )

    return response


# Outermost, so every log line of the request carries its id
app.add_middleware(RequestIDMiddleware)


# Health check
@app.get("/health")
async def health_check():
    logger.debug("Health check requested")
    return {"status": "Healthy"}


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch all unhandled exceptions (database failures included) and log them.

    Returns a generic error without exposing internals.
    """
    if isinstance(exc, (HTTPException, RequestValidationError)):
        raise

    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "request_id": get_request_id(request)
        },
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


# Including routers. The shortener owns the catch-all /{short_code} route, so it goes last.
app.include_router(auth.router)
app.include_router(oauth.router)
app.include_router(sessions.router)
app.include_router(shortener.router)


# Add rate limiter to the app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
