from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from contracts_api import __version__
from contracts_api.api.v2.router import api_router
from contracts_api.config import settings
from contracts_api.database import init_db
from contracts_api.exceptions import ContractsAPIException, create_exception_handlers
from contracts_api.middleware.correlation import RequestIdLogFilter, RequestIdMiddleware

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
for _handler in logging.getLogger().handlers:
    _handler.addFilter(RequestIdLogFilter())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting Contracts API...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    # Don't log full database URL, just prefix
    if settings.DATABASE_URL:
        logger.info(f"Database URL prefix: {settings.DATABASE_URL[:30]}...")
    logger.info(f"Schedule store: {settings.SCHEDULE_API_URL}")
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        # Don't log full exception details which may contain credentials
        logger.error(f"Database initialization failed: {type(e).__name__}")
        logger.warning("App starting without database - some features may not work")
    yield
    # Shutdown
    logger.info("Shutting down Contracts API...")


docs_url = "/docs" if settings.DOCS_ENABLED else None
redoc_url = "/redoc" if settings.DOCS_ENABLED else None

app = FastAPI(
    title="Contracts API",
    description="Contract lifecycle for approved estimates: payment, agreement, numbering and measurement schedules",
    version=__version__,
    docs_url=docs_url,
    redoc_url=redoc_url,
    lifespan=lifespan,
)

# CORS middleware
allowed_origins = [settings.FRONTEND_URL]
if not settings.is_production:
    allowed_origins.extend([
        "http://localhost:5173",  # Vite dev server
        "http://localhost:3000",
    ])

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)

# RFC 7807 error responses
handlers = create_exception_handlers()
app.add_exception_handler(ContractsAPIException, handlers["contracts"])
app.add_exception_handler(StarletteHTTPException, handlers["http"])
app.add_exception_handler(RequestValidationError, handlers["validation"])
app.add_exception_handler(Exception, handlers["generic"])

# Include routers
app.include_router(api_router, prefix="/api/v2")


@app.get("/")
async def root():
    """Root endpoint - API info."""
    response = {
        "name": "Contracts API",
        "version": __version__,
        "health": "/health",
    }
    if settings.DOCS_ENABLED:
        response["docs"] = "/docs"
    return response


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "environment": settings.ENVIRONMENT,
    }


# For running with uvicorn directly (development only)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "contracts_api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
