import logging
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from usermgmt.core.config import settings
from usermgmt.core.database import engine, Base
from usermgmt.core.errors import DomainError
from usermgmt.core.logging_config import setup_logging
from usermgmt.api.routes import users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage app lifecycle events.

    Startup: configure logging and create the users table if it doesn't exist
    (no migrations; the schema is a single table)
    """
    setup_logging(settings.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)
    logger.info("User management API started")
    yield
    logger.info("User management API stopped")


async def domain_error_handler(request: Request, exc: DomainError):
    """Map a domain error to its status code"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed or incomplete request bodies are a 400, like missing fields"""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="User Management API",
        description="Accounts, login and profiles",
        version="1.0.0",
        lifespan=lifespan
    )

    # CORS middleware - allows frontend to make requests to backend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # All routes are prefixed with /api
    app.include_router(users.router, prefix="/api")

    @app.get("/health")
    async def health():
        """Health check endpoint - used by monitoring/deployment tools"""
        return {"status": "healthy"}

    return app


app = create_app()
