"""
FastAPI application entry point.
Builds the application and its collaborators from settings.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional
import logging

from marketplace.config import Settings, get_settings
from marketplace.database import Database
from marketplace.routers import admin_router, auth_router, properties_router, users_router
from marketplace.services.error_handler import ErrorHandlerService
from marketplace.utils.auth import CredentialService
from marketplace.utils.exceptions import APIException
from marketplace.utils.file_utils import AssetStore
from marketplace.utils.locks import KeyedLockRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Checks the database on startup and releases connections on shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    db_connected = await app.state.database.check_connection()
    if not db_connected:
        logger.error("Failed to connect to database on startup")

    yield

    logger.info("Shutting down application")
    await app.state.database.dispose()


def register_exception_handlers(app: FastAPI) -> None:
    """Route every error through ErrorHandlerService."""

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        return ErrorHandlerService.handle_api_exception(exc, request)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return ErrorHandlerService.handle_validation_error(exc, request)

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        return ErrorHandlerService.handle_database_error(exc, request)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return ErrorHandlerService.handle_http_exception(exc, request)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        return ErrorHandlerService.handle_unexpected_error(exc, request)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create a configured application.

    Args:
        settings: Settings to use, defaults to the environment-derived settings

    Returns:
        FastAPI application with its database, credential service, asset store
        and like-lock registry on ``app.state``
    """
    settings = settings or get_settings()

    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
    Property marketplace backend.

    ## Features

    * **Listings**: Owners create listings that admins approve before they go public
    * **Search**: Filter by city, listing type, price range and bedrooms
    * **Likes**: Users like properties; each listing shows whether the viewer liked it
    * **Moderation**: Admin searches, approvals, rejections and a dashboard

    ## Authentication

    Obtain a token from `/api/auth/login` and send it as `Authorization: Bearer <token>`.
    Public listing routes accept a token optionally and ignore it when it is invalid.
    """,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {"name": "Authentication", "description": "Registration, login and logout"},
            {"name": "Users", "description": "Current user profile"},
            {"name": "Properties", "description": "Listings, filters and likes"},
            {"name": "Admin", "description": "Moderation and dashboard"},
            {"name": "Health", "description": "Service health"}
        ],
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.credentials = CredentialService(settings)
    app.state.asset_store = AssetStore(settings)
    app.state.like_locks = KeyedLockRegistry()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(users_router, prefix=settings.api_prefix)
    app.include_router(properties_router, prefix=settings.api_prefix)
    app.include_router(admin_router, prefix=settings.api_prefix)

    upload_dir = app.state.asset_store.ensure_directory()
    app.mount(settings.uploads_url_path, StaticFiles(directory=upload_dir), name="uploads")

    @app.get("/", tags=["Health"])
    async def root():
        """Basic API information."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.environment,
            "status": "healthy",
            "documentation": {
                "swagger_ui": "/docs",
                "redoc": "/redoc",
                "openapi_json": "/openapi.json"
            },
            "api_prefix": settings.api_prefix
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """
        Health check endpoint with database connectivity test.
        Used by container health checks and load balancers.
        """
        if not await app.state.database.check_connection():
            raise StarletteHTTPException(status_code=503, detail="Database connection failed")

        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "database": "connected"
        }

    return app


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "marketplace.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
