"""
FastAPI application for the bookstore review service.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from api.auth import TokenManager, require_user
from api.models import (
    CredentialsRequest, ErrorResponse, HealthResponse, MessageResponse,
    ReviewDeleteResponse, ReviewRequest, ReviewUpsertResponse, TokenResponse
)
from bookstore.catalog import CatalogStore
from bookstore.credentials import CredentialStore
from bookstore.database import MongoDBManager
from bookstore.errors import BookstoreError
from bookstore.models import Book, Review
from bookstore.reviews import ReviewManager
from utilities.config import BookstoreConfig, load_config

logger = structlog.get_logger(__name__)

router = APIRouter()


def attach_services(app: FastAPI, db_manager: MongoDBManager) -> None:
    """Build the stores over the manager's collections and expose them on app.state."""
    config: BookstoreConfig = app.state.config
    app.state.db_manager = db_manager
    app.state.catalog = CatalogStore(db_manager.books)
    app.state.credentials = CredentialStore(db_manager.users, bcrypt_rounds=config.bcrypt_rounds)
    app.state.reviews = ReviewManager(db_manager.books, max_attempts=config.review_write_attempts)


def get_catalog(request: Request) -> CatalogStore:
    return request.app.state.catalog


def get_credentials(request: Request) -> CredentialStore:
    return request.app.state.credentials


def get_reviews(request: Request) -> ReviewManager:
    return request.app.state.reviews


def get_tokens(request: Request) -> TokenManager:
    return request.app.state.tokens


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    config: BookstoreConfig = app.state.config
    logger.info("Starting bookstore API", database=config.mongodb_database)

    db_manager = MongoDBManager(config)
    try:
        await db_manager.connect()
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        raise
    attach_services(app, db_manager)

    yield

    logger.info("Shutting down bookstore API")
    await db_manager.disconnect()


# Exception handlers
async def bookstore_error_handler(request: Request, exc: BookstoreError):
    """Render expected domain failures."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.message,
            code=exc.code,
            status_code=exc.status_code
        ).model_dump()
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=str(exc.detail),
            code="http_error",
            status_code=exc.status_code
        ).model_dump(),
        headers=exc.headers
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Log unexpected failures server-side and answer with a generic message."""
    logger.error("Unhandled exception", path=request.url.path, method=request.method, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            code="internal_error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        ).model_dump()
    )


async def bind_request_context(request: Request, call_next):
    """Attach method and path to every log event emitted while serving a request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(method=request.method, path=request.url.path)
    return await call_next(request)


# Health check endpoint
@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint."""
    db_manager: Optional[MongoDBManager] = getattr(request.app.state, "db_manager", None)
    db_status = "unavailable"
    if db_manager is not None:
        health_info = await db_manager.health_check()
        db_status = health_info.get("status", "unknown")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=request.app.version,
        database_status=db_status
    )


# Catalog endpoints
@router.get("/books", response_model=List[Book], tags=["Books"])
async def list_books(catalog: CatalogStore = Depends(get_catalog)):
    """Get every book in the shop."""
    return await catalog.list_all()


@router.get("/books/author/{author}", response_model=List[Book], tags=["Books"])
async def get_books_by_author(author: str, catalog: CatalogStore = Depends(get_catalog)):
    """Get all books by an author (exact match)."""
    return await catalog.find_by_author(author)


@router.get("/books/title/{title}", response_model=List[Book], tags=["Books"])
async def get_books_by_title(title: str, catalog: CatalogStore = Depends(get_catalog)):
    """Get all books with a title (exact match)."""
    return await catalog.find_by_title(title)


@router.get("/books/{isbn}", response_model=Book, tags=["Books"])
async def get_book(isbn: str, catalog: CatalogStore = Depends(get_catalog)):
    """Get a single book by ISBN."""
    return await catalog.find_by_isbn(isbn)


@router.get("/books/{isbn}/review", response_model=List[Review], tags=["Reviews"])
async def get_book_reviews(isbn: str, catalog: CatalogStore = Depends(get_catalog)):
    """Get the reviews of a book."""
    return await catalog.get_reviews(isbn)


# Account endpoints
@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Users"]
)
async def register(body: CredentialsRequest, credentials: CredentialStore = Depends(get_credentials)):
    """Register a new user."""
    await credentials.register(body.username, body.password)
    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=TokenResponse, tags=["Users"])
async def login(
    body: CredentialsRequest,
    credentials: CredentialStore = Depends(get_credentials),
    tokens: TokenManager = Depends(get_tokens)
):
    """Log in as a registered user and receive a token."""
    user_id = await credentials.verify(body.username, body.password)
    return TokenResponse(token=tokens.issue(user_id))


# Review mutation endpoints
@router.post("/books/{isbn}/review", response_model=ReviewUpsertResponse, tags=["Reviews"])
async def upsert_review(
    isbn: str,
    body: ReviewRequest,
    user_id: str = Depends(require_user),
    reviews: ReviewManager = Depends(get_reviews)
):
    """Add a review, or modify the caller's existing review of the book."""
    action = await reviews.upsert_review(isbn, user_id, body.review)
    return ReviewUpsertResponse(message="Review added/modified successfully", action=action)


@router.delete("/books/{isbn}/review", response_model=ReviewDeleteResponse, tags=["Reviews"])
async def delete_review(
    isbn: str,
    user_id: str = Depends(require_user),
    reviews: ReviewManager = Depends(get_reviews)
):
    """Delete the caller's review of the book."""
    removed = await reviews.delete_review(isbn, user_id)
    return ReviewDeleteResponse(message="Review deleted successfully", removed=removed)


def create_app(config: Optional[BookstoreConfig] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Service configuration; loaded from the environment when omitted

    Returns:
        Configured application. Stores are attached by the lifespan hook on
        startup, or by calling ``attach_services`` directly.
    """
    config = config or load_config()

    app = FastAPI(
        title=config.api_title,
        description="""
    Bookstore catalog with user reviews.

    ## Authentication

    Review changes require a token obtained from `/login`, sent as a raw header:

    ```
    token: <your token>
    ```

    Each user keeps at most one review per book; posting again replaces it.
    """,
        version=config.api_version,
        lifespan=lifespan
    )
    app.state.config = config
    app.state.tokens = TokenManager(config)
    if config.uses_default_secret():
        logger.warning("Using the default secret key; set SECRET_KEY before deploying")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(bind_request_context)

    app.add_exception_handler(BookstoreError, bookstore_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(router)
    return app
