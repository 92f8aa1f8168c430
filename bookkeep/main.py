from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from bookkeep.core.config import settings
from bookkeep.core.middleware_correlation import CorrelationIdMiddleware
from bookkeep.core.logging import get_logger, setup_logging
from bookkeep.core.errors import register_exception_handlers
from bookkeep.db.session import init_db


# Routers
from fastapi import APIRouter
from bookkeep.api.routes.books import router as books_router


setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    if settings.AUTO_CREATE_SCHEMA:
        try:
            init_db()
        except Exception:
            # The app still serves; requests will surface the store error as a 500
            get_logger(__name__).exception("An error occurred while creating the database schema.")
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="BookKeep API - record keeping for a book catalog.",
    version="1.0.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

# CORS middleware - allow docs UI to make API requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Middlewares
app.add_middleware(CorrelationIdMiddleware)

# Root endpoint
@app.get("/")
async def root():
    """API root endpoint with basic information."""
    return {
        "message": "Welcome to BookKeep API",
        "version": "1.0.0",
        "docs_url": "/docs",
        "redoc_url": "/redoc",
        "api_v1_str": settings.API_V1_STR,
        "endpoints": {
            "books": f"{settings.API_V1_STR}/books",
        },
    }

register_exception_handlers(app)

# Mount routers
api = APIRouter(prefix=settings.API_V1_STR)
api.include_router(books_router)
app.include_router(api)
