import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, get_settings
from db import Database

# Routers
from routers.admin import router as admin_router
from routers.generated_questions import router as generated_questions_router
from routers.generation import router as generation_router
from routers.health import router as health_router
from routers.passages import router as passages_router
from routers.prompts import router as prompts_router
from routers.question_types import router as question_types_router
from routers.textbooks import router as textbooks_router
from routers.units import router as units_router

logger = logging.getLogger("content-admin")

DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.db.dispose()

    app = FastAPI(title="Content Admin API", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = database or Database(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )

    # Allow calls from the Next.js admin UI
    app.add_middleware(
        CORSMiddleware,
        allow_origins=DEFAULT_ORIGINS + list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*", "x-api-key", "x-admin-token"],
    )

    # Every failure leaves as {"error": "..."}
    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        logger.info("rejected %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse({"error": "Invalid request body"}, status_code=400)

    @app.get("/")
    def health_root():
        return {"ok": True}

    app.include_router(generated_questions_router)  # /api/generated-questions/...
    app.include_router(units_router)  # /api/units/...
    app.include_router(generation_router)  # /api/generation/...
    app.include_router(prompts_router)  # /api/prompts/...
    app.include_router(question_types_router)  # /api/question-types/...
    app.include_router(textbooks_router)  # /api/groups, /api/textbooks
    app.include_router(passages_router)  # /api/passages/...
    app.include_router(admin_router)  # /api/admin/...
    app.include_router(health_router)  # /health/...
    return app

