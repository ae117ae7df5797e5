# promptiq/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from .billing_stripe import configure_stripe, router as billing_router
from .config import Settings
from .database import Database
from .errors import PromptIQError
from .generator import PromptGenerator
from .llm_client import GeminiClient, LLMClient
from .logging_setup import configure_logging
from .routers import (
    generate_router,
    prompts_router,
    share_router,
    users_router,
    waitlist_router,
)

logger = logging.getLogger(__name__)


def _validation_message(errors: list) -> str:
    parts = []
    for err in errors[:3]:
        loc = ".".join(str(x) for x in err.get("loc", ()) if x not in ("body", "query", "header"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Missing required fields"


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    llm: Optional[LLMClient] = None,
) -> FastAPI:
    """
    Build the API with explicitly constructed collaborators.

    Tests pass their own Database / LLM client; production builds them from
    the environment. Both are opened and closed by the lifespan below.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    database = database or Database(settings.database_url)
    llm = llm or GeminiClient(settings.gemini_api_key, settings.gemini_model)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.init(create_tables=settings.create_tables)
        if hasattr(llm, "init"):
            llm.init()
        configure_stripe(settings)
        logger.info("promptiq started", extra={"version": settings.app_version})
        try:
            yield
        finally:
            if hasattr(llm, "close"):
                llm.close()
            database.close()

    app = FastAPI(title="PromptIQ API", version=settings.app_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.generator = PromptGenerator(llm)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # all routes under /api
    app.include_router(generate_router, prefix="/api")
    app.include_router(prompts_router, prefix="/api")
    app.include_router(share_router, prefix="/api")
    app.include_router(users_router, prefix="/api")
    app.include_router(waitlist_router, prefix="/api")
    app.include_router(billing_router, prefix="/api")

    @app.exception_handler(PromptIQError)
    async def promptiq_error_handler(request: Request, exc: PromptIQError):
        if exc.status_code >= 500:
            logger.error("request failed: %s", exc.message, extra={"path": request.url.path, "error": exc.error})
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            {"error": "missing_fields", "message": _validation_message(exc.errors())},
            status_code=400,
        )

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            {"error": "missing_fields", "message": _validation_message(exc.errors())},
            status_code=400,
        )

    @app.exception_handler(Exception)
    async def unhandled_handler(request: Request, exc: Exception):
        logger.exception("unhandled error", extra={"path": request.url.path})
        return JSONResponse({"error": "internal_error", "message": "Internal error"}, status_code=500)

    # =========================================================
    # Health / Version
    # =========================================================
    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "promptiq OK"

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    @app.get("/version")
    def version():
        return {"version": settings.app_version}

    return app


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
