from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import budgetdash.db.models  # noqa: F401  (mapper registry)
from budgetdash.core.config import settings
from budgetdash.core.errors import NotFoundError, StoreUnavailableError, ValidationError
from budgetdash.core.logging import bind_log_context, configure_logging, logger
from budgetdash.api.router import api_router
from budgetdash.db.session import engine
from budgetdash.db.base import Base
from budgetdash.services.seed import seed_admin

def create_app() -> FastAPI:
    configure_logging(settings.ENV)
    app = FastAPI(title="Budget Dashboard", version="0.1.0")

    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def _log_context(request: Request, call_next):
        bind_log_context(method=request.method, path=request.url.path)
        return await call_next(request)

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        logger.warning("request_rejected", error=exc.message)
        return JSONResponse(status_code=400, content={"detail": exc.message, "errors": exc.errors})

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": exc.message})

    @app.exception_handler(StoreUnavailableError)
    async def _store_unavailable(request: Request, exc: StoreUnavailableError):
        logger.error("store_unavailable", error=exc.message)
        return JSONResponse(status_code=503, content={"detail": exc.message})

    @app.get("/healthz")
    def healthz():
        return {"status": "ok", "env": settings.ENV}

    @app.on_event("startup")
    def _startup():
        # dev-only convenience; prod relies on alembic
        if settings.ENV == "dev":
            Base.metadata.create_all(bind=engine)
            if settings.SEED_ADMIN:
                seed_admin()

    app.include_router(api_router)
    logger.info("app_started", env=settings.ENV)
    return app

app = create_app()
