"""FastAPI application factory for CertLedger."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from certledger.common.config import get_settings
from certledger.common.exceptions import CertLedgerError
from certledger.common.logging import get_logger, setup_logging
from certledger.common.schemas import ErrorResponse, HealthResponse

logger = get_logger("app")


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        from certledger.deps import get_db, get_ledger
        db = get_db()
        await db.init()
        await db.create_all()
        yield
        # Shutdown
        ledger = get_ledger()
        if hasattr(ledger, "close"):
            await ledger.close()
        await db.close()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CertLedgerError)
    async def certledger_error_handler(request: Request, exc: CertLedgerError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "Request failed",
                extra={"path": request.url.path, "code": exc.code, "detail": exc.detail},
            )
        body = ErrorResponse(error=exc.message, code=exc.code, detail=exc.detail)
        return JSONResponse(status_code=exc.status_code, content=body.model_dump())

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(
            version=settings.api_version, ledger_backend=settings.ledger_backend,
        )

    # Mount routers
    from certledger.certificates.router import router as certificates_router
    from certledger.ledger.router import router as ledger_router
    from certledger.users.router import router as users_router
    from certledger.companies.router import router as companies_router

    prefix = settings.api_prefix
    app.include_router(certificates_router, prefix=prefix, tags=["certificates"])
    app.include_router(ledger_router, prefix=prefix, tags=["ledger"])
    app.include_router(users_router, prefix=prefix, tags=["users"])
    app.include_router(companies_router, prefix=prefix, tags=["companies"])

    return app
