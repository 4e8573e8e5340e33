"""
FastAPI application factory
"""
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import get_settings
from app.domain.errors import (
    LedgerValidationError, NotFoundError, InsufficientFundsError, PersistenceError,
)
from app.infrastructure.db.session import check_db_connection
from app.api.v1 import transactions, wallets, categories, budgets, goals, dashboard, stats

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Ловит все необработанные исключения (включая sync routes) и пишет traceback"""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            tb_str = traceback.format_exc()
            logger.error(f"\n{'='*60}\nERROR on {request.method} {request.url.path}\n{tb_str}{'='*60}")
            return JSONResponse(
                status_code=500,
                content={"success": False, "error": f"Internal Server Error: {exc}"},
            )


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message, **extra})


def register_exception_handlers(app: FastAPI) -> None:
    """Ошибки домена -> единый конверт {success: false, error}"""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(404, str(exc))

    @app.exception_handler(InsufficientFundsError)
    async def insufficient_funds_handler(request: Request, exc: InsufficientFundsError):
        return _error(400, str(exc), available=exc.available, requested=exc.requested)

    @app.exception_handler(LedgerValidationError)
    async def validation_handler(request: Request, exc: LedgerValidationError):
        if exc.field:
            return _error(400, str(exc), field=exc.field)
        return _error(400, str(exc))

    @app.exception_handler(PersistenceError)
    async def persistence_handler(request: Request, exc: PersistenceError):
        logger.error(f"Persistence failure on {request.method} {request.url.path}: {exc.__cause__}")
        return _error(500, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
            for err in exc.errors()
        ]
        return _error(400, "Некорректные данные запроса", details=details)


def create_app() -> FastAPI:
    """
    Application factory - создаёт и настраивает FastAPI приложение

    Returns:
        Настроенный FastAPI app
    """
    settings = get_settings()

    app = FastAPI(
        title="FinTrack",
        debug=settings.DEBUG,
    )

    app.add_middleware(ErrorLoggingMiddleware)

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Idempotency-Key"],
        allow_credentials=True,
    )

    register_exception_handlers(app)

    # Routers
    app.include_router(transactions.router)
    app.include_router(wallets.router)
    app.include_router(categories.router)
    app.include_router(budgets.router)
    app.include_router(goals.router)
    app.include_router(dashboard.router)
    app.include_router(stats.router)

    @app.get("/", tags=["system"])
    def root():
        return {"message": "FinTrack API is running", "status": "ok"}

    # Health checks
    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (проверяет доступность БД)"""
        check_db_connection()
        return "ok"

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
