import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .core.errors import FinanceTrackerError
from .core.logging_config import setup_logging
from .database import init_db
from .routers import auth as auth_router
from .routers import budgets as budgets_router
from .routers import categories as categories_router
from .routers import convert as convert_router
from .routers import dashboard as dashboard_router
from .routers import transactions as transactions_router


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(title="Personal Finance Tracker", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(FinanceTrackerError)
    async def handle_domain_error(request: Request, exc: FinanceTrackerError):
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.on_event("startup")
    def on_startup():
        init_db()

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(auth_router.router)
    app.include_router(categories_router.router)
    app.include_router(transactions_router.router)
    app.include_router(budgets_router.router)
    app.include_router(dashboard_router.router)
    app.include_router(convert_router.router)

    return app


app = create_app()
