from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .routers import analytics, currency, expenses, ui
from .services.app_context import AppContext
from .services.expense_api import ExpenseApiClient
from .services.expense_store import ExpenseStore


def create_app(
    settings_override: Settings | None = None,
    api_client: ExpenseApiClient | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment. Falls back to cached get_settings().
    api_client: pre-built client for the remote expense service (tests inject
    one backed by ``httpx.MockTransport``).
    """
    settings = settings_override or get_settings()
    # Initialize logging early
    init_logging(debug=settings.debug)

    client = api_client or ExpenseApiClient(settings)
    store = ExpenseStore(client)
    ctx = AppContext(selected_currency=settings.home_currency)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Load once per session start
        ctx.notify(await store.ensure_loaded())
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.app_context = ctx

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(expenses.router)
    app.include_router(analytics.router)
    app.include_router(currency.router)
    app.include_router(ui.router)

    @app.get("/")
    async def root():
        return {"message": "Expense Dashboard API", "version": settings.version}

    return app


app = create_app()
