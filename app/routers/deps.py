"""Request dependencies resolving the session objects stored on ``app.state``."""

from fastapi import Request

from app.core.config import Settings
from app.services.app_context import AppContext
from app.services.expense_store import ExpenseStore


def get_app_context(request: Request) -> AppContext:
    return request.app.state.app_context


async def get_store(request: Request) -> ExpenseStore:
    store: ExpenseStore = request.app.state.store
    # First request of the session pulls the collection if startup did not
    note = await store.ensure_loaded()
    request.app.state.app_context.notify(note)
    return store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
