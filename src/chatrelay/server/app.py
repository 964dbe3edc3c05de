# src/chatrelay/server/app.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .. import __version__
from ..backends import create_backend
from ..config.manager import Settings
from ..relay import ChatRelay
from ..sessions import SessionStore
from .errors import register_error_handlers
from .routes import router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[SessionStore] = None,
    relay: Optional[ChatRelay] = None,
) -> FastAPI:
    """Build the HTTP application

    Args:
        settings: Process settings; read from the environment when omitted
        store: Session registry; built on settings.data_dir when omitted
        relay: Chat relay; built with the real backends when omitted

    Returns:
        FastAPI: The configured application
    """
    if settings is None:
        settings = Settings.from_env()
    if store is None:
        store = SessionStore(settings.data_dir, settings.default_provider)
    if relay is None:
        relay = ChatRelay(
            store,
            lambda provider: create_backend(provider, settings),
            default_provider=settings.default_provider,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.restore_sessions:
            await store.load()
        yield

    app = FastAPI(title="chatrelay", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.relay = relay

    register_error_handlers(app)
    app.include_router(router)
    return app


def serve(settings: Settings) -> None:
    """Run the HTTP service until interrupted"""
    import uvicorn

    app = create_app(settings)
    logger.info(
        "Serving on %s:%d, data in %s, default provider %s",
        settings.host,
        settings.port,
        settings.data_dir,
        settings.default_provider.value,
    )
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
