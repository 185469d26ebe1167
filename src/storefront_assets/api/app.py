"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response

from storefront_assets.api.admin import SESSION_HEADER
from storefront_assets.api.admin import router as admin_router
from storefront_assets.api.catalog import router as catalog_router
from storefront_assets.api.uploads import router as uploads_router
from storefront_assets.app_logging import configure_logging
from storefront_assets.containers import AppContainer

_UPLOADS_PREFIX = "/admin/uploads"
_MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            await state_container.check_storage()
        except Exception:
            logger.exception("Failed to check object storage")
        state_container.sweeper.start()
        yield
        await state_container.sweeper.stop()
        await state_container.asset_manager.cleanup_all()
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)
    app.include_router(uploads_router)
    app.include_router(catalog_router)

    @app.middleware("http")
    async def track_upload_session(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Echo the form session id and clean up after failed saves."""
        response = await call_next(request)
        session_id = getattr(request.state, "session_id", None)
        if session_id is None:
            return response
        response.headers[SESSION_HEADER] = session_id
        manager = request.app.state.container.asset_manager
        if (
            response.status_code >= 500
            and request.method in _MUTATING_METHODS
            and not request.url.path.startswith(_UPLOADS_PREFIX)
            and not manager.is_session_active(session_id)
        ):
            logger.warning(
                "Cleaning up staged assets after failed request",
                extra={"session_id": session_id, "path": request.url.path},
            )
            await manager.cleanup_session(session_id)
        return response

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
