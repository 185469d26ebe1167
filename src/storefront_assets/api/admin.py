"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from storefront_assets.containers import AppContainer

SESSION_HEADER = "X-Session-ID"

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def request_session_id(request: Request) -> str:
    """Resolve the form session of an authenticated request.

    The id comes from the session header or is generated. Activity is recorded
    only here, so rejected requests never create registry entries.
    """
    container: AppContainer = request.app.state.container
    manager = container.asset_manager
    session_id = request.headers.get(SESSION_HEADER) or manager.generate_session_id()
    request.state.session_id = session_id
    manager.touch_session(session_id)
    return session_id


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/sessions", dependencies=[Depends(require_admin)])
async def list_sessions(request: Request) -> dict[str, object]:
    """Return tracked upload sessions and their staged assets."""
    container: AppContainer = request.app.state.container
    return {"sessions": container.asset_manager.registry.snapshot()}

