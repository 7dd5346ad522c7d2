from __future__ import annotations

from typing import Sequence

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from shortener.app.domain.models import DEFAULT_USERS, User
from shortener.app.services.index_page import PageTemplate


def create_index_router(template: PageTemplate, users: Sequence[User] = DEFAULT_USERS) -> APIRouter:
    """Build the index router around an already-loaded template."""
    router = APIRouter(tags=["Index"])
    listing = tuple(users)

    @router.get(
        "/",
        response_class=HTMLResponse,
        summary="Index page",
        description="Renders the index template with the user listing.",
    )
    async def index() -> HTMLResponse:
        return HTMLResponse(template.render(listing))

    return router
