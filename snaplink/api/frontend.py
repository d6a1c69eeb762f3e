"""Serving of the pre-built single-page frontend."""

from fastapi import Request, status
from fastapi.responses import HTMLResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException
from starlette.types import Scope

NOT_FOUND_PAGE = "<!doctype html><title>Not Found</title><h1>Not Found</h1>"


class SPAStaticFiles(StaticFiles):
    """Static files with client-side routing: unknown paths get `index.html`.

    Paths under `api/` keep their 404 so API clients see JSON errors.
    """

    async def get_response(self, path: str, scope: Scope) -> Response:
        try:
            return await super().get_response(path, scope)
        except HTTPException as e:
            if e.status_code != status.HTTP_404_NOT_FOUND or path.startswith("api/"):
                raise
            return await super().get_response("index.html", scope)


async def serve_frontend(request: Request, path: str) -> Response:
    """Hand a path the redirect router declined over to the frontend.

    Without a configured frontend every such path is a plain 404 page.
    """
    frontend: SPAStaticFiles | None = request.app.state.frontend
    if frontend is None:
        return HTMLResponse(NOT_FOUND_PAGE, status_code=status.HTTP_404_NOT_FOUND)
    return await frontend.get_response(path, request.scope)
