"""
Paste routes.
Handles create, fetch (API), status, and view (HTML) operations.
"""
import html
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import HTMLResponse
from pastebin.clock import resolve_now_ms
from pastebin.errors import NotFound
from pastebin.models import ErrorResponse, PasteCreate, PasteMetadata, PasteResponse, PasteView
from pastebin.service import PasteService, get_paste_service

router = APIRouter()
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    404: {"model": ErrorResponse, "description": "Paste not found, expired, or view limit exceeded"},
    500: {"model": ErrorResponse, "description": "Store failure"},
}


@router.post("/api/pastes", response_model=PasteResponse, status_code=201, responses=ERROR_RESPONSES)
def create_paste(
    paste: PasteCreate,
    x_test_now_ms: Optional[str] = Header(None),
    service: PasteService = Depends(get_paste_service),
) -> PasteResponse:
    """
    Create a new paste.

    Args:
        paste: Paste data (content, optional ttl_seconds, optional max_views)
        x_test_now_ms: Optional creation time override (TEST_MODE only)

    Returns:
        Paste ID and shareable URL
    """
    return service.create_paste(
        content=paste.content,
        ttl_seconds=paste.ttl_seconds,
        max_views=paste.max_views,
        now=resolve_now_ms(x_test_now_ms),
    )


@router.get("/api/pastes/{paste_id}", response_model=PasteView, responses=ERROR_RESPONSES)
def fetch_paste(
    paste_id: str,
    x_test_now_ms: Optional[str] = Header(None),
    service: PasteService = Depends(get_paste_service),
) -> PasteView:
    """
    Fetch a paste (API endpoint).
    Each fetch increments the view count.

    Args:
        paste_id: Unique paste identifier
        x_test_now_ms: Optional test timestamp (TEST_MODE only)

    Returns:
        Paste content with metadata; 404 if not found, expired, or view limit exceeded
    """
    return service.consume_view(paste_id, now=resolve_now_ms(x_test_now_ms))


@router.get("/api/pastes/{paste_id}/meta", response_model=PasteMetadata, responses=ERROR_RESPONSES)
def paste_metadata(
    paste_id: str,
    x_test_now_ms: Optional[str] = Header(None),
    service: PasteService = Depends(get_paste_service),
) -> PasteMetadata:
    """Paste status without counting as a view."""
    return service.inspect_metadata(paste_id, now=resolve_now_ms(x_test_now_ms))


@router.get("/p/{paste_id}", response_class=HTMLResponse)
def view_paste(
    paste_id: str,
    x_test_now_ms: Optional[str] = Header(None),
    service: PasteService = Depends(get_paste_service),
) -> HTMLResponse:
    """
    View a paste as HTML.
    Each view increments the view count.

    Returns:
        HTML page with paste content, or 404 error page
    """
    try:
        paste = service.consume_view(paste_id, now=resolve_now_ms(x_test_now_ms))
    except NotFound:
        return HTMLResponse(_render_404_page(), status_code=404)

    return HTMLResponse(_render_paste_page(paste_id, paste))


def _render_paste_page(paste_id: str, paste: PasteView) -> str:
    """Render a paste with its content escaped."""
    details = []
    if paste.remaining_views is not None:
        details.append(f"<p>Remaining views: {paste.remaining_views}</p>")
    if paste.expires_at is not None:
        details.append(f"<p>Expires at: {html.escape(paste.expires_at)}</p>")

    extra = "".join(details)

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Paste - Pastebin Lite</title>
</head>
<body>
    <h1>Pastebin Lite</h1>
    <div>ID: {html.escape(paste_id)}</div>
    <pre>{html.escape(paste.content)}</pre>
    {extra}
</body>
</html>"""


def _render_404_page() -> str:
    """Render a 404 error page."""
    return """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Not Found - Pastebin Lite</title>
</head>
<body>
    <h1>404</h1>
    <p>This paste was not found, has expired, or its view limit has been exceeded.</p>
</body>
</html>"""
