from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse

from tandem.twin.viewer.config import ViewerConfig
from tandem.twin.viewer.embed import TwinViewer
from tandem.twin.viewer.facility import facility_url, parse_facility_id
from tandem.twin.viewer.html import HtmlSurface

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_class=HTMLResponse)
async def twin_page(request: Request) -> HTMLResponse:
    """
    Host page for the facility viewer.

    Honors the ``tandem`` and ``asset`` deep-link parameters of the request.
    """
    config: ViewerConfig | None = getattr(request.app.state, "viewer_config", None)

    if config is None:
        raise HTTPException(
            status_code=500,
            detail="Viewer not initialized",
        )

    surface = HtmlSurface()
    viewer = TwinViewer(config, surface, query=request.query_params)
    try:
        viewer.mount()
        facility_id = parse_facility_id(config.default_facility_urn)
        fallback_url = facility_url(facility_id, config.base_url) if facility_id else None
        html = surface.render(config, viewer.state, fallback_url)
    finally:
        # The browser runs its own fallback check from here on
        viewer.close()
        surface.detach()

    return HTMLResponse(html)
