# tandem/twin/viewer/__init__.py
"""Tandem facility viewer embed."""

from tandem.twin.viewer.config import ViewerConfig
from tandem.twin.viewer.embed import (
    CrossOriginError,
    EmbedFrame,
    FrameDocument,
    TwinViewer,
    ViewerState,
    ViewerSurface,
)
from tandem.twin.viewer.facility import build_tandem_url, facility_url, parse_facility_id

__all__ = [
    "ViewerConfig",
    "CrossOriginError",
    "EmbedFrame",
    "FrameDocument",
    "TwinViewer",
    "ViewerState",
    "ViewerSurface",
    "build_tandem_url",
    "facility_url",
    "parse_facility_id",
]
