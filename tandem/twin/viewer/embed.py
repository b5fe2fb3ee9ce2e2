# tandem/twin/viewer/embed.py
"""
Tandem facility viewer widget.

The widget renders a status line, a load/reload control and a viewer
surface, then embeds the Tandem web viewer in a frame. Tandem handles
authentication inside the frame, so no token is needed for viewing.

Tandem may refuse to be framed (X-Frame-Options) without the frame ever
reporting an error, so a delayed check looks at the frame document: an
empty same-origin document means nothing loaded and the fallback link is
shown. An unreadable (cross-origin) document counts as success. That
makes the check best-effort: a blocked cross-origin embed looks exactly
like a working one.
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping

from tandem.twin.viewer.config import ViewerConfig
from tandem.twin.viewer.facility import (
    build_tandem_url,
    facility_url,
    parse_facility_id,
)

logger = logging.getLogger(__name__)

NO_FACILITY_MESSAGE = "⚠ No facility URN configured"
LOADING_MESSAGE = "Loading Tandem viewer…"
LOAD_ERROR_MESSAGE = "⚠ Could not load Tandem viewer"
LOAD_LABEL = "Load Facility"
RELOAD_LABEL = "↻ Reload Facility"
FRAME_TITLE = "Autodesk Tandem – Facility Viewer"


class ViewerState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FALLBACK = "fallback"


class CrossOriginError(Exception):
    """The frame document belongs to another origin and cannot be read."""


@dataclass(frozen=True)
class FrameDocument:
    body: str | None


class EmbedFrame(ABC):
    """A mounted frame. The host calls on_load/on_error when the frame reports."""

    def __init__(self, url: str, title: str):
        self.url = url
        self.title = title
        self.on_load: Callable[[], None] | None = None
        self.on_error: Callable[[], None] | None = None

    @abstractmethod
    def read_document(self) -> FrameDocument | None:
        """Raise CrossOriginError when the document is not readable."""
        ...


class ViewerSurface(ABC):
    """Root container the widget renders into."""

    @property
    @abstractmethod
    def is_attached(self) -> bool: ...

    @abstractmethod
    def set_status(self, text: str) -> None: ...

    @abstractmethod
    def set_load_control(self, visible: bool, label: str) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...

    @abstractmethod
    def mount_frame(self, url: str, title: str) -> EmbedFrame: ...

    @abstractmethod
    def show_fallback(self, url: str) -> None: ...


class TwinViewer:
    """
    Widget controller bound to one surface.

    Loading a facility schedules the fallback check on ``loop``. When no loop
    is given, ``load_facility``, ``reload`` and ``mount`` must be called from a
    running event loop.
    """

    def __init__(
        self,
        config: ViewerConfig,
        surface: ViewerSurface,
        *,
        query: Mapping[str, str] | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        self._config = config
        self._surface = surface
        self._query = dict(query or {})
        self._loop = loop

        self._state = ViewerState.IDLE
        self._frame: EmbedFrame | None = None
        self._fallback_check: asyncio.TimerHandle | None = None
        self._load_label = LOAD_LABEL
        self._closed = False

    @property
    def state(self) -> ViewerState:
        return self._state

    @property
    def frame(self) -> EmbedFrame | None:
        return self._frame

    @property
    def fallback_pending(self) -> bool:
        return self._fallback_check is not None

    def mount(self) -> None:
        urn = self._config.default_facility_urn
        self._surface.set_load_control(bool(urn), self._load_label)
        # Without a URN this only reports the missing facility
        self.reload()

    def reload(self) -> EmbedFrame | None:
        return self.load_facility(self._config.default_facility_urn)

    def load_facility(self, urn: str | None) -> EmbedFrame | None:
        facility_id = parse_facility_id(urn)
        if not facility_id:
            self._surface.set_status(NO_FACILITY_MESSAGE)
            return None

        self._cancel_fallback_check()
        self._state = ViewerState.LOADING
        self._surface.set_status(LOADING_MESSAGE)
        self._surface.clear()

        url = build_tandem_url(facility_id, self._query, self._config.base_url)
        frame = self._surface.mount_frame(url, FRAME_TITLE)
        frame.on_load = lambda: self._handle_frame_load(frame)
        frame.on_error = lambda: self._handle_frame_error(frame, facility_id)
        self._frame = frame

        loop = self._loop or asyncio.get_running_loop()
        self._fallback_check = loop.call_later(
            self._config.fallback_delay,
            self._check_frame,
            frame,
            facility_id,
        )
        logger.info("Loading facility %s", facility_id, extra={"url": url})
        return frame

    def show_fallback(self, facility_id: str) -> None:
        self._cancel_fallback_check()
        self._surface.show_fallback(facility_url(facility_id, self._config.base_url))
        self._surface.set_status("")
        self._state = ViewerState.FALLBACK
        logger.info("Showing fallback link for facility %s", facility_id)

    def close(self) -> None:
        self._cancel_fallback_check()
        self._closed = True

    def _is_current(self, frame: EmbedFrame) -> bool:
        return not self._closed and frame is self._frame and self._surface.is_attached

    def _handle_frame_load(self, frame: EmbedFrame) -> None:
        if not self._is_current(frame):
            return
        self._surface.set_status("")
        self._load_label = RELOAD_LABEL
        self._surface.set_load_control(True, self._load_label)
        self._state = ViewerState.LOADED

    def _handle_frame_error(self, frame: EmbedFrame, facility_id: str) -> None:
        if not self._is_current(frame):
            return
        self._surface.set_status(LOAD_ERROR_MESSAGE)
        self.show_fallback(facility_id)

    def _check_frame(self, frame: EmbedFrame, facility_id: str) -> None:
        self._fallback_check = None
        if not self._is_current(frame):
            return

        try:
            document = frame.read_document()
        except CrossOriginError:
            # Tandem answered from its own origin: treat as loaded
            self._surface.set_status("")
            self._state = ViewerState.LOADED
            return

        if document is not None and document.body == "":
            logger.warning("Embedded viewer is empty for facility %s", facility_id)
            self.show_fallback(facility_id)

    def _cancel_fallback_check(self) -> None:
        if self._fallback_check is not None:
            self._fallback_check.cancel()
            self._fallback_check = None
