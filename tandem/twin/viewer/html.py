# tandem/twin/viewer/html.py
"""
Server-side HTML rendering of the viewer widget.

``HtmlSurface`` collects what the widget draws and renders it through the
Jinja2 templates shipped next to this module. The browser repeats the
delayed fallback check itself, since only it can see the frame.
"""
from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from tandem.twin.viewer.config import ViewerConfig
from tandem.twin.viewer.embed import (
    CrossOriginError,
    EmbedFrame,
    FrameDocument,
    ViewerState,
    ViewerSurface,
)

TEMPLATES_DIR = Path(__file__).parent / "templates"


def _create_jinja_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
        keep_trailing_newline=True,
    )


_env = _create_jinja_env()


class HtmlFrame(EmbedFrame):
    def read_document(self) -> FrameDocument | None:
        raise CrossOriginError("frame document is only visible to the browser")


class HtmlSurface(ViewerSurface):
    def __init__(self, env: Environment | None = None):
        self._env = env or _env
        self._attached = True

        self.status = ""
        self.load_visible = False
        self.load_label = ""
        self.content = ""
        self.frame: HtmlFrame | None = None

    @property
    def is_attached(self) -> bool:
        return self._attached

    def detach(self) -> None:
        self._attached = False

    def set_status(self, text: str) -> None:
        self.status = text

    def set_load_control(self, visible: bool, label: str) -> None:
        self.load_visible = visible
        self.load_label = label

    def clear(self) -> None:
        self.content = ""
        self.frame = None

    def mount_frame(self, url: str, title: str) -> EmbedFrame:
        self.frame = HtmlFrame(url, title)
        self.content = self._env.get_template("frame.html").render(url=url, title=title)
        return self.frame

    def show_fallback(self, url: str) -> None:
        self.frame = None
        self.content = self.fallback_markup(url)

    def fallback_markup(self, url: str) -> str:
        return self._env.get_template("fallback.html").render(url=url)

    def render(self, config: ViewerConfig, state: ViewerState, fallback_url: str | None) -> str:
        return self._env.get_template("twin.html").render(
            status=self.status,
            load_visible=self.load_visible,
            load_label=self.load_label,
            content=self.content,
            state=state.value,
            fallback_delay_ms=int(config.fallback_delay * 1000),
            fallback_html=self.fallback_markup(fallback_url) if fallback_url else "",
        )
