import pytest

from tandem.twin.viewer.config import ViewerConfig
from tandem.twin.viewer.embed import CrossOriginError, TwinViewer, ViewerState
from tandem.twin.viewer.html import HtmlSurface


def test_html_frame_is_never_readable():
    surface = HtmlSurface()
    frame = surface.mount_frame("https://x", "Viewer")

    with pytest.raises(CrossOriginError):
        frame.read_document()
    assert 'src="https://x"' in surface.content


def test_fallback_replaces_frame_markup():
    surface = HtmlSurface()
    surface.mount_frame("https://x", "Viewer")

    surface.show_fallback("https://tandem.example/f1")

    assert surface.frame is None
    assert "<iframe" not in surface.content
    assert 'href="https://tandem.example/f1"' in surface.content
    assert "Open Tandem in New Tab" in surface.content


def test_markup_is_escaped():
    surface = HtmlSurface()
    surface.mount_frame('https://x/"><script>', "Viewer")

    assert "<script>" not in surface.content


@pytest.mark.asyncio
async def test_render_page_after_frame_error():
    config = ViewerConfig(default_facility_urn="urn:adsk.dtt:f1")
    surface = HtmlSurface()
    viewer = TwinViewer(config, surface)
    viewer.mount()

    surface.frame.on_error()
    html = surface.render(config, viewer.state, None)

    assert viewer.state == ViewerState.FALLBACK
    assert 'data-state="fallback"' in html
    assert "<iframe" not in html
    assert "<script>" not in html
    surface.detach()
    assert not surface.is_attached
