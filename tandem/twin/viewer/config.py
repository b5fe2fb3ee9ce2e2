# tandem/twin/viewer/config.py
from __future__ import annotations

from dataclasses import dataclass

from tandem.twin.core.config import Settings
from tandem.twin.viewer.facility import TANDEM_BASE


@dataclass(frozen=True)
class ViewerConfig:
    """
    Recognized viewer options.

    default_facility_urn:
        Shows the load control and auto-loads this facility on mount.
        When None the control is hidden and nothing is loaded.
    base_url:
        Tandem facilities page prefix used to derive embed and fallback URLs.
    fallback_delay:
        Seconds after frame creation before the embed-blocked check runs.
    """

    default_facility_urn: str | None = None
    base_url: str = TANDEM_BASE
    fallback_delay: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ViewerConfig":
        return cls(
            default_facility_urn=settings.default_facility_urn or None,
            base_url=settings.tandem_base_url,
            fallback_delay=settings.viewer_fallback_delay_seconds,
        )
