# tandem/twin/core/config.py
"""
Central configuration for the Tandem twin service.

Environment variables override defaults. Credential variable names follow
the Autodesk Platform Services convention (``FORGE_CLIENT_ID`` and
``FORGE_CLIENT_SECRET``) so existing ``.env`` files keep working.
"""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

AUTODESK_TOKEN_URL = "https://developer.api.autodesk.com/authentication/v2/token"
TANDEM_FACILITIES_URL = "https://tandem.autodesk.com/pages/facilities"


class Settings(BaseSettings):
    """Environment-driven settings with sensible defaults."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001)

    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Two-legged OAuth against the Autodesk identity API
    forge_client_id: str = Field(default="", description="APS client_id")
    forge_client_secret: str = Field(default="", description="APS client_secret")
    forge_token_url: str = Field(default=AUTODESK_TOKEN_URL)
    forge_token_scope: str = Field(default="data:read data:write")
    token_refresh_buffer_seconds: float = Field(
        default=300.0,
        description="Cached tokens closer than this to expiry are refreshed",
    )
    token_timeout_seconds: float | None = Field(
        default=None,
        description="Timeout for the upstream token call (None = no timeout)",
    )

    # Viewer embed
    tandem_base_url: str = Field(default=TANDEM_FACILITIES_URL)
    default_facility_urn: str | None = Field(
        default=None,
        description="Facility URN auto-loaded by the viewer, e.g. urn:adsk.dtt:<id>",
    )
    viewer_fallback_delay_seconds: float = Field(default=5.0)

    @property
    def has_credentials(self) -> bool:
        return bool(self.forge_client_id and self.forge_client_secret)


settings = Settings()
