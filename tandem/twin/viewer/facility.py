# tandem/twin/viewer/facility.py
"""Facility URN parsing and Tandem viewer URL construction."""
from __future__ import annotations

import logging
from typing import Mapping

from tandem.twin.core.config import TANDEM_FACILITIES_URL

logger = logging.getLogger(__name__)

TANDEM_BASE = TANDEM_FACILITIES_URL

# Host page query parameters carried by QR deep-links
ASSET_PARAM = "asset"
TANDEM_PARAM = "tandem"


def parse_facility_id(urn: str | None) -> str | None:
    """
    Extract the facility id from a Tandem URN (``urn:adsk.dtt:<facilityId>``).

    Returns None for an empty URN or an empty trailing segment.
    """
    if not urn:
        return None
    return urn.rsplit(":", 1)[-1] or None


def facility_url(facility_id: str, base_url: str = TANDEM_BASE) -> str:
    return f"{base_url.rstrip('/')}/{facility_id}"


def build_tandem_url(
    facility_id: str,
    query: Mapping[str, str] | None = None,
    base_url: str = TANDEM_BASE,
) -> str:
    """
    Embed URL for a facility.

    A ``tandem`` deep-link on the host page wins over the derived URL and is
    used verbatim. ``asset`` is read but not applied: Tandem has no element
    selection parameter to forward it to yet.
    """
    query = query or {}

    tandem_link = query.get(TANDEM_PARAM)
    if tandem_link:
        return tandem_link

    asset_id = query.get(ASSET_PARAM)
    if asset_id:
        logger.debug("Ignoring asset deep-link %s for facility %s", asset_id, facility_id)

    return facility_url(facility_id, base_url)
