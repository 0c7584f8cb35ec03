import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Security
from fastapi.security.api_key import APIKeyHeader
from starlette.status import HTTP_403_FORBIDDEN

from folio.settings import Settings, settings

logger = logging.getLogger(__name__)

API_KEY_NAME = "X-Folio-Key"
api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=False)


def get_settings() -> Settings:
    """Small wrapper to allow dependency overrides in tests."""
    return settings


def get_api_key(
    api_key_header: Optional[str] = Security(api_key_header),
    current_settings: Settings = Depends(get_settings),
) -> Optional[str]:
    """
    Guard the read API with the ``X-Folio-Key`` header.

    With no ``FOLIO_API_KEY`` configured the API is open, which is the usual
    case for previewing a site locally. Once a key is set, every request must
    carry it.
    """
    expected = current_settings.FOLIO_API_KEY
    if not expected:
        return None
    if api_key_header and secrets.compare_digest(api_key_header, expected):
        return api_key_header
    logger.debug("Rejected request with missing or wrong API key")
    raise HTTPException(
        status_code=HTTP_403_FORBIDDEN,
        detail="Could not validate API key",
    )
