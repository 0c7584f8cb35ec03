from fastapi import Depends, HTTPException, Request

from folio.schemas.site import SiteModel
from folio.services.site_service import SiteService
from folio.settings import settings


def get_site(request: Request) -> SiteModel:
    site = getattr(request.app.state, "site", None)
    if site is None:
        raise HTTPException(status_code=503, detail="Site has not been built")
    return site


def get_site_service(site=Depends(get_site)):
    return SiteService(site, tag_case_sensitive=settings.TAG_CASE_SENSITIVE)
