import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from folio import dependencies as deps
from folio.schemas.post import PostDetail, PostSummary
from folio.schemas.site import BuildWarning, TagSummary
from folio.services.site_service import SiteService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/posts", response_model=List[PostSummary])
def list_posts(service: SiteService = Depends(deps.get_site_service)):
    """Get all public posts, newest first."""
    try:
        return service.list_posts()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error listing posts: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve posts")


@router.get("/posts/{slug:path}", response_model=PostDetail)
def get_post(
    slug: str,
    service: SiteService = Depends(deps.get_site_service),
):
    """Get a single public post by slug."""
    try:
        post = service.get_post(slug)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")
        return post
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error retrieving post {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve post")


@router.get("/tags", response_model=List[TagSummary])
def list_tags(service: SiteService = Depends(deps.get_site_service)):
    return service.list_tags()


@router.get("/tags/{tag}", response_model=List[PostSummary])
def get_tag(tag: str, service: SiteService = Depends(deps.get_site_service)):
    """Get the public posts carrying a tag."""
    try:
        posts = service.get_tag(tag)
        if posts is None:
            raise HTTPException(status_code=404, detail="Tag not found")
        return posts
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error retrieving tag {tag}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve tag")


@router.get("/warnings", response_model=List[BuildWarning])
def list_warnings(service: SiteService = Depends(deps.get_site_service)):
    return service.list_warnings()
