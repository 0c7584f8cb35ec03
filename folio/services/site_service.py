import logging
from typing import List, Optional

from folio.schemas.post import PostDetail, PostSummary
from folio.schemas.site import BuildWarning, SiteModel, TagSummary
from folio.services.content_renderer import render_html
from folio.services.indexer import tag_key

logger = logging.getLogger(__name__)


class SiteService:
    """Read-only views over a built SiteModel."""

    def __init__(self, site: SiteModel, *, tag_case_sensitive: bool = True):
        self.site = site
        self.tag_case_sensitive = tag_case_sensitive

    def list_posts(self) -> List[PostSummary]:
        return [PostSummary.from_post(p) for p in self.site.public_posts()]

    def get_post(self, slug: str) -> Optional[PostDetail]:
        post = next(
            (p for p in self.site.public_posts() if p.slug == slug),
            None,
        )
        if not post:
            return None
        summary = PostSummary.from_post(post)
        return PostDetail(
            **summary.model_dump(),
            blocks=list(post.blocks),
            html=render_html(post.blocks),
        )

    def list_tags(self) -> List[TagSummary]:
        return [
            TagSummary(tag=tag, count=len(collection.posts))
            for tag, collection in self.site.tags.items()
        ]

    def get_tag(self, tag: str) -> Optional[List[PostSummary]]:
        key = tag_key(tag, tag_case_sensitive=self.tag_case_sensitive)
        if key not in self.site.tags:
            return None
        return [PostSummary.from_post(p) for p in self.site.tag_posts(key)]

    def list_warnings(self) -> List[BuildWarning]:
        return list(self.site.warnings)
