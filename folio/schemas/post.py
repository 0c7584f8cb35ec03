from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from folio.schemas.blocks import ContentBlock


class Post(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    slug: str
    title: str
    published_at: datetime
    tags: Tuple[str, ...] = ()
    trending: bool = False
    read_time: Optional[str] = None
    thumbnail: Optional[str] = None
    draft: bool = False
    blocks: Tuple[ContentBlock, ...] = ()
    extra: Dict[str, Any] = Field(default_factory=dict)


class PostSummary(BaseModel):
    source: str
    slug: str
    title: str
    publishedAt: str
    tags: List[str] = Field(default_factory=list)
    trending: bool = False
    readTime: Optional[str] = None
    thumbnail: Optional[str] = None

    @classmethod
    def from_post(cls, post: Post) -> "PostSummary":
        return cls(
            source=post.source,
            slug=post.slug,
            title=post.title,
            publishedAt=post.published_at.isoformat(),
            tags=list(post.tags),
            trending=post.trending,
            readTime=post.read_time,
            thumbnail=post.thumbnail,
        )


class PostDetail(PostSummary):
    blocks: List[ContentBlock] = Field(default_factory=list)
    html: str = ""
