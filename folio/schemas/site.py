from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from folio.schemas.post import Post


class Collection(BaseModel):
    """Ordered references (by source) to posts sharing an attribute."""

    model_config = ConfigDict(frozen=True)

    name: str
    tag: Optional[str] = None
    posts: Tuple[str, ...] = ()


class BuildWarning(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    error: str
    reason: str


class SiteModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    posts: Dict[str, Post] = Field(default_factory=dict)
    all: Collection = Field(default_factory=lambda: Collection(name="all"))
    tags: Dict[str, Collection] = Field(default_factory=dict)
    warnings: Tuple[BuildWarning, ...] = ()

    def resolve(self, collection: Collection) -> Tuple[Post, ...]:
        return tuple(self.posts[source] for source in collection.posts)

    def public_posts(self) -> Tuple[Post, ...]:
        return self.resolve(self.all)

    def tag_posts(self, tag: str) -> Tuple[Post, ...]:
        collection = self.tags.get(tag)
        return self.resolve(collection) if collection is not None else ()


class TagSummary(BaseModel):
    tag: str
    count: int
