import logging
from typing import Dict, Iterable, List, Tuple

from folio.schemas.post import Post
from folio.schemas.site import Collection

logger = logging.getLogger(__name__)

ALL_COLLECTION = "all"


def sort_key(post: Post):
    """Newest first; equal timestamps fall back to source order."""
    return (-post.published_at.timestamp(), post.source)


def tag_key(tag: str, *, tag_case_sensitive: bool = True) -> str:
    return tag if tag_case_sensitive else tag.casefold()


def build_collections(
    posts: Iterable[Post], *, tag_case_sensitive: bool = True
) -> Tuple[Collection, Dict[str, Collection]]:
    """
    Group non-draft posts into the "all" collection and one collection per tag.

    Pure function of its input: the same posts in any order give the same
    collections in the same order.
    """
    public = sorted((p for p in posts if not p.draft), key=sort_key)

    by_tag: Dict[str, List[str]] = {}
    for post in public:
        for tag in post.tags:
            members = by_tag.setdefault(
                tag_key(tag, tag_case_sensitive=tag_case_sensitive), []
            )
            # a post may list the same tag in several spellings
            if not members or members[-1] != post.source:
                members.append(post.source)

    all_posts = Collection(
        name=ALL_COLLECTION,
        posts=_unique(p.source for p in public),
    )
    tags = {
        tag: Collection(name=tag, tag=tag, posts=tuple(by_tag[tag]))
        for tag in sorted(by_tag)
    }
    logger.debug(f"Indexed {len(all_posts.posts)} public posts into {len(tags)} tags")
    return all_posts, tags


def _unique(sources: Iterable[str]) -> Tuple[str, ...]:
    seen = set()
    ordered = []
    for source in sources:
        if source not in seen:
            seen.add(source)
            ordered.append(source)
    return tuple(ordered)
