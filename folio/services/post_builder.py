import datetime
import logging
import posixpath
from typing import Any, Dict, Iterable, List, Optional, Tuple

from folio.errors import InvalidPost
from folio.schemas.blocks import (
    Blockquote,
    CodeBlock,
    ContentBlock,
    Heading,
    Image,
    ListBlock,
    Paragraph,
)
from folio.schemas.post import Post
from folio.utils import WORDS_PER_MINUTE, calculate_reading_time

logger = logging.getLogger(__name__)

TIMESTAMP_KEYS = ("date", "publishedAt")
READ_TIME_KEYS = ("readTime", "read_time")
THUMBNAIL_KEYS = ("thumbnail", "image")
RECOGNIZED_KEYS = frozenset(
    ("title", "tags", "trending", "draft")
    + TIMESTAMP_KEYS
    + READ_TIME_KEYS
    + THUMBNAIL_KEYS
)

_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0"}


def build_post(
    metadata: Dict[str, Any],
    blocks: Iterable[ContentBlock],
    source: str,
    *,
    body: Optional[str] = None,
    words_per_minute: int = WORDS_PER_MINUTE,
) -> Post:
    """Validate front-matter metadata and combine it with rendered blocks into a Post."""
    metadata = metadata or {}
    blocks = tuple(blocks)

    title = _require_title(metadata, source)
    published_at = _require_timestamp(metadata, source)

    read_time = _first(metadata, READ_TIME_KEYS)
    if read_time is None:
        text = body if body is not None else _block_text(blocks)
        read_time = calculate_reading_time(text, words_per_minute)

    thumbnail = _first(metadata, THUMBNAIL_KEYS)
    extra = {k: v for k, v in metadata.items() if k not in RECOGNIZED_KEYS}
    if extra:
        logger.debug(f"{source}: passing through keys {sorted(extra)}")

    return Post(
        source=source,
        slug=normalize_slug(source),
        title=title,
        published_at=published_at,
        tags=normalize_tags(metadata.get("tags")),
        trending=_coerce_bool(metadata.get("trending"), source, "trending"),
        read_time=str(read_time),
        thumbnail=str(thumbnail) if thumbnail is not None else None,
        draft=_coerce_bool(metadata.get("draft"), source, "draft"),
        blocks=blocks,
        extra=extra,
    )


def normalize_slug(source: str) -> str:
    """Remove extension so the slug can be used for navigation."""
    base, _ = posixpath.splitext(source)
    return base


def normalize_tags(value) -> Tuple[str, ...]:
    """
    Normalize tag metadata into an ordered, duplicate-free tuple of strings.
    A plain string is treated as a comma-separated list.
    """
    if value is None or value == "":
        return ()
    if isinstance(value, str):
        items: List[Any] = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        items = list(value)
    else:
        items = [value]

    seen = []
    for item in items:
        if item is None:
            continue
        tag = str(item).strip()
        if tag and tag not in seen:
            seen.append(tag)
    return tuple(seen)


def parse_timestamp(value, source: str, field: str) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        stamp = value
    elif isinstance(value, datetime.date):
        stamp = datetime.datetime.combine(value, datetime.time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            stamp = datetime.datetime.fromisoformat(text)
        except ValueError:
            raise InvalidPost(source, field, f"'{value}' is not an ISO-8601 date")
    else:
        raise InvalidPost(source, field, f"expected a date, got {type(value).__name__}")

    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=datetime.timezone.utc)
    return stamp


def _require_title(metadata: Dict[str, Any], source: str) -> str:
    title = metadata.get("title")
    if isinstance(title, bool) or title is None:
        raise InvalidPost(source, "title", "missing required field")
    title = str(title).strip()
    if not title:
        raise InvalidPost(source, "title", "missing required field")
    return title


def _require_timestamp(metadata: Dict[str, Any], source: str) -> datetime.datetime:
    for key in TIMESTAMP_KEYS:
        value = metadata.get(key)
        if value is not None and value != "":
            return parse_timestamp(value, source, key)
    raise InvalidPost(source, "date", "missing required field")


def _coerce_bool(value, source: str, field: str, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
    raise InvalidPost(source, field, f"expected true or false, got {value!r}")


def _first(metadata: Dict[str, Any], keys: Tuple[str, ...]):
    for key in keys:
        if metadata.get(key) is not None:
            return metadata[key]
    return None


def _block_text(blocks: Tuple[ContentBlock, ...]) -> str:
    parts = []
    for block in blocks:
        if isinstance(block, (Paragraph, Heading, CodeBlock, Blockquote)):
            parts.append(block.text)
        elif isinstance(block, ListBlock):
            parts.extend(block.items)
        elif isinstance(block, Image) and block.caption:
            parts.append(block.caption)
    return "\n".join(parts)
