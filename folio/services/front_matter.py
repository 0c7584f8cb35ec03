import logging
from typing import Any, Dict, List, Tuple

import frontmatter
import yaml
from frontmatter import YAMLHandler

from folio.errors import MalformedFrontMatter

logger = logging.getLogger(__name__)

DELIMITER = "---"
CLOSING_DELIMITERS = ("---", "...")
BOM = "\ufeff"

_handler = YAMLHandler()


def parse_front_matter(text: str) -> Tuple[Dict[str, Any], int]:
    """
    Read the metadata block at the top of ``text``.

    Returns the metadata mapping and the offset in ``text`` where the body
    starts. Text without an opening delimiter has no metadata and its body
    starts at 0.
    """
    start = 1 if text.startswith(BOM) else 0
    lines = _split_lines(text[start:])
    if not lines or lines[0].rstrip() != DELIMITER:
        return {}, 0

    offset = start + len(lines[0])
    block_start = offset
    for line in lines[1:]:
        if line.rstrip() in CLOSING_DELIMITERS:
            metadata = _load_block(text[block_start:offset])
            return metadata, offset + len(line)
        offset += len(line)

    raise MalformedFrontMatter("front matter opened but never closed")


def split_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    metadata, offset = parse_front_matter(text)
    return metadata, text[offset:]


def dump_front_matter(metadata: Dict[str, Any], body: str = "") -> str:
    """Serialize metadata (and an optional body) back into front-matter text."""
    post = frontmatter.Post(body, handler=_handler)
    post.metadata.update(metadata)
    return frontmatter.dumps(post) + "\n"


def _load_block(block: str) -> Dict[str, Any]:
    if not block.strip():
        return {}
    try:
        loaded = _handler.load(block)
    except (yaml.YAMLError, ValueError) as e:
        raise MalformedFrontMatter(f"front matter is not valid YAML: {e}") from e

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise MalformedFrontMatter(
            f"front matter must be a mapping, got {type(loaded).__name__}"
        )

    for key, value in loaded.items():
        if not isinstance(key, str):
            raise MalformedFrontMatter(f"front matter key {key!r} is not a string")
        if isinstance(value, dict) or (
            isinstance(value, list) and any(isinstance(v, (dict, list)) for v in value)
        ):
            raise MalformedFrontMatter(f"front matter key '{key}' is not flat")

    logger.debug(f"Parsed front matter keys: {sorted(loaded)}")
    return loaded


def _split_lines(text: str) -> List[str]:
    """Split on newlines only, keeping line endings so offsets stay exact."""
    lines = [line + "\n" for line in text.split("\n")]
    lines[-1] = lines[-1][:-1]
    return lines if lines[-1] else lines[:-1]
