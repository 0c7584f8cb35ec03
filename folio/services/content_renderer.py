import html
import logging
import re
from typing import Iterable, Iterator, List, Optional, Tuple

import markdown

from folio.schemas.blocks import (
    Blockquote,
    CodeBlock,
    ContentBlock,
    Heading,
    Image,
    ListBlock,
    Paragraph,
)

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "text"

FENCE_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
HEADING_RE = re.compile(r"^ {0,3}(?P<marks>#{1,6})(?:[ \t]+(?P<text>.*?))?[ \t]*$")
SETEXT_RE = re.compile(r"^ {0,3}(?P<underline>=+|-+)[ \t]*$")
BREAK_RE = re.compile(r"^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")
QUOTE_RE = re.compile(r"^ {0,3}>[ ]?(?P<text>.*)$")
LIST_RE = re.compile(
    r"^ {0,3}(?:(?P<bullet>[-*+])|(?P<number>\d{1,9})[.)])(?:[ \t]+(?P<text>.*)|$)"
)
IMAGE_RE = re.compile(
    r"^!\[(?P<alt>[^\]]*)\]\(\s*(?P<src>[^)\s]+)(?:\s+\"(?P<title>[^\"]*)\")?\s*\)$"
)
CLOSING_HASHES_RE = re.compile(r"(?:^|[ \t]+)#+$")


class ContentRenderer:
    """
    Turns a Markdown body into content blocks.

    Blocks are produced lazily; each iteration scans the body again from the
    start, so the same renderer can be walked any number of times.
    """

    def __init__(self, body: str):
        self.body = body

    def __iter__(self) -> Iterator[ContentBlock]:
        return _scan(split_lines(self.body))


def split_lines(text: str) -> List[str]:
    """Split on \n only; other line-break characters are kept as text."""
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    return lines[:-1] if lines and not lines[-1] else lines


def render_blocks(body: str) -> Tuple[ContentBlock, ...]:
    return tuple(ContentRenderer(body))


def _scan(lines: List[str]) -> Iterator[ContentBlock]:
    paragraph: List[str] = []
    i = 0
    n = len(lines)

    while i < n:
        line = lines[i]

        if paragraph:
            setext = SETEXT_RE.match(line)
            if setext:
                level = 1 if setext.group("underline")[0] == "=" else 2
                yield Heading(level=level, text="\n".join(paragraph))
                paragraph = []
                i += 1
                continue
            if not line.strip() or _starts_block(line, in_paragraph=True):
                yield Paragraph(text="\n".join(paragraph))
                paragraph = []
            else:
                paragraph.append(line.strip())
                i += 1
                continue

        if not line.strip():
            i += 1
            continue

        fence = _open_fence(line)
        if fence:
            char, length, language = fence
            code: List[str] = []
            i += 1
            while i < n and not _closes_fence(lines[i], char, length):
                code.append(lines[i])
                i += 1
            if i >= n:
                logger.debug(f"Unterminated {language} fence runs to end of body")
            i += 1
            yield CodeBlock(language=language, text="\n".join(code))
            continue

        heading = HEADING_RE.match(line)
        if heading:
            yield Heading(
                level=len(heading.group("marks")),
                text=_strip_closing_hashes(heading.group("text") or ""),
            )
            i += 1
            continue

        if BREAK_RE.match(line):
            i += 1
            continue

        if QUOTE_RE.match(line):
            quoted = []
            while i < n:
                match = QUOTE_RE.match(lines[i])
                if not match:
                    break
                quoted.append(match.group("text"))
                i += 1
            yield Blockquote(text="\n".join(quoted).strip())
            continue

        if LIST_RE.match(line):
            block, i = _read_list(lines, i)
            yield block
            continue

        image = IMAGE_RE.match(line.strip())
        if image:
            yield Image(
                src=image.group("src"),
                caption=image.group("title") or image.group("alt") or None,
            )
            i += 1
            continue

        paragraph.append(line.strip())
        i += 1

    if paragraph:
        yield Paragraph(text="\n".join(paragraph))


def _open_fence(line: str) -> Optional[Tuple[str, int, str]]:
    match = FENCE_RE.match(line)
    if not match:
        return None
    fence = match.group("fence")
    info = match.group("info").strip()
    # A backtick fence never carries backticks in its info string
    if fence[0] == "`" and "`" in info:
        return None
    language = info.split()[0] if info else DEFAULT_LANGUAGE
    return fence[0], len(fence), language


def _closes_fence(line: str, char: str, length: int) -> bool:
    stripped = line.strip()
    return (
        len(line) - len(line.lstrip(" ")) <= 3
        and len(stripped) >= length
        and stripped == char * len(stripped)
    )


def _strip_closing_hashes(text: str) -> str:
    return CLOSING_HASHES_RE.sub("", text.strip()).strip()


def _is_ordered(match: re.Match) -> bool:
    return match.group("number") is not None


def _starts_block(line: str, in_paragraph: bool = False) -> bool:
    if _open_fence(line) or HEADING_RE.match(line) or QUOTE_RE.match(line):
        return True
    if BREAK_RE.match(line) or IMAGE_RE.match(line.strip()):
        return True
    item = LIST_RE.match(line)
    if not item or not item.group("text"):
        return False
    # Only a list starting at 1 may interrupt running prose
    return not (in_paragraph and _is_ordered(item) and item.group("number") != "1")


def _read_list(lines: List[str], i: int) -> Tuple[ListBlock, int]:
    ordered = _is_ordered(LIST_RE.match(lines[i]))
    items: List[str] = []
    n = len(lines)

    while i < n:
        line = lines[i]
        match = LIST_RE.match(line)
        if match and not BREAK_RE.match(line):
            if _is_ordered(match) != ordered:
                break
            items.append((match.group("text") or "").strip())
            i += 1
            continue

        if not line.strip():
            following = i + 1
            while following < n and not lines[following].strip():
                following += 1
            nxt = LIST_RE.match(lines[following]) if following < n else None
            if nxt and _is_ordered(nxt) == ordered:
                i = following
                continue
            break

        if _starts_block(line):
            break
        items[-1] = f"{items[-1]} {line.strip()}".strip()
        i += 1

    return ListBlock(items=tuple(items), ordered=ordered), i


def render_html(blocks: Iterable[ContentBlock]) -> str:
    """Render content blocks to an HTML fragment."""
    md = markdown.Markdown(output_format="html")
    parts = []
    for block in blocks:
        if isinstance(block, Paragraph):
            parts.append(f"<p>{_inline(md, block.text)}</p>")
        elif isinstance(block, Heading):
            parts.append(f"<h{block.level}>{_inline(md, block.text)}</h{block.level}>")
        elif isinstance(block, CodeBlock):
            language = html.escape(block.language, quote=True)
            parts.append(
                f'<pre><code class="language-{language}">'
                f"{html.escape(block.text, quote=False)}</code></pre>"
            )
        elif isinstance(block, ListBlock):
            tag = "ol" if block.ordered else "ul"
            items = "".join(f"<li>{_inline(md, item)}</li>" for item in block.items)
            parts.append(f"<{tag}>{items}</{tag}>")
        elif isinstance(block, Image):
            src = html.escape(block.src, quote=True)
            caption = html.escape(block.caption or "", quote=True)
            figure = f'<img src="{src}" alt="{caption}">'
            if block.caption:
                figure += f"<figcaption>{_inline(md, block.caption)}</figcaption>"
            parts.append(f"<figure>{figure}</figure>")
        elif isinstance(block, Blockquote):
            parts.append(f"<blockquote><p>{_inline(md, block.text)}</p></blockquote>")
    return "\n".join(parts)


def _inline(md: markdown.Markdown, text: str) -> str:
    """Convert inline markup only, dropping the paragraph wrapper markdown adds."""
    converted = md.reset().convert(text)
    if converted.startswith("<p>") and converted.endswith("</p>"):
        converted = converted[3:-4]
    return converted
