from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class _Block(BaseModel):
    model_config = ConfigDict(frozen=True)


class Paragraph(_Block):
    kind: Literal["paragraph"] = "paragraph"
    text: str


class Heading(_Block):
    kind: Literal["heading"] = "heading"
    level: int = Field(ge=1, le=6)
    text: str


class CodeBlock(_Block):
    kind: Literal["code"] = "code"
    language: str = "text"
    text: str


class ListBlock(_Block):
    kind: Literal["list"] = "list"
    items: Tuple[str, ...] = ()
    ordered: bool = False


class Image(_Block):
    kind: Literal["image"] = "image"
    src: str
    caption: Optional[str] = None


class Blockquote(_Block):
    kind: Literal["blockquote"] = "blockquote"
    text: str


ContentBlock = Annotated[
    Union[Paragraph, Heading, CodeBlock, ListBlock, Image, Blockquote],
    Field(discriminator="kind"),
]
