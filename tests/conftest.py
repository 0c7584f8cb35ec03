import datetime
import textwrap

from folio.errors import IoFailure
from folio.schemas.post import Post


class FakeContentRepo:
    """
    In-memory stand-in for FilesystemContentRepo.
    Values may be str (encoded as UTF-8), bytes, or an exception to raise on read.
    """

    def __init__(self, files: dict, missing: bool = False):
        self.files = files
        self.missing = missing
        self.reads = []

    def list_identities(self):
        if self.missing:
            raise IoFailure("content", "content directory does not exist")
        return sorted(self.files)

    def read(self, identity: str) -> bytes:
        self.reads.append(identity)
        raw = self.files[identity]
        if isinstance(raw, Exception):
            raise raw
        if isinstance(raw, str):
            return dedent(raw).encode("utf-8")
        return raw


def dedent(text: str) -> str:
    return textwrap.dedent(text).lstrip()


def make_post(source: str, published: str = "2024-01-01", **kwargs) -> Post:
    """Build a Post directly, bypassing parsing."""
    stamp = datetime.datetime.fromisoformat(published)
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=datetime.timezone.utc)
    return Post(
        source=source,
        slug=source.rsplit(".", 1)[0],
        title=kwargs.pop("title", source),
        published_at=stamp,
        **kwargs,
    )


class FakeSiteService:
    """
    Minimal site service stand-in for router tests.
    """

    def __init__(
        self,
        list_posts_return=None,
        get_post_return=None,
        tags_return=None,
        get_tag_return=None,
        warnings_return=None,
    ):
        self._list_posts_return = list_posts_return or []
        self._get_post_return = get_post_return
        self._tags_return = tags_return or []
        self._get_tag_return = get_tag_return
        self._warnings_return = warnings_return or []
        self.calls = []

    def list_posts(self):
        return self._list_posts_return

    def get_post(self, slug: str):
        self.calls.append(slug)
        return self._get_post_return

    def list_tags(self):
        return self._tags_return

    def get_tag(self, tag: str):
        self.calls.append(tag)
        return self._get_tag_return

    def list_warnings(self):
        return self._warnings_return
