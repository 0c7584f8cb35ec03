from typing import Iterable, List, Optional


class FolioError(Exception):
    """Base class for every error raised while building a site."""


class MalformedFrontMatter(FolioError):
    """The metadata block at the top of a content file could not be read."""

    def __init__(self, reason: str, source: Optional[str] = None):
        self.reason = reason
        self.source = source
        super().__init__(reason if source is None else f"{source}: {reason}")

    def with_source(self, source: str) -> "MalformedFrontMatter":
        return MalformedFrontMatter(self.reason, source)


class InvalidPost(FolioError):
    """A post is missing a required field or carries an unusable value."""

    def __init__(self, source: str, field: str, reason: str):
        self.source = source
        self.field = field
        self.reason = reason
        super().__init__(f"{source}: invalid '{field}': {reason}")


class IoFailure(FolioError):
    """A content file or the content directory could not be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class BuildFailed(FolioError):
    """Raised by a strict build once every file has been tried."""

    def __init__(self, failures: Iterable[FolioError]):
        self.failures: List[FolioError] = list(failures)
        super().__init__(
            f"{len(self.failures)} file(s) failed: "
            + "; ".join(str(f) for f in self.failures)
        )


class BuildCancelled(FolioError):
    """The build was cancelled before every file was processed."""
