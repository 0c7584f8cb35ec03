import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

from folio.errors import (
    BuildCancelled,
    BuildFailed,
    FolioError,
    InvalidPost,
    IoFailure,
    MalformedFrontMatter,
)
from folio.repos.content_repo import FilesystemContentRepo
from folio.schemas.post import Post
from folio.schemas.site import BuildWarning, SiteModel
from folio.services.content_renderer import ContentRenderer
from folio.services.front_matter import parse_front_matter
from folio.services.indexer import build_collections
from folio.services.post_builder import build_post
from folio.settings import Settings, settings
from folio.utils import WORDS_PER_MINUTE

logger = logging.getLogger(__name__)

FileOutcome = Tuple[Optional[Post], Optional[FolioError]]


class SiteAssembler:
    """
    Builds a SiteModel from every file a content repo lists.

    Files are parsed independently on a thread pool; results are merged on the
    calling thread in identity order before the collections are indexed.
    """

    def __init__(
        self,
        repo,
        *,
        strict: bool = False,
        tag_case_sensitive: bool = True,
        max_workers: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
        words_per_minute: int = WORDS_PER_MINUTE,
    ):
        self.repo = repo
        self.strict = strict
        self.tag_case_sensitive = tag_case_sensitive
        self.max_workers = max_workers
        self.cancel_event = cancel_event or threading.Event()
        self.words_per_minute = words_per_minute

    def build(self) -> SiteModel:
        identities = self.repo.list_identities()
        logger.info(f"Building site from {len(identities)} content files")

        unique: List[str] = []
        failures: List[FolioError] = []
        for identity in identities:
            if identity in unique:
                failures.append(
                    InvalidPost(identity, "source", "duplicate content identity")
                )
            else:
                unique.append(identity)

        posts: Dict[str, Post] = {}
        for identity, (post, error) in self._process_all(unique):
            if error is not None:
                failures.append(error)
            else:
                posts[identity] = post

        warnings = tuple(_to_warning(f) for f in failures)
        for warning in warnings:
            logger.warning(f"Skipped {warning.source}: {warning.reason}")

        if self.strict and failures:
            raise BuildFailed(failures)

        all_posts, tags = build_collections(
            posts.values(), tag_case_sensitive=self.tag_case_sensitive
        )
        site = SiteModel(posts=posts, all=all_posts, tags=tags, warnings=warnings)
        logger.info(
            f"Built {len(posts)} posts ({len(all_posts.posts)} public, "
            f"{len(tags)} tags, {len(warnings)} warnings)"
        )
        return site

    def cancel(self) -> None:
        """Stop the build before the next file is started."""
        self.cancel_event.set()

    def _process_all(self, identities: List[str]) -> List[Tuple[str, FileOutcome]]:
        self._check_cancelled()
        outcomes = []
        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="folio-build"
        ) as pool:
            futures: List[Tuple[str, Future]] = [
                (identity, pool.submit(self._process_file, identity))
                for identity in identities
            ]
            try:
                for identity, future in futures:
                    outcomes.append((identity, future.result()))
                    self._check_cancelled()
            except BuildCancelled:
                for _, future in futures:
                    future.cancel()
                logger.info(
                    f"Build cancelled after {len(outcomes)}/{len(futures)} files"
                )
                raise
        return outcomes

    def _process_file(self, identity: str) -> FileOutcome:
        self._check_cancelled()
        try:
            text = _decode(self.repo.read(identity), identity)
            metadata, offset = parse_front_matter(text)
            body = text[offset:]
            post = build_post(
                metadata,
                ContentRenderer(body),
                identity,
                body=body,
                words_per_minute=self.words_per_minute,
            )
            logger.debug(f"Parsed {identity} ({len(post.blocks)} blocks)")
            return post, None
        except MalformedFrontMatter as e:
            return None, e if e.source else e.with_source(identity)
        except (InvalidPost, IoFailure) as e:
            return None, e

    def _check_cancelled(self) -> None:
        if self.cancel_event.is_set():
            raise BuildCancelled("build cancelled")


def build_site(
    content_dir=None,
    *,
    settings_obj: Settings = settings,
    strict: Optional[bool] = None,
    tag_case_sensitive: Optional[bool] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> SiteModel:
    """Build a site from a directory, filling unset options from settings."""
    repo = FilesystemContentRepo(
        content_dir if content_dir is not None else settings_obj.content_path,
        extension=settings_obj.CONTENT_EXTENSION,
    )
    assembler = SiteAssembler(
        repo,
        strict=settings_obj.STRICT if strict is None else strict,
        tag_case_sensitive=(
            settings_obj.TAG_CASE_SENSITIVE
            if tag_case_sensitive is None
            else tag_case_sensitive
        ),
        max_workers=max_workers or settings_obj.WORKERS,
        cancel_event=cancel_event,
        words_per_minute=settings_obj.WORDS_PER_MINUTE,
    )
    return assembler.build()


def _decode(raw: bytes, identity: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise IoFailure(identity, f"not valid UTF-8 ({e.reason})") from e


def _to_warning(error: FolioError) -> BuildWarning:
    source = getattr(error, "source", None) or getattr(error, "path", "")
    reason = getattr(error, "reason", None) or str(error)
    if isinstance(error, InvalidPost):
        reason = f"invalid '{error.field}': {error.reason}"
    return BuildWarning(source=source, error=type(error).__name__, reason=reason)
