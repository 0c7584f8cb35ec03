import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from folio.errors import BuildCancelled, BuildFailed, IoFailure
from folio.schemas.site import SiteModel
from folio.services.assembler import build_site
from folio.settings import Settings, settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STRICT_FAILURE = 1
EXIT_FATAL = 2

SITE_FILE = "site.json"


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def make_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="folio", description="Build a site model from Markdown content"
    )
    sub = ap.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="parse a content directory into a site model")
    build.add_argument("content_dir", help="directory of Markdown files")
    build.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="fail the build when any file cannot be parsed",
    )
    build.add_argument(
        "--out", default=None, help=f"directory to write {SITE_FILE} into"
    )
    build.add_argument(
        "--tag-case-insensitive",
        dest="tag_case_sensitive",
        action="store_false",
        default=None,
        help="group tags regardless of letter case",
    )
    build.add_argument(
        "--workers", type=positive_int, default=None, help="parser threads"
    )
    build.add_argument("--log-level", default=None, help="override LOG_LEVEL")
    return ap


def main(argv: Optional[List[str]] = None, *, settings_obj: Settings = settings) -> int:
    args = make_parser().parse_args(argv)

    level = (args.log_level or settings_obj.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    return run_build(args, settings_obj=settings_obj)


def run_build(args: argparse.Namespace, *, settings_obj: Settings = settings) -> int:
    try:
        site = build_site(
            args.content_dir,
            settings_obj=settings_obj,
            strict=args.strict,
            tag_case_sensitive=args.tag_case_sensitive,
            max_workers=args.workers,
        )
    except BuildFailed as e:
        print(f"Build failed: {len(e.failures)} file(s) could not be parsed", file=sys.stderr)
        for failure in e.failures:
            print(f"  {failure}", file=sys.stderr)
        return EXIT_STRICT_FAILURE
    except (IoFailure, BuildCancelled) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FATAL

    out_dir = Path(args.out).expanduser() if args.out else settings_obj.out_path
    if out_dir:
        try:
            path = write_site(site, out_dir)
        except OSError as e:
            print(f"error: cannot write output to {out_dir}: {e}", file=sys.stderr)
            return EXIT_FATAL
        logger.info(f"Wrote {path}")

    print(
        f"Built {len(site.posts)} posts ({len(site.all.posts)} public, "
        f"{len(site.tags)} tags, {len(site.warnings)} warnings)"
    )
    return EXIT_OK


def write_site(site: SiteModel, out_dir: Path) -> Path:
    """Serialize the site model for the templating stage."""
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / SITE_FILE
    path.write_text(site.model_dump_json(indent=2), encoding="utf-8")
    return path


if __name__ == "__main__":
    sys.exit(main())
