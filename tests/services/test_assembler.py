import threading

import pytest

from folio.errors import BuildCancelled, BuildFailed, IoFailure
from folio.schemas.blocks import CodeBlock
from folio.services.assembler import SiteAssembler, build_site
from folio.settings import Settings
from tests.conftest import FakeContentRepo

POST_A = """
---
draft: false
title: "A"
date: 2020-01-01
tags: ["x"]
---
Published body.
"""

POST_B = """
---
draft: true
title: "B"
date: 2021-01-01
tags: ["x"]
---
Draft body.
"""


def test_drafts_stay_in_store_but_out_of_collections():
    repo = FakeContentRepo({"a.md": POST_A, "b.md": POST_B})

    site = SiteAssembler(repo).build()

    assert set(site.posts) == {"a.md", "b.md"}
    assert site.posts["b.md"].draft is True
    assert site.all.posts == ("a.md",)
    assert list(site.tags) == ["x"]
    assert site.tags["x"].posts == ("a.md",)
    assert [p.title for p in site.public_posts()] == ["A"]
    assert site.warnings == ()


def test_bad_files_become_warnings_when_not_strict():
    repo = FakeContentRepo(
        {
            "a.md": POST_A,
            "bare.md": "Just text, no metadata.\n",
            "broken.md": "---\ntitle: Open\n",
            "binary.md": b"\xff\xfe\x00",
            "gone.md": IoFailure("gone.md", "cannot read file: Permission denied"),
        }
    )

    site = SiteAssembler(repo).build()

    assert list(site.posts) == ["a.md"]
    by_source = {w.source: w for w in site.warnings}
    assert set(by_source) == {"bare.md", "broken.md", "binary.md", "gone.md"}
    assert by_source["bare.md"].error == "InvalidPost"
    assert "title" in by_source["bare.md"].reason
    assert by_source["broken.md"].error == "MalformedFrontMatter"
    assert by_source["binary.md"].error == "IoFailure"
    assert by_source["gone.md"].error == "IoFailure"


def test_impossible_date_becomes_a_warning():
    bad_date = "---\ntitle: Leap\ndate: 2020-02-30\n---\nBody.\n"
    repo = FakeContentRepo({"a.md": POST_A, "leap.md": bad_date})

    site = SiteAssembler(repo).build()

    assert list(site.posts) == ["a.md"]
    assert [(w.source, w.error) for w in site.warnings] == [
        ("leap.md", "MalformedFrontMatter")
    ]

    with pytest.raises(BuildFailed):
        SiteAssembler(FakeContentRepo({"leap.md": bad_date}), strict=True).build()


def test_strict_build_reports_every_failing_file():
    repo = FakeContentRepo(
        {
            "a.md": POST_A,
            "bare.md": "no metadata",
            "broken.md": "---\ntitle: Open\n",
        }
    )

    with pytest.raises(BuildFailed) as exc:
        SiteAssembler(repo, strict=True).build()

    failing = sorted(getattr(f, "source", None) for f in exc.value.failures)
    assert failing == ["bare.md", "broken.md"]


def test_strict_build_passes_when_every_file_is_valid():
    repo = FakeContentRepo({"a.md": POST_A})

    site = SiteAssembler(repo, strict=True).build()

    assert site.all.posts == ("a.md",)


def test_missing_directory_is_fatal():
    repo = FakeContentRepo({}, missing=True)

    with pytest.raises(IoFailure):
        SiteAssembler(repo).build()


def test_equal_timestamps_order_is_stable_across_runs():
    same_day = "---\ntitle: {0}\ndate: 2020-05-05\n---\nbody\n"
    files = {f"{name}.md": same_day.format(name) for name in ("c", "a", "d", "b")}

    orders = {
        SiteAssembler(FakeContentRepo(files), max_workers=workers).build().all.posts
        for workers in (1, 2, 4, 4, 8)
    }

    assert orders == {("a.md", "b.md", "c.md", "d.md")}


def test_unterminated_fence_does_not_fail_the_build():
    text = "---\ntitle: Code\ndate: 2020-01-01\n---\n```c\nint x;\n"
    site = SiteAssembler(FakeContentRepo({"code.md": text})).build()

    post = site.posts["code.md"]
    assert post.blocks == (CodeBlock(language="c", text="int x;"),)


def test_tag_case_option_is_forwarded():
    text = "---\ntitle: {0}\ndate: 2020-01-0{1}\ntags: [{2}]\n---\n"
    files = {
        "a.md": text.format("A", 1, "Go"),
        "b.md": text.format("B", 2, "go"),
    }

    site = SiteAssembler(FakeContentRepo(files), tag_case_sensitive=False).build()

    assert site.tags["go"].posts == ("b.md", "a.md")


def test_cancelled_build_discards_results():
    event = threading.Event()
    event.set()
    repo = FakeContentRepo({"a.md": POST_A})

    with pytest.raises(BuildCancelled):
        SiteAssembler(repo, cancel_event=event).build()

    assert repo.reads == []


def test_cancel_between_files_stops_remaining_work():
    files = {f"p{i}.md": POST_A for i in range(20)}
    repo = FakeContentRepo(files)
    assembler = SiteAssembler(repo, max_workers=1)

    original_read = repo.read

    def read_then_cancel(identity):
        assembler.cancel()
        return original_read(identity)

    repo.read = read_then_cancel

    with pytest.raises(BuildCancelled):
        assembler.build()

    assert len(repo.reads) == 1


def test_build_site_reads_directory_with_settings(tmp_path):
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "a.md").write_text(
        "---\ntitle: A\ndate: 2020-01-01\ntags: [X]\n---\nbody\n", encoding="utf-8"
    )
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    site = build_site(
        tmp_path, settings_obj=Settings(TAG_CASE_SENSITIVE=False, WORDS_PER_MINUTE=1)
    )

    assert list(site.posts) == ["nested/a.md"]
    assert site.posts["nested/a.md"].read_time == "1 min"
    assert list(site.tags) == ["x"]


def test_build_site_missing_directory_raises(tmp_path):
    with pytest.raises(IoFailure):
        build_site(tmp_path / "absent", settings_obj=Settings())
