from __future__ import annotations

from gitdispatch.tasks import parse_stash_list, parse_status


def test_parse_status_tracks_branch_and_file_states():
    summary = parse_status(
        "## feature...origin/feature [ahead 1, behind 3]\n"
        "M  staged.py\n"
        " M unstaged.py\n"
        "A  added.py\n"
        " D removed.py\n"
        "R  old.py -> new.py\n"
        "UU conflict.py\n"
        "?? untracked.py\n"
    )

    assert summary.current == "feature"
    assert summary.tracking == "origin/feature"
    assert (summary.ahead, summary.behind) == (1, 3)
    assert summary.modified == ["staged.py", "unstaged.py"]
    assert summary.created == ["added.py"]
    assert summary.deleted == ["removed.py"]
    assert summary.renamed == [("old.py", "new.py")]
    assert summary.conflicted == ["conflict.py"]
    assert summary.not_added == ["untracked.py"]
    assert summary.staged == ["staged.py", "added.py", "new.py"]
    assert len(summary.files) == 7
    assert not summary.is_clean()


def test_parse_status_handles_clean_and_special_branch_lines():
    clean = parse_status("## main\n")
    assert clean.current == "main"
    assert clean.tracking is None
    assert clean.is_clean()

    assert parse_status("## No commits yet on trunk\n").current == "trunk"
    detached = parse_status("## HEAD (no branch)\n")
    assert detached.detached
    assert parse_status('?? "with space.txt"\n').not_added == ["with space.txt"]


def test_parse_stash_list_reads_records_newest_first():
    text = (
        "stash@{0}\x1faaa\x1f2026-02-01T10:00:00+00:00\x1fWIP on main: two\x1fAda\x1fada@example.com\x1e\n"
        "stash@{1}\x1fbbb\x1f2026-01-01T10:00:00+00:00\x1fOn main: one\x1fAda\x1fada@example.com\x1e\n"
    )
    summary = parse_stash_list(text)

    assert summary.total == 2
    assert [entry.hash for entry in summary.all] == ["aaa", "bbb"]
    assert summary.latest is not None
    assert summary.latest.author_email == "ada@example.com"


def test_parse_stash_list_of_empty_output():
    summary = parse_stash_list("")
    assert summary.total == 0
    assert summary.latest is None
