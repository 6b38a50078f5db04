import re
from datetime import datetime

import pytest

from minigit.objects import Commit, MiniGitError, format_timestamp, sha1_hex

STAMP = "2024-01-02 03:04:05"
STAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def test_sha1_of_empty_input():
    assert sha1_hex(b"") == "da39a3ee5e6b4b0d3255bfef95601890afd80709"


def test_sha1_of_abc():
    expected = "a9993e364706816aba3e25717850c26c9cd0d89d"
    assert sha1_hex(b"abc") == expected
    assert sha1_hex("abc") == expected


def test_sha1_text_and_bytes_agree_and_shape():
    digest = sha1_hex("Hello, MiniGit!")
    assert digest == sha1_hex("Hello, MiniGit!".encode("utf-8"))
    assert re.fullmatch(r"[0-9a-f]{40}", digest)
    assert digest != sha1_hex("This is some different content for a second blob.")


def test_format_timestamp_datetime():
    assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == STAMP


def test_format_timestamp_epoch_matches_local_time():
    moment = 1_700_000_000
    assert format_timestamp(moment) == datetime.fromtimestamp(moment).strftime(
        STAMP_FORMAT
    )


def test_format_timestamp_now_is_current_local_time():
    before = datetime.now().replace(microsecond=0)
    stamp = format_timestamp()
    after = datetime.now()
    parsed = datetime.strptime(stamp, STAMP_FORMAT)
    assert before <= parsed <= after


def test_create_is_deterministic_for_same_inputs():
    first = Commit.create("msg", ["p1"], {"a.txt": "h1"}, STAMP)
    second = Commit.create("msg", ["p1"], {"a.txt": "h1"}, STAMP)
    assert first.hash == second.hash
    assert re.fullmatch(r"[0-9a-f]{40}", first.hash)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"message": "other"},
        {"parents": ["p2"]},
        {"files": {"a.txt": "h2"}},
        {"timestamp": "2024-01-02 03:04:06"},
    ],
)
def test_create_hash_depends_on_contents(kwargs):
    base = {"message": "msg", "parents": ["p1"], "files": {"a.txt": "h1"}, "timestamp": STAMP}
    changed = {**base, **kwargs}
    assert Commit.create(**base).hash != Commit.create(**changed).hash


def test_create_drops_empty_parent_and_sorts_files():
    commit = Commit.create("root", [""], {"b": "2", "a": "1"}, STAMP)
    assert commit.parents == []
    assert commit.parent_hash == ""
    assert list(commit.files) == ["a", "b"]


def test_create_file_order_does_not_change_hash():
    one = Commit.create("m", [], {"b": "2", "a": "1"}, STAMP)
    two = Commit.create("m", [], {"a": "1", "b": "2"}, STAMP)
    assert one.hash == two.hash


def test_add_parent_keeps_hash_and_sets_first_parent():
    commit = Commit.create("merge", [], {"f": "x"}, STAMP)
    original = commit.hash
    commit.add_parent("left")
    commit.add_parent("right")
    assert commit.parents == ["left", "right"]
    assert commit.parent_hash == "left"
    assert commit.hash == original


def test_record_layout():
    commit = Commit("abc", "hello", STAMP, ["p1", "p2"], {"f.txt": "b1"})
    assert commit.to_record() == (
        "hash:abc\n"
        "message:hello\n"
        f"timestamp:{STAMP}\n"
        "parent_hash:p1,p2\n"
        "file:f.txt:b1\n"
    )


def test_record_round_trip():
    commit = Commit.create("work", ["p1"], {"a.txt": "h1", "b.txt": "h2"}, STAMP)
    assert Commit.from_record(commit.to_record()) == commit


def test_record_round_trip_root_commit():
    commit = Commit.create("first", [], {"a.txt": "h1"}, STAMP)
    loaded = Commit.from_record(commit.to_record())
    assert loaded.parents == []
    assert loaded == commit


def test_record_file_split_on_first_colon():
    loaded = Commit.from_record("hash:h\nfile:name:blob:extra\n")
    assert loaded.files == {"name": "blob:extra"}


def test_record_without_hash_raises():
    with pytest.raises(MiniGitError):
        Commit.from_record("message:hi\n")


def test_text_layout():
    commit = Commit("abc", "hello", STAMP, ["p1"], {"f.txt": "b1"})
    text = commit.to_text()
    lines = text.split("\n")
    assert lines[0] == "tree"
    assert lines[1] == "blob b1 f.txt"
    assert lines[2] == "parent p1"
    assert lines[3].startswith("author ") and lines[3].endswith(STAMP)
    assert lines[4].startswith("committer ") and lines[4].endswith(STAMP)
    assert lines[5] == ""
    assert text.endswith("hello\n")


def test_text_round_trip_multiple_parents():
    commit = Commit.create("merge", ["left", "right"], {"x": "1", "y": "2"}, STAMP)
    assert Commit.from_text(commit.hash, commit.to_text()) == commit


def test_text_round_trip_multiline_message():
    commit = Commit("h", "line one\n\nline three\n", STAMP, [], {"a": "b"})
    loaded = Commit.from_text("h", commit.to_text())
    assert loaded.message == commit.message
    assert loaded.timestamp == STAMP


def test_from_text_ignores_empty_parent_line():
    text = f"tree\nparent \nauthor A <a@example.com> {STAMP}\n\nmsg\n"
    loaded = Commit.from_text("id", text)
    assert loaded.parents == []
    assert loaded.message == "msg"
    assert loaded.hash == "id"
    assert loaded.timestamp == STAMP


def test_from_text_without_author_uses_current_time():
    before = datetime.now().replace(microsecond=0)
    loaded = Commit.from_text("id", "tree\n\nmsg\n")
    after = datetime.now()
    parsed = datetime.strptime(loaded.timestamp, STAMP_FORMAT)
    assert before <= parsed <= after
    assert loaded.message == "msg"