import re
from datetime import datetime, timedelta

import pytest

from minigit.commit import Commit, CommitError, generate_timestamp

TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$")
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _fixed_commit():
    return Commit(
        hash="0000abcd",
        parent_hashes=["11111111", "22222222"],
        message="Merge branch 'dev'",
        timestamp="2024-01-02T03:04:05",
        file_blobs={"b.txt": "bbbbbbbb", "a.txt": "aaaaaaaa"},
    )


def test_generate_timestamp_format():
    before = datetime.now().replace(microsecond=0)
    stamp = generate_timestamp()
    after = datetime.now().replace(microsecond=0)
    parsed = datetime.strptime(stamp, TIMESTAMP_FORMAT)
    assert parsed.strftime(TIMESTAMP_FORMAT) == stamp
    assert before - timedelta(seconds=1) <= parsed <= after + timedelta(seconds=1)


def test_create_sets_fields_and_hash():
    commit = Commit.create("Initial commit", [], {"README.md": "deadbeef"})
    assert commit.message == "Initial commit"
    assert commit.parent_hashes == []
    assert commit.file_blobs == {"README.md": "deadbeef"}
    assert TIMESTAMP_RE.match(commit.timestamp)
    assert commit.hash == commit.calculate_hash()
    assert len(commit.hash) == 8


def test_create_copies_inputs():
    parents = ["p1"]
    blobs = {"f": "h"}
    commit = Commit.create("msg", parents, blobs)
    parents.append("p2")
    blobs["g"] = "h2"
    assert commit.parent_hashes == ["p1"]
    assert commit.file_blobs == {"f": "h"}


def test_serialize_format():
    assert _fixed_commit().serialize() == (
        "type:commit\n"
        "hash:0000abcd\n"
        "message:Merge branch 'dev'\n"
        "timestamp:2024-01-02T03:04:05\n"
        "parent:11111111\n"
        "parent:22222222\n"
        "file:a.txt aaaaaaaa\n"
        "file:b.txt bbbbbbbb\n"
    )


def test_round_trip():
    original = _fixed_commit()
    restored = Commit.deserialize(original.serialize())
    assert restored == original


def test_round_trip_from_bytes():
    original = _fixed_commit()
    restored = Commit.deserialize(original.serialize().encode("utf-8"))
    assert restored == original


def test_round_trip_preserves_hash_validity():
    original = Commit.create("work", ["abcdef01"], {"x.py": "12345678"})
    restored = Commit.deserialize(original.serialize())
    assert restored.hash == original.hash
    assert restored.calculate_hash() == original.hash


def test_hash_independent_of_file_order():
    first = Commit(message="m", timestamp="t", file_blobs={"a": "1", "b": "2", "c": "3"})
    second = Commit(message="m", timestamp="t", file_blobs={"c": "3", "a": "1", "b": "2"})
    assert first.calculate_hash() == second.calculate_hash()


def test_hash_depends_on_content():
    base = Commit(message="m", timestamp="t", file_blobs={"a": "1"})
    assert base.calculate_hash() != Commit(message="n", timestamp="t", file_blobs={"a": "1"}).calculate_hash()
    assert base.calculate_hash() != Commit(message="m", timestamp="t", file_blobs={"a": "2"}).calculate_hash()
    assert base.calculate_hash() != Commit(
        message="m", timestamp="t", parent_hashes=["p"], file_blobs={"a": "1"}
    ).calculate_hash()


def test_hash_ignores_stored_hash_field():
    first = Commit(hash="one", message="m", timestamp="t")
    second = Commit(hash="two", message="m", timestamp="t")
    assert first.calculate_hash() == second.calculate_hash()


def test_deserialize_wrong_type_raises():
    with pytest.raises(CommitError, match="Expected type:commit, got blob"):
        Commit.deserialize("type:blob\nhash:1234\n")


def test_deserialize_bad_file_entry_raises():
    with pytest.raises(CommitError):
        Commit.deserialize("type:commit\nfile:nospace\n")


def test_commit_error_is_value_error():
    with pytest.raises(ValueError):
        Commit.deserialize("type:tree\n")


def test_deserialize_ignores_unknown_lines():
    commit = Commit.deserialize("type:commit\n\nsomething else\nmessage:hello\n")
    assert commit.message == "hello"
    assert commit.parent_hashes == []
    assert commit.file_blobs == {}


def test_deserialize_keeps_parent_order():
    commit = Commit.deserialize("parent:zz\nparent:aa\n")
    assert commit.parent_hashes == ["zz", "aa"]


def test_deserialize_file_blob_splits_at_first_space():
    commit = Commit.deserialize("file:name rest with spaces\n")
    assert commit.file_blobs == {"name": "rest with spaces"}


def test_message_with_colon_preserved():
    commit = Commit.deserialize("message:fix: handle edge case\n")
    assert commit.message == "fix: handle edge case"


def test_default_commit_is_empty():
    commit = Commit()
    assert commit.hash == ""
    assert commit.parent_hashes == []
    assert commit.file_blobs == {}