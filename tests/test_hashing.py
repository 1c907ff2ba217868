import string

import pytest

from minigit.hashing import calculate_hash


def test_empty_content_is_offset_basis():
    assert calculate_hash("") == "811c9dc5"


def test_single_byte_known_value():
    assert calculate_hash("a") == "e40c292c"


def test_text_and_bytes_agree():
    assert calculate_hash("hello world\n") == calculate_hash(b"hello world\n")


def test_unicode_text_hashed_as_utf8():
    assert calculate_hash("caf\u00e9") == calculate_hash("caf\u00e9".encode("utf-8"))


@pytest.mark.parametrize("content", ["", "x", "some longer content\nwith lines\n", "\x00\xff"])
def test_result_is_eight_hex_digits(content):
    result = calculate_hash(content)
    assert len(result) == 8
    assert set(result) <= set(string.hexdigits.lower())


def test_deterministic():
    results = [calculate_hash("a") for _ in range(3)]
    assert results == ["e40c292c", "e40c292c", "e40c292c"]


def test_different_content_differs():
    assert calculate_hash("alpha") != calculate_hash("beta")
    assert calculate_hash("ab") != calculate_hash("ba")