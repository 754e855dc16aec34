import pytest

from vocabscan.extraction import CaseMode, EntrySource, is_valid_word, parse_lines, split_pair


@pytest.mark.parametrize("word", ["don't", "Apple", "ok"])
def test_is_valid_word_accepts(word):
    assert is_valid_word(word)


@pytest.mark.parametrize("word", ["a1", "x", "123", "", "'tis", "well-known"])
def test_is_valid_word_rejects(word):
    assert not is_valid_word(word)


def test_min_length_is_configurable():
    assert is_valid_word("x", min_length=1)
    assert not is_valid_word("cat", min_length=4)


def test_parse_pairs_and_bare_words():
    entries = parse_lines("apple - 사과\nbanana\nApple")

    assert [(e.word, e.meaning_ko) for e in entries] == [
        ("apple", "사과"),
        ("banana", None),
        ("apple", None),
    ]
    assert all(e.source is EntrySource.IMAGE_OCR for e in entries)
    assert all(e.confidence is None for e in entries)
    assert entries[0].corrected_word == "apple"


@pytest.mark.parametrize(
    "line, expected",
    [
        ("run -> 달리다", ("run", "달리다")),
        ("run\t달리다", ("run", "달리다")),
        ("run: 달리다", ("run", "달리다")),
        ("run = 달리다", ("run", "달리다")),
        ("run — 달리다", ("run", "달리다")),
    ],
)
def test_split_pair_separators(line, expected):
    assert split_pair(line) == expected


def test_split_pair_keeps_extra_fields_in_meaning():
    assert split_pair("set - 놓다 - 두다") == ("set", "놓다 - 두다")


def test_split_pair_ignores_unspaced_hyphen():
    assert split_pair("well-known") is None
    assert split_pair("10:30") is None


def test_bare_line_splits_on_non_letters():
    entries = parse_lines("1. quick, brown fox! 42 a")
    assert [e.word for e in entries] == ["quick", "brown", "fox"]


def test_invalid_pair_word_drops_whole_line():
    assert parse_lines("123 - 숫자") == []


def test_blank_meaning_becomes_none():
    entries = parse_lines("tree -> ")
    assert [(e.word, e.meaning_ko) for e in entries] == [("tree", None)]


def test_case_modes():
    assert [e.word for e in parse_lines("Hello World", case_mode=CaseMode.UPPER)] == ["HELLO", "WORLD"]
    assert [e.word for e in parse_lines("Hello World", case_mode="none")] == ["Hello", "World"]


def test_empty_text():
    assert parse_lines("") == []
    assert parse_lines("\n\r\n  \n") == []
