from vocabscan.extraction import Entry, EntrySource, dedupe_key, merge, merge_ai_result


def _e(word, **kwargs):
    return Entry(word=word, **kwargs)


def test_merge_keeps_first_spelling_and_fills_gaps():
    merged = merge(
        [
            _e("apple", meaning_ko="사과"),
            _e("banana"),
            _e("Apple", confidence=0.5, part_of_speech="noun"),
        ]
    )

    assert [e.word for e in merged] == ["apple", "banana"]
    assert merged[0].meaning_ko == "사과"
    assert merged[0].part_of_speech == "noun"
    assert merged[0].confidence == 0.5


def test_existing_meaning_is_never_overwritten():
    merged = merge([_e("run", meaning_ko="달리다"), _e("run", meaning_ko="뛰다")])
    assert merged[0].meaning_ko == "달리다"


def test_blank_meaning_is_filled():
    merged = merge([_e("run", meaning_ko="  "), _e("run", meaning_ko="달리다")])
    assert merged[0].meaning_ko == "달리다"


def test_confidence_only_goes_up():
    merged = merge([_e("run", confidence=0.9), _e("run", confidence=0.4), _e("run")])
    assert merged[0].confidence == 0.9


def test_corrected_word_drives_the_key():
    first = _e("teh", corrected_word="the", source=EntrySource.IMAGE_AI)
    second = _e("the", source=EntrySource.IMAGE_AI, meaning_ko="그")
    assert dedupe_key(first) == dedupe_key(second) == "the"

    merged = merge([first, second])
    assert len(merged) == 1
    assert merged[0].word == "teh"
    assert merged[0].meaning_ko == "그"


def test_merge_is_idempotent():
    entries = [_e("b", meaning_ko="x"), _e("ab"), _e("AB", confidence=0.3), _e("cd", meaning_ko="y")]
    once = merge(entries)
    assert merge(once) == once


def test_merge_does_not_mutate_inputs():
    original = _e("apple")
    merge([original, _e("apple", meaning_ko="사과")])
    assert original.meaning_ko is None


def test_merge_ai_result_prefers_existing_entries():
    existing = [_e("apple", meaning_ko="사과", confidence=0.6)]
    incoming = [_e("apple", meaning_ko="능금", confidence=0.9), _e("pear")]

    merged = merge_ai_result(existing, incoming)

    assert [e.word for e in merged] == ["apple", "pear"]
    assert merged[0].meaning_ko == "사과"
    assert merged[0].confidence == 0.9


def test_every_key_survives():
    entries = [_e(w) for w in ["one", "two", "One", "three", "TWO"]]
    keys = {dedupe_key(e) for e in entries}
    assert {dedupe_key(e) for e in merge(entries)} == keys
