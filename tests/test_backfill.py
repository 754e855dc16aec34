import asyncio

from vocabscan.extraction import (
    TRANSLATION_FALLBACK_MARKER,
    Entry,
    MeaningBackfill,
    MeaningLang,
    MockDefinitionLookup,
    MockTranslator,
)


def test_translation_failure_keeps_definition_with_marker():
    service = MeaningBackfill(
        lookup=MockDefinitionLookup({"run": "to move fast"}),
        translator=MockTranslator(fail=True),
    )

    result = asyncio.run(service.fill(Entry(word="run")))

    assert result.entry.meaning_ko == "to move fast" + TRANSLATION_FALLBACK_MARKER
    assert result.entry.part_of_speech == "noun"
    assert result.warning


def test_translated_meaning_is_used_verbatim():
    service = MeaningBackfill(
        lookup=MockDefinitionLookup({"run": "to move fast"}),
        translator=MockTranslator({"to move fast": "빨리 움직이다"}),
    )

    entry = asyncio.run(service.backfill(Entry(word="run")))

    assert entry.meaning_ko == "빨리 움직이다"


def test_english_mode_skips_translation():
    translator = MockTranslator()
    service = MeaningBackfill(
        lookup=MockDefinitionLookup({"run": "to move fast"}),
        translator=translator,
        meaning_lang=MeaningLang.EN,
    )

    entry = asyncio.run(service.backfill(Entry(word="run")))

    assert entry.meaning_ko == "to move fast"
    assert translator.calls == []


def test_missing_translator_tags_definition():
    service = MeaningBackfill(lookup=MockDefinitionLookup({"run": "to move fast"}))
    entry = asyncio.run(service.backfill(Entry(word="run")))
    assert entry.meaning_ko.endswith(TRANSLATION_FALLBACK_MARKER)


def test_existing_meaning_and_pos_are_kept():
    lookup = MockDefinitionLookup({"run": "to move fast"})
    service = MeaningBackfill(lookup=lookup, translator=MockTranslator({"to move fast": "달리다"}))

    kept = asyncio.run(service.backfill(Entry(word="run", meaning_ko="뛰다")))
    filled = asyncio.run(service.backfill(Entry(word="run", meaning_ko=" ", part_of_speech="verb")))

    assert kept.meaning_ko == "뛰다"
    assert lookup.calls == ["run"]
    assert filled.meaning_ko == "달리다"
    assert filled.part_of_speech == "verb"


def test_lookup_uses_corrected_spelling():
    lookup = MockDefinitionLookup({"the": "definite article"})
    service = MeaningBackfill(lookup=lookup, meaning_lang=MeaningLang.EN)

    entry = asyncio.run(service.backfill(Entry(word="teh", corrected_word="the")))

    assert lookup.calls == ["the"]
    assert entry.meaning_ko == "definite article"


def test_backfill_all_isolates_failures_and_keeps_order():
    lookup = MockDefinitionLookup({"run": "to move fast", "walk": "to move on foot"}, failing=["jump"])
    translator = MockTranslator({"to move fast": "달리다", "to move on foot": "걷다"})
    service = MeaningBackfill(lookup=lookup, translator=translator, concurrency=2)
    entries = [
        Entry(word="run"),
        Entry(word="jump"),
        Entry(word="apple", meaning_ko="사과"),
        Entry(word="walk"),
        Entry(word="zzyzx"),
    ]

    updated, warnings = asyncio.run(service.backfill_all(entries))

    assert [e.word for e in updated] == ["run", "jump", "apple", "walk", "zzyzx"]
    assert [e.meaning_ko for e in updated] == ["달리다", None, "사과", "걷다", None]
    assert len(warnings) == 2
    assert "apple" not in lookup.calls
