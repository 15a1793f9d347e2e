import json
import random
import re

import pytest

from app.errors import ContentError
from services.content import (
    FALLBACK_TEXT,
    LIBRARY,
    TIMED_MIN_LENGTH,
    ContentLibrary,
    TextCriteria,
)


@pytest.fixture
def library(tmp_path):
    return ContentLibrary(
        custom_path=tmp_path / "custom_texts.json",
        assets_dir=tmp_path / "assets",
        rng=random.Random(7),
    )


def test_builtin_categories(library):
    assert set(library.categories) == set(LIBRARY)
    for category in library.categories:
        assert library.texts_for(category)


def test_asset_file_overrides_builtin_texts(tmp_path):
    assets = tmp_path / "assets"
    assets.mkdir()
    (assets / "quotes.txt").write_text("First block.\n\nSecond block.\n", encoding="utf-8")
    lib = ContentLibrary(assets_dir=assets)
    assert lib.texts_for("quotes") == ["First block.", "Second block."]


def test_difficulty_filters(tmp_path):
    assets = tmp_path / "assets"
    assets.mkdir()
    plain = "plain words only here"
    fancy = "Wait; what (exactly) is this?"
    lengthy = "word " * 40
    (assets / "quotes.txt").write_text("\n\n".join([plain, fancy, lengthy]), encoding="utf-8")
    lib = ContentLibrary(assets_dir=assets)
    assert lib.texts_for_difficulty("quotes", "easy") == [plain]
    assert lib.texts_for_difficulty("quotes", "hard") == [lengthy.strip()]
    assert len(lib.texts_for_difficulty("quotes", "medium")) == 3


def test_length_options(library):
    short = library.get_text(TextCriteria("literature", "medium", "short"))
    long = library.get_text(TextCriteria("literature", "medium", "long"))
    assert 0 < len(short) <= 100
    assert len(long) >= 300


def test_unknown_category_falls_back_to_quotes(library):
    assert library.texts_for("nope") == library.texts_for("quotes")
    assert library.get_text(TextCriteria("nope")) != ""
    assert FALLBACK_TEXT


@pytest.mark.parametrize("content_type", ["mixed", "words", "numbers", "punctuation", "programming", "quotes"])
def test_timed_text_is_long_enough(library, content_type):
    text = library.generate_timed_text(content_type)
    assert len(text) >= TIMED_MIN_LENGTH
    assert text == text.strip()


def test_timed_text_modifiers(library):
    text = library.generate_timed_text(
        "punctuation", include_numbers=False, include_punctuation=False, include_capitals=False
    )
    assert not re.search(r"\d", text)
    assert not re.search(r"[^\w\s]", text)
    assert text == text.lower()


def test_numbers_without_numbers_still_yields_text(library):
    text = library.generate_timed_text("numbers", include_numbers=False)
    assert len(text) >= TIMED_MIN_LENGTH


def test_custom_texts_persist(tmp_path, library):
    idx = library.add_custom_text("My own\r\npractice text.  \n", "  My   Title ")
    assert idx == 0
    assert library.custom_texts[0] == {"title": "My Title", "text": "My own\npractice text."}
    saved = json.loads((tmp_path / "custom_texts.json").read_text(encoding="utf-8"))
    assert saved == library.custom_texts

    reloaded = ContentLibrary(custom_path=tmp_path / "custom_texts.json")
    assert reloaded.custom_texts == library.custom_texts
    assert "My own\npractice text." in reloaded.texts_for("quotes")

    library.remove_custom_text(0)
    assert library.custom_texts == []


def test_custom_text_errors(library):
    with pytest.raises(ContentError):
        library.add_custom_text("   \n")
    with pytest.raises(ContentError):
        library.remove_custom_text(3)


def test_corrupt_custom_file_is_ignored(tmp_path):
    path = tmp_path / "custom_texts.json"
    path.write_text("{not json", encoding="utf-8")
    assert ContentLibrary(custom_path=path).custom_texts == []


def test_snippets(library):
    langs = library.languages()
    assert {"python", "javascript", "go"} <= set(langs)
    for lang in langs:
        for difficulty in ("beginner", "intermediate", "advanced"):
            snip = library.snippet(lang, difficulty)
            target = library.snippet_target(snip)
            assert target and target == target.rstrip()
            assert "\r" not in target
    assert library.snippet("python", "beginner", index=0) == library.snippets("python", "beginner")[0]


def test_missing_snippets_raise(library):
    assert library.snippets("cobol", "beginner") == []
    with pytest.raises(ContentError):
        library.snippet("cobol", "beginner")


def test_stats(library):
    library.add_custom_text("extra text")
    s = library.stats("quotes")
    assert s["custom_texts"] == 1
    assert s["categories"] == len(LIBRARY)
    assert s["total_texts"] == len(library.texts_for("quotes"))
