"""Tests for the pyspellchecker-backed engine."""

from __future__ import annotations

import gzip
import json

import pytest

from spellswitch.errors import EngineUnavailable
from spellswitch.platform.engine import SpellingSpan
from spellswitch.platform.pyspellchecker_engine import PySpellCheckerEngine

WORDS = {"the": 500, "bucket": 40, "basket": 60, "of": 400, "water": 30, "don't": 20}


@pytest.fixture
def engine() -> PySpellCheckerEngine:
    e = PySpellCheckerEngine(distance=1)
    e.set_dictionary("en-US", gzip.compress(json.dumps(WORDS).encode("utf-8")))
    return e


def test_plain_json_dictionary():
    e = PySpellCheckerEngine()
    e.set_dictionary("en-US", json.dumps(WORDS).encode("utf-8"))
    assert e.language == "en-US"
    assert not e.is_misspelled("water")


def test_is_misspelled(engine):
    assert not engine.is_misspelled("bucket")
    assert not engine.is_misspelled("Bucket")
    assert engine.is_misspelled("buckte")
    assert not engine.is_misspelled("")


def test_check_spelling_spans(engine):
    assert engine.check_spelling("the buckte of watr") == [
        SpellingSpan(4, 10),
        SpellingSpan(14, 18),
    ]
    assert engine.check_spelling("the bucket") == []


def test_corrections_ranked_by_frequency(engine):
    assert engine.get_corrections_for_misspelling("backet") == ["basket", "bucket"]


def test_add(engine):
    assert engine.is_misspelled("spellswitch")
    engine.add("spellswitch")
    assert not engine.is_misspelled("spellswitch")


def test_words_longer_than_the_dictionary_are_still_checked(engine):
    assert engine.is_misspelled("the Rechtschreibungsfehler")
    assert engine.check_spelling("the Rechtschreibungsfehler") == [SpellingSpan(4, 26)]
    assert not engine.is_misspelled("The BUCKET")


def test_bad_dictionary_content():
    e = PySpellCheckerEngine()
    with pytest.raises(EngineUnavailable):
        e.set_dictionary("en-US", b"\x1f\x8bnot really gzip")
    with pytest.raises(EngineUnavailable):
        e.set_dictionary("en-US", b"[1, 2, 3]")


def test_available_dictionaries(engine):
    languages = engine.get_available_dictionaries()
    assert "en" in languages
