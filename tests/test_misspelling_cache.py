"""Tests for MisspellingCache and TtlLruCache."""

from __future__ import annotations

import pytest

from conftest import FakeEngine
from spellswitch.intelligence.misspelling_cache import (
    CONTRACTIONS,
    CONTRACTION_STEMS,
    MisspellingCache,
    TtlLruCache,
    is_contraction_stem,
)
from spellswitch.platform.engine import SpellingSpan


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock() -> Clock:
    return Clock()


def engine_with(words: str, reports_misspellings: bool = True) -> FakeEngine:
    engine = FakeEngine(reports_misspellings=reports_misspellings)
    engine.set_dictionary("en-US", words.encode("utf-8"))
    return engine


# ------------------------------------------------------------------
# TtlLruCache
# ------------------------------------------------------------------

class TestTtlLruCache:

    def test_get_set(self, clock):
        cache = TtlLruCache(maxsize=4, ttl=8.0, clock=clock)
        cache.set("a", True)
        assert cache.get("a") is True
        assert cache.get("missing") is None

    def test_expired_entry_is_a_miss(self, clock):
        cache = TtlLruCache(maxsize=4, ttl=8.0, clock=clock)
        cache.set("a", False)
        clock.now = 7.9
        assert cache.get("a") is False
        clock.now = 8.0
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_lru_eviction(self, clock):
        cache = TtlLruCache(maxsize=2, ttl=8.0, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")          # "b" is now least recently used
        cache.set("c", 3)
        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            TtlLruCache(maxsize=0)


# ------------------------------------------------------------------
# MisspellingCache
# ------------------------------------------------------------------

class TestMisspellingCache:

    def test_cache_hit_does_not_requery_engine(self, clock):
        engine = engine_with("bucket")
        cache = MisspellingCache(lambda: engine, clock=clock)

        assert cache.is_misspelled("buckte") is True
        clock.now = 5.0
        assert cache.is_misspelled("buckte") is True
        assert cache.is_misspelled("buckte") is True
        assert engine.calls == [("is_misspelled", "buckte")]

    def test_expired_entry_requeries_engine(self, clock):
        engine = engine_with("bucket")
        cache = MisspellingCache(lambda: engine, clock=clock)

        assert cache.is_misspelled("bucket") is False
        clock.now = 8.5
        assert cache.is_misspelled("bucket") is False
        assert engine.calls == [("is_misspelled", "bucket"), ("is_misspelled", "bucket")]

    def test_case_sensitive_keys(self, clock):
        engine = engine_with("bucket")
        cache = MisspellingCache(lambda: engine, clock=clock)
        cache.is_misspelled("bucket")
        cache.is_misspelled("Bucket")
        assert len(engine.calls) == 2

    def test_capacity_is_bounded(self, clock):
        engine = engine_with("")
        cache = MisspellingCache(lambda: engine, maxsize=3, clock=clock)
        for word in ["a1", "b2", "c3", "d4"]:
            cache.is_misspelled(word)
        assert len(cache) == 3

    @pytest.mark.parametrize("stem", sorted(CONTRACTION_STEMS))
    def test_contraction_stems_never_misspelled(self, stem, clock):
        engine = engine_with("")       # engine flags everything
        cache = MisspellingCache(lambda: engine, clock=clock)
        assert cache.is_misspelled(stem + "'t") is False
        assert cache.is_misspelled(stem) is False
        assert engine.calls == []

    def test_contraction_list(self):
        assert len(CONTRACTIONS) == 93
        assert len(set(CONTRACTIONS)) == len(CONTRACTIONS)
        assert {"doesn't", "o'clock", "y'all'd've", "I'm"} <= set(CONTRACTIONS)
        assert {"doesn", "can", "i", "y"} <= CONTRACTION_STEMS
        assert is_contraction_stem("Doesn’t")
        assert not is_contraction_stem("bucket")

    def test_no_engine_means_not_misspelled(self, clock):
        cache = MisspellingCache(lambda: None, clock=clock)
        assert cache.is_misspelled("qwxzt") is False

    def test_no_engine_result_is_cached_too(self, clock):
        engines = [None]
        cache = MisspellingCache(lambda: engines[0], clock=clock)
        assert cache.is_misspelled("qwxzt") is False
        engines[0] = engine_with("")
        assert cache.is_misspelled("qwxzt") is False
        cache.clear()
        assert cache.is_misspelled("qwxzt") is True


class TestSpanEngines:
    """Engines that only report misspelled spans."""

    def test_no_spans_is_correct(self, clock):
        engine = engine_with("bucket", reports_misspellings=False)
        cache = MisspellingCache(lambda: engine, clock=clock)
        assert cache.is_misspelled("bucket") is False
        assert engine.calls == [("check_spelling", "bucket")]

    def test_span_after_start_is_misspelled(self, clock):
        engine = engine_with("a", reports_misspellings=False)
        cache = MisspellingCache(lambda: engine, clock=clock)
        assert cache.is_misspelled("a buckte") is True
        assert ("is_misspelled", "a buckte") not in engine.calls

    def test_span_at_start_retried_lowercase(self, clock):
        engine = engine_with("bucket", reports_misspellings=False)
        engine.spans_override["Bucket"] = [SpellingSpan(0, 6)]
        cache = MisspellingCache(lambda: engine, clock=clock)
        assert cache.is_misspelled("Bucket") is False
        assert engine.calls == [("check_spelling", "Bucket"), ("is_misspelled", "bucket")]

    def test_span_at_start_still_wrong_lowercase(self, clock):
        engine = engine_with("bucket", reports_misspellings=False)
        cache = MisspellingCache(lambda: engine, clock=clock)
        assert cache.is_misspelled("Buckte") is True
