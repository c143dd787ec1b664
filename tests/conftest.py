"""Shared fakes for SpellSwitch tests.

Every external collaborator (engine, dictionary store, classifier) has an
in-memory stand-in that records how it was called.
"""

from __future__ import annotations

import asyncio

import pytest

from spellswitch.core.scheduler import VirtualScheduler
from spellswitch.errors import EngineUnavailable, NotFound
from spellswitch.intelligence.classifier import LanguageClassifier
from spellswitch.platform.engine import CheckEngine, SpellingSpan
from spellswitch.platform.kv_store import MemoryKeyValueStore


class FakeEngine(CheckEngine):
    """Engine whose vocabulary is the dictionary content (one word per line)."""

    def __init__(self, reports_misspellings: bool = True, fail_on_set: bool = False):
        self.reports_misspellings = reports_misspellings
        self.fail_on_set = fail_on_set
        self.language: str | None = None
        self.words: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self.spans_override: dict[str, list[SpellingSpan]] = {}

    def set_dictionary(self, language, content):
        if self.fail_on_set:
            raise EngineUnavailable("broken engine")
        self.language = language
        self.words = set(content.decode("utf-8").split())

    def is_misspelled(self, text):
        self.calls.append(("is_misspelled", text))
        return text not in self.words

    def check_spelling(self, text):
        self.calls.append(("check_spelling", text))
        if text in self.spans_override:
            return self.spans_override[text]
        spans = []
        pos = 0
        for word in text.split(" "):
            if word and word not in self.words:
                spans.append(SpellingSpan(pos, pos + len(word)))
            pos += len(word) + 1
        return spans

    def get_corrections_for_misspelling(self, text):
        return sorted(w for w in self.words if w[:1] == text[:1] and w != text)

    def add(self, text):
        self.words.add(text)

    def get_available_dictionaries(self):
        return [self.language] if self.language else []


class FakeStore:
    """Dictionary store serving a fixed set of languages.

    ``overlaps`` lists every language that was requested while a load of the
    same language was still running.
    """

    def __init__(self, dictionaries: dict[str, bytes] | None = None,
                 scheduler: VirtualScheduler | None = None):
        self.dictionaries = dict(dictionaries or {})
        self.failures: dict[str, Exception] = {}
        self.calls: list[str] = []
        self.gate: asyncio.Event | None = None
        self.scheduler = scheduler
        self.delays: dict[str, float] = {}
        self.loading: list[str] = []
        self.overlaps: list[str] = []

    async def load_dictionary_for_language(self, language, cache_only=False):
        self.calls.append(language)
        if language in self.loading:
            self.overlaps.append(language)
        self.loading.append(language)
        try:
            if self.gate is not None:
                await self.gate.wait()
            delay = self.delays.get(language)
            if delay and self.scheduler is not None:
                await self.scheduler.sleep(delay)
        finally:
            self.loading.remove(language)
        if language in self.failures:
            raise self.failures[language]
        if language not in self.dictionaries:
            raise NotFound(language)
        if cache_only:
            return f"/cache/{language}.dic.json.gz"
        return self.dictionaries[language]


class ReadOnlyStorage(MemoryKeyValueStore):
    """Key-value store whose writes fail like a read-only filesystem."""

    def set(self, key, value):
        raise OSError("read-only filesystem")


class FakeClassifier(LanguageClassifier):
    """Classifies by keyword: first language whose marker word appears wins."""

    MARKERS = {
        "de": {"ist", "eine", "und", "der", "die", "das", "nicht"},
        "en": {"is", "the", "a", "of", "and", "this"},
        "es": {"es", "el", "la", "una", "que"},
    }

    def __init__(self, scheduler: VirtualScheduler | None = None, latency: float = 0.0):
        self.calls: list[str] = []
        self.scheduler = scheduler
        self.latency = latency

    async def classify(self, text):
        self.calls.append(text)
        if self.latency and self.scheduler is not None:
            await self.scheduler.sleep(self.latency)
        words = set(text.lower().split())
        for lang, markers in self.MARKERS.items():
            if words & markers:
                return lang
        return None


EN_WORDS = b"this is a test of long english sentence bucket the and"
DE_WORDS = b"ist eine und der die das nicht Eimer Rechtschreibung"


@pytest.fixture
def scheduler() -> VirtualScheduler:
    return VirtualScheduler()


@pytest.fixture
def storage() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def store(scheduler) -> FakeStore:
    return FakeStore({"en-US": EN_WORDS, "de-DE": DE_WORDS, "es-ES": b"es el la una que"},
                     scheduler=scheduler)


@pytest.fixture
def classifier(scheduler) -> FakeClassifier:
    return FakeClassifier(scheduler)


@pytest.fixture
def fake_engine_factory():
    created: list[FakeEngine] = []

    def factory() -> FakeEngine:
        engine = FakeEngine()
        created.append(engine)
        return engine

    factory.created = created
    return factory
