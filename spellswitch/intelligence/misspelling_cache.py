"""MisspellingCache — memoized ``is_misspelled`` with engine-quirk workarounds.

Two quirks of native engines are compensated here:

* contracted English words ("doesn't") arrive split at the apostrophe and the
  stem ("doesn") is flagged; stems of known contractions are never misspelled;
* span-reporting engines flag a capitalized sentence-initial word; when the
  only evidence is a span at offset 0 the lowercased word is re-checked.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

import spellswitch.log  # registers TRACE level and logger.trace()

if TYPE_CHECKING:
    from spellswitch.platform.engine import CheckEngine

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

CONTRACTIONS: tuple[str, ...] = (
    "ain't", "aren't", "can't", "could've", "couldn't", "couldn't've", "didn't", "doesn't", "don't", "hadn't",
    "hadn't've", "hasn't", "haven't", "he'd", "he'd've", "he'll", "he's", "how'd", "how'll", "how's", "I'd",
    "I'd've", "I'll", "I'm", "I've", "isn't", "it'd", "it'd've", "it'll", "it's", "let's", "ma'am", "mightn't",
    "mightn't've", "might've", "mustn't", "must've", "needn't", "not've", "o'clock", "shan't", "she'd", "she'd've",
    "she'll", "she's", "should've", "shouldn't", "shouldn't've", "that'll", "that's", "there'd", "there'd've",
    "there're", "there's", "they'd", "they'd've", "they'll", "they're", "they've", "wasn't", "we'd", "we'd've",
    "we'll", "we're", "we've", "weren't", "what'll", "what're", "what's", "what've", "when's", "where'd",
    "where's", "where've", "who'd", "who'll", "who're", "who's", "who've", "why'll", "why're", "why's", "won't",
    "would've", "wouldn't", "wouldn't've", "y'all", "y'all'd've", "you'd", "you'd've", "you'll", "you're", "you've",
)

_APOSTROPHES = ("'", "’")


def _stem(word: str) -> str:
    for apostrophe in _APOSTROPHES:
        word = word.split(apostrophe, 1)[0]
    return word


CONTRACTION_STEMS: frozenset[str] = frozenset(_stem(c).lower() for c in CONTRACTIONS)


def is_contraction_stem(text: str) -> bool:
    """True if *text* (or its part before an apostrophe) is a contraction stem."""
    return _stem(text.lower()) in CONTRACTION_STEMS


class TtlLruCache(Generic[K, V]):
    """Bounded mapping with least-recently-used eviction and per-entry expiry.

    An entry older than ``ttl`` seconds is a miss and is dropped on lookup.
    """

    def __init__(self, maxsize: int = 512, ttl: float = 8.0, clock: Callable[[], float] = time.monotonic):
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")
        self.maxsize = maxsize
        self.ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[K, tuple[V, float]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and self._clock() - entry[1] < self.ttl

    def get(self, key: K, default: V | None = None) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return default
        value, inserted_at = entry
        if self._clock() - inserted_at >= self.ttl:
            del self._entries[key]
            return default
        self._entries.move_to_end(key)
        return value

    def set(self, key: K, value: V) -> None:
        self._entries[key] = (value, self._clock())
        self._entries.move_to_end(key)
        while len(self._entries) > self.maxsize:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()


class MisspellingCache:
    """``is_misspelled`` against whatever engine *engine_source* currently returns.

    The engine is only read, never replaced or reconfigured from here.
    """

    def __init__(
        self,
        engine_source: Callable[[], "CheckEngine | None"],
        maxsize: int = 512,
        ttl: float = 8.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._engine_source = engine_source
        self._cache: TtlLruCache[str, bool] = TtlLruCache(maxsize=maxsize, ttl=ttl, clock=clock)

    def __len__(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        self._cache.clear()

    def is_misspelled(self, text: str) -> bool:
        cached = self._cache.get(text)
        if cached is not None:
            logger.trace("is_misspelled(%r) cache hit: %s", text, cached)  # type: ignore[attr-defined]
            return cached
        result = self._compute(text)
        self._cache.set(text, result)
        return result

    def _compute(self, text: str) -> bool:
        if is_contraction_stem(text):
            return False

        engine = self._engine_source()
        if engine is None:
            return False

        if engine.reports_misspellings:
            return bool(engine.is_misspelled(text))

        spans = engine.check_spelling(text)
        if not spans:
            return False
        if spans[0].start != 0:
            return True
        # Capitalized first word of a sentence: ask again in lowercase
        return bool(engine.is_misspelled(text.lower()))
