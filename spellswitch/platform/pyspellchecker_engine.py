"""PySpellCheckerEngine — CheckEngine backed by the pyspellchecker library.

Dictionary content is a word-frequency table in JSON (``{"word": count}``),
optionally gzip-compressed, which is the format pyspellchecker ships its own
language resources in.
"""

from __future__ import annotations

import gzip
import json
import logging
import re

from spellchecker import SpellChecker

from spellswitch.errors import EngineUnavailable
from spellswitch.platform.engine import CheckEngine, SpellingSpan

logger = logging.getLogger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"
# Letters with optional inner apostrophes ("don't", "l’homme")
_WORD_RE = re.compile(r"[^\W\d_]+(?:['’][^\W\d_]+)*")


def _decode_word_frequency(content: bytes) -> dict[str, int]:
    raw = gzip.decompress(content) if content[:2] == _GZIP_MAGIC else content
    data = json.loads(raw.decode("utf-8"))
    if not isinstance(data, dict):
        raise ValueError("word frequency table must be a JSON object")
    return data


class PySpellCheckerEngine(CheckEngine):
    """Predicate engine: ``is_misspelled`` is answered from the frequency table."""

    reports_misspellings = True

    def __init__(self, distance: int = 2):
        self._distance = distance
        self._checker = SpellChecker(language=None, distance=distance)
        self.language: str | None = None

    def set_dictionary(self, language: str, content: bytes) -> None:
        try:
            words = _decode_word_frequency(content)
        except (OSError, ValueError) as exc:
            raise EngineUnavailable(f"unusable dictionary for {language}: {exc}") from exc
        checker = SpellChecker(language=None, distance=self._distance)
        checker.word_frequency.load_json(words)
        self._checker = checker
        self.language = language
        logger.debug("pyspellchecker loaded %d words for %s", len(words), language)

    def _words(self, text: str) -> list[str]:
        return _WORD_RE.findall(text)

    def is_misspelled(self, text: str) -> bool:
        words = self._words(text)
        if not words:
            return False
        return any(word not in self._checker for word in words)

    def check_spelling(self, text: str) -> list[SpellingSpan]:
        spans = []
        for match in _WORD_RE.finditer(text):
            if match.group(0) not in self._checker:
                spans.append(SpellingSpan(match.start(), match.end()))
        return spans

    def get_corrections_for_misspelling(self, text: str) -> list[str]:
        candidates = self._checker.candidates(text) or set()
        frequency = self._checker.word_frequency
        return sorted(
            (c for c in candidates if c != text.lower()),
            key=lambda c: (-frequency[c] if c in frequency else 0, c),
        )

    def add(self, text: str) -> None:
        self._checker.word_frequency.load_words([text])

    def get_available_dictionaries(self) -> list[str]:
        languages = getattr(SpellChecker, "languages", None)
        if languages is None:
            return []
        return sorted(languages())
