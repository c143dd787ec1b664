"""Language classification of text samples."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException

logger = logging.getLogger(__name__)


class LanguageClassifier(ABC):
    @abstractmethod
    async def classify(self, text: str) -> str | None:
        """Best-guess language code for *text*, or None if undecidable."""


class LangdetectClassifier(LanguageClassifier):
    """Classifier backed by the langdetect library.

    langdetect is randomized; the detector factory is seeded so the same
    sample always yields the same guess. Guesses below *min_probability* are
    dropped.
    """

    def __init__(self, min_probability: float = 0.5, seed: int = 0):
        DetectorFactory.seed = seed
        self.min_probability = min_probability

    def _detect(self, text: str) -> str | None:
        try:
            guesses = detect_langs(text)
        except LangDetectException as exc:
            logger.debug("langdetect could not classify %r: %s", text[:40], exc)
            return None
        if not guesses:
            return None
        best = guesses[0]
        if best.prob < self.min_probability:
            logger.debug("langdetect guess %s too weak (%.2f)", best.lang, best.prob)
            return None
        # langdetect uses zh-cn / zh-tw; keep the region uppercase like other codes
        lang, _, region = best.lang.partition("-")
        return f"{lang}-{region.upper()}" if region else lang

    async def classify(self, text: str) -> str | None:
        return await asyncio.to_thread(self._detect, text)
