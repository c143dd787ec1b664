"""LocaleResolver — turns a requested language code into a loadable dictionary.

Candidates for a request are tried strictly in order:

    [requested, likely host locale for its base, static fallback for its base]

The first candidate the store can serve wins and is remembered in a persisted
"learned mapping" table so the next request for the same code goes straight
to it. If a remembered target stops loading, the whole table is considered
untrustworthy and is reset to ``{}``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Protocol

from spellswitch.errors import DictionaryError, StaleLearnedMapping
from spellswitch.intelligence.fallback_locales import FALLBACK_LOCALES
from spellswitch.platform.locales import base_language, normalize_language_code

if TYPE_CHECKING:
    from spellswitch.platform.kv_store import KeyValueStore
    from spellswitch.platform.locales import HostLocaleSource

logger = logging.getLogger(__name__)

ALTERNATES_KEY = "spellswitch.alternates_table"


class DictionaryLoader(Protocol):
    async def load_dictionary_for_language(self, language: str, cache_only: bool = False) -> bytes | str: ...


@dataclass(frozen=True)
class Resolution:
    """Outcome of a resolution.

    ``dictionary`` is None when nothing could be loaded; ``language`` is then
    the requested code and spell checking should be disabled for it.
    """

    language: str
    dictionary: bytes | str | None

    @property
    def available(self) -> bool:
        return self.dictionary is not None


class LocaleResolver:
    """Resolves language codes with fallbacks and a learned-mapping fast path.

    Distinct codes may be resolved concurrently. The same code must not be:
    the learned table is read-modify-written without locking.
    """

    def __init__(
        self,
        store: DictionaryLoader,
        storage: "KeyValueStore",
        fallback_locales: Mapping[str, str] = FALLBACK_LOCALES,
        likely_locales: Mapping[str, str] | None = None,
        locale_source: "HostLocaleSource | None" = None,
    ):
        self.store = store
        self.storage = storage
        self.fallback_locales = fallback_locales
        self._likely_locales = dict(likely_locales) if likely_locales is not None else None
        self._locale_source = locale_source

    # -- likely locales -------------------------------------------------

    async def likely_locale_table(self) -> Mapping[str, str]:
        """Host likely-locale table, built on first use."""
        if self._likely_locales is None:
            if self._locale_source is None:
                self._likely_locales = {}
            else:
                self._likely_locales = await self._locale_source.likely_locale_table()
        return self._likely_locales

    async def likely_locale_for(self, language: str) -> str | None:
        """Best regional variant for *language*: host first, then static table."""
        base = base_language(language)
        table = await self.likely_locale_table()
        return table.get(base) or self.fallback_locales.get(base)

    async def candidates_for(self, code: str) -> list[str]:
        base = base_language(code)
        table = await self.likely_locale_table()
        candidates: list[str] = []
        for candidate in (code, table.get(base), self.fallback_locales.get(base)):
            if candidate and candidate not in candidates:
                candidates.append(candidate)
        return candidates

    # -- learned mappings -----------------------------------------------

    def learned_mappings(self) -> dict[str, str]:
        raw = self.storage.get(ALTERNATES_KEY)
        if not raw:
            return {}
        try:
            table = json.loads(raw)
        except ValueError:
            logger.warning("Learned mapping table is not valid JSON, ignoring it")
            return {}
        if not isinstance(table, dict):
            return {}
        return {k: v for k, v in table.items() if isinstance(k, str) and isinstance(v, str)}

    def forget_learned_mappings(self) -> None:
        self._store_table("{}")

    def _store_table(self, raw: str) -> None:
        # A failed write must not undo a load that already succeeded
        try:
            self.storage.set(ALTERNATES_KEY, raw)
        except OSError as exc:
            logger.warning("Can't persist learned mappings: %s", exc)

    def _remember(self, requested: str, language: str) -> None:
        table = self.learned_mappings()
        if table.get(requested) == language:
            return
        table[requested] = language
        self._store_table(json.dumps(table, sort_keys=True))

    async def _replay(self, requested: str, language: str, cache_only: bool) -> Resolution:
        try:
            content = await self.store.load_dictionary_for_language(language, cache_only)
        except DictionaryError as exc:
            raise StaleLearnedMapping(requested, language) from exc
        return Resolution(language, content)

    # -- resolution -----------------------------------------------------

    async def resolve(self, code: str, cache_only: bool = False) -> Resolution:
        """Resolve *code*; returns a null-dictionary Resolution when nothing loads."""
        code = normalize_language_code(code)

        learned = self.learned_mappings().get(code)
        if learned is not None:
            try:
                resolution = await self._replay(code, learned, cache_only)
                logger.debug("Resolved %s via learned mapping -> %s", code, learned)
                return resolution
            except StaleLearnedMapping as exc:
                logger.warning("%s; discarding all learned mappings", exc)
                self.forget_learned_mappings()

        candidates = await self.candidates_for(code)
        logger.debug("Requesting to load %s, candidates are %s", code, candidates)

        for candidate in candidates:
            try:
                content = await self.store.load_dictionary_for_language(candidate, cache_only)
            except DictionaryError as exc:
                logger.debug("Candidate %s for %s failed: %s", candidate, code, exc)
                continue
            self._remember(code, candidate)
            return Resolution(candidate, content)

        logger.info("No dictionary available for %s (tried %s)", code, ", ".join(candidates))
        return Resolution(code, None)
