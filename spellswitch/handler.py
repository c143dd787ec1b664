"""SpellCheckHandler — composes resolver, misspelling cache and auto-switcher.

Sample text should be text that is reasonably likely to be in the same
language as what the user is typing: in a reply box the quoted message is a
good sample, in a chat the existing channel messages are.

Typical use::

    handler = SpellCheckHandler.from_config(load_config())
    async with handler:
        changes = handler.attach(text_snapshots(), flagged_words())
        async for change in changes:
            ...
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, AsyncIterable

import spellswitch.log  # registers TRACE level and logger.trace()
from spellswitch.core.auto_switcher import ChangeEventStream, LanguageAutoSwitcher
from spellswitch.core.event_bus import EventBus
from spellswitch.core.events import Event, EventType, LanguageChange
from spellswitch.core.scheduler import AsyncioScheduler, Scheduler
from spellswitch.core.states import CheckerState, State
from spellswitch.intelligence.misspelling_cache import MisspellingCache

if TYPE_CHECKING:
    from spellswitch.intelligence.classifier import LanguageClassifier
    from spellswitch.intelligence.resolver import DictionaryLoader, LocaleResolver, Resolution
    from spellswitch.platform.engine import EngineFactory
    from spellswitch.platform.kv_store import KeyValueStore
    from spellswitch.platform.system_adapter import ISystemAdapter

logger = logging.getLogger(__name__)


class SpellCheckHandler:
    """Public entry point: resolution, misspelling queries and auto-switching.

    The handler owns no global state; build as many as needed. ``start()``
    warms up the host locale table, ``stop()`` detaches everything.
    """

    def __init__(
        self,
        resolver: "LocaleResolver",
        classifier: "LanguageClassifier",
        engine_factory: "EngineFactory",
        event_bus: EventBus | None = None,
        scheduler: Scheduler | None = None,
        cache_size: int = 512,
        cache_ttl: float = 8.0,
        debounce_delay: float = 0.75,
        misspelling_threshold: int = 2,
        min_sample_length: int = 8,
        debug: bool = False,
    ):
        self.debug = debug
        self.scheduler = scheduler or AsyncioScheduler()
        self.bus = event_bus or EventBus()
        self.resolver = resolver
        self.switcher = LanguageAutoSwitcher(
            resolver,
            classifier,
            engine_factory,
            event_bus=self.bus,
            scheduler=self.scheduler,
            debounce_delay=debounce_delay,
            misspelling_threshold=misspelling_threshold,
            min_sample_length=min_sample_length,
            debug=debug,
        )
        self.misspellings = MisspellingCache(
            lambda: self.switcher.current_engine,
            maxsize=cache_size,
            ttl=cache_ttl,
            clock=self.scheduler.now,
        )
        self.bus.subscribe(EventType.LANGUAGE_CHANGED, self._on_language_changed)
        self._running = False

    @classmethod
    def from_config(
        cls,
        config: dict,
        *,
        scheduler: Scheduler | None = None,
        store: "DictionaryLoader | None" = None,
        storage: "KeyValueStore | None" = None,
        classifier: "LanguageClassifier | None" = None,
        engine_factory: "EngineFactory | None" = None,
        system: "ISystemAdapter | None" = None,
    ) -> "SpellCheckHandler":
        """Build a handler from a validated config dict.

        Every collaborator can be overridden; the defaults are the on-disk
        dictionary store, the JSON key-value file, langdetect and
        pyspellchecker.
        """
        from spellswitch.intelligence.fallback_locales import FALLBACK_LOCALES
        from spellswitch.intelligence.resolver import LocaleResolver
        from spellswitch.platform.locales import HostLocaleSource

        if store is None:
            from spellswitch.intelligence.dictionary_store import DictionaryStore
            store = DictionaryStore(
                cache_dir=config['dictionary_dir'],
                url_template=config['dictionary_url'],
                timeout=config['download_timeout'],
            )
        if storage is None:
            from spellswitch.platform.kv_store import JsonFileKeyValueStore
            storage = JsonFileKeyValueStore(config['storage_path'])
        if classifier is None:
            from spellswitch.intelligence.classifier import LangdetectClassifier
            classifier = LangdetectClassifier()
        if engine_factory is None:
            from spellswitch.platform.pyspellchecker_engine import PySpellCheckerEngine
            engine_factory = PySpellCheckerEngine

        resolver = LocaleResolver(
            store,
            storage,
            fallback_locales=FALLBACK_LOCALES,
            locale_source=HostLocaleSource(system=system, fallback_locales=FALLBACK_LOCALES),
        )
        return cls(
            resolver,
            classifier,
            engine_factory,
            scheduler=scheduler,
            cache_size=config['cache_size'],
            cache_ttl=config['cache_ttl'],
            debounce_delay=config['debounce_delay'],
            misspelling_threshold=config['misspelling_threshold'],
            min_sample_length=config['min_sample_length'],
            debug=config['debug'],
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            return
        await self.resolver.likely_locale_table()
        self._running = True
        logger.info("SpellCheckHandler started")

    async def stop(self) -> None:
        if not self._running:
            return
        await self.detach()
        self._running = False
        logger.info("SpellCheckHandler stopped")

    async def __aenter__(self) -> "SpellCheckHandler":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Checker
    # ------------------------------------------------------------------

    @property
    def checker(self) -> CheckerState:
        return self.switcher.checker

    @property
    def current_language(self) -> str | None:
        return self.switcher.current_language

    @property
    def state(self) -> State:
        return self.switcher.state

    @property
    def events(self) -> EventBus:
        """Bus carrying TEXT_CHANGED, MISSPELLING_OBSERVED, LANGUAGE_CHANGED and DETACHED."""
        return self.bus

    def _on_language_changed(self, event: Event) -> None:
        # Results computed against the previous dictionary no longer apply
        self.misspellings.clear()

    async def resolve(self, code: str, cache_only: bool = False) -> "Resolution":
        return await self.resolver.resolve(code, cache_only)

    async def switch_language(self, code: str) -> LanguageChange | None:
        return await self.switcher.switch_language(code)

    def is_misspelled(self, text: str) -> bool:
        return self.misspellings.is_misspelled(text)

    def get_corrections_for_misspelling(self, text: str) -> list[str] | None:
        engine = self.switcher.current_engine
        if engine is None:
            return None
        return engine.get_corrections_for_misspelling(text)

    def add_to_dictionary(self, text: str) -> bool:
        engine = self.switcher.current_engine
        if engine is None:
            return False
        engine.add(text)
        self.misspellings.clear()
        return True

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    def attach(
        self,
        text_stream: AsyncIterable[str] | None = None,
        error_stream: AsyncIterable[str] | None = None,
    ) -> ChangeEventStream:
        return self.switcher.attach(text_stream, error_stream)

    async def detach(self) -> None:
        await self.switcher.detach()
