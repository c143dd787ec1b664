"""LanguageAutoSwitcher — keeps the active checker in the language being typed.

Signals (text snapshots, bursts of misspelled words) feed one
``DebouncedReplace`` so exactly one evaluation can be in flight: a new signal
inside the debounce window, or while an evaluation is still classifying or
loading, supersedes it. Only the surviving evaluation may swap the checker or
publish LANGUAGE_CHANGED. Explicit switches share that rule: a signal
or another switch arriving while one resolves cancels it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, AsyncIterable, Callable

import spellswitch.log  # registers TRACE level and logger.trace()
from spellswitch.core.event_bus import EventBus
from spellswitch.core.events import Event, EvaluationData, EventType, LanguageChange
from spellswitch.core.scheduler import AsyncioScheduler, Scheduler
from spellswitch.core.states import EMPTY_CHECKER, CheckerState, State
from spellswitch.core.switch_latest import DebouncedReplace
from spellswitch.core.transitions import can_transition, next_state
from spellswitch.errors import EngineUnavailable

if TYPE_CHECKING:
    from spellswitch.intelligence.classifier import LanguageClassifier
    from spellswitch.intelligence.resolver import LocaleResolver, Resolution
    from spellswitch.platform.engine import CheckEngine, EngineFactory

logger = logging.getLogger(__name__)

_END = object()


class ChangeEventStream:
    """Async iterator over LanguageChange payloads published on a bus.

    Ends when ``close()`` is called (the switcher closes it on detach);
    changes published before that are still delivered.
    """

    def __init__(self, bus: EventBus):
        self._bus = bus
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        bus.subscribe(EventType.LANGUAGE_CHANGED, self._on_event)

    def _on_event(self, event: Event) -> None:
        self._queue.put_nowait(event.data)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._bus.unsubscribe(EventType.LANGUAGE_CHANGED, self._on_event)
        self._queue.put_nowait(_END)

    def drain(self) -> list[LanguageChange]:
        """Return changes queued so far without waiting."""
        items = []
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is _END:
                self._queue.put_nowait(_END)
                break
            items.append(item)
        return items

    def __aiter__(self) -> "ChangeEventStream":
        return self

    async def __anext__(self) -> LanguageChange:
        item = await self._queue.get()
        if item is _END:
            self._queue.put_nowait(_END)
            raise StopAsyncIteration
        return item


class LanguageAutoSwitcher:
    """Infers the typing language and owns the active ``CheckerState``.

    ``engine_factory`` builds a fresh engine for every language change; it may
    raise ``EngineUnavailable``, in which case the previous checker stays.
    """

    def __init__(
        self,
        resolver: "LocaleResolver",
        classifier: "LanguageClassifier",
        engine_factory: "EngineFactory",
        event_bus: EventBus | None = None,
        scheduler: Scheduler | None = None,
        debounce_delay: float = 0.75,
        misspelling_threshold: int = 2,
        min_sample_length: int = 8,
        debug: bool = False,
    ):
        self.resolver = resolver
        self.classifier = classifier
        self.engine_factory = engine_factory
        self.bus = event_bus or EventBus()
        self.scheduler = scheduler or AsyncioScheduler()
        self.debounce_delay = debounce_delay
        self.misspelling_threshold = max(1, misspelling_threshold)
        self.min_sample_length = min_sample_length
        self.debug = debug

        self._checker: CheckerState = EMPTY_CHECKER
        self._state = State.IDLE
        self._misspellings: list[str] = []
        self._evaluator: DebouncedReplace[EvaluationData, tuple[str, "Resolution"] | None] | None = None
        self._explicit: asyncio.Task | None = None
        self._switch_generation = 0
        self._pumps: list[asyncio.Task] = []
        self._streams: list[ChangeEventStream] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> State:
        return self._state

    @property
    def checker(self) -> CheckerState:
        return self._checker

    @property
    def current_language(self) -> str | None:
        return self._checker.language

    @property
    def current_engine(self) -> "CheckEngine | None":
        return self._checker.engine

    @property
    def attached(self) -> bool:
        return bool(self._pumps or self._streams)

    def _transition(self, event_name: str) -> bool:
        if not can_transition(self._state, event_name):
            logger.trace("Ignored transition %r from %s", event_name, self._state)  # type: ignore[attr-defined]
            return False
        new_state = next_state(self._state, event_name)
        if self.debug:
            logger.debug("State: %s → %s (on %r)", self._state, new_state, event_name)
        self._state = new_state
        return True

    def _settle_without_change(self) -> None:
        self._transition("restored" if self._checker.language is not None else "abandoned")

    def _publish(self, event_type: EventType, data) -> None:
        self.bus.publish(Event(event_type, data, self.scheduler.now()))

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------

    def _ensure_evaluator(self) -> DebouncedReplace:
        if self._evaluator is None or self._evaluator.closed:
            self._evaluator = DebouncedReplace(
                self._evaluate,
                self.debounce_delay,
                self._apply,
                scheduler=self.scheduler,
                name="language-eval",
                on_error=self._evaluation_failed,
            )
        return self._evaluator

    def _signal(self, data: EvaluationData) -> None:
        self._supersede_explicit()
        self._transition("signal")
        self._ensure_evaluator().push(data)

    def on_text(self, text: str) -> None:
        """A new snapshot of the edited text; supersedes pending evaluation."""
        self._publish(EventType.TEXT_CHANGED, text)
        self._signal(EvaluationData(sample=text, source="text"))

    def on_misspelling(self, word: str) -> None:
        """A word was flagged; enough of them trigger re-classification."""
        word = word.strip()
        if not word:
            return
        self._publish(EventType.MISSPELLING_OBSERVED, word)
        self._misspellings.append(word)
        if len(self._misspellings) < self.misspelling_threshold:
            return
        sample = " ".join(self._misspellings)
        self._misspellings.clear()
        logger.debug("Misspelling threshold reached, re-classifying %r", sample)
        self._signal(EvaluationData(sample=sample, source="misspellings"))

    @property
    def pending_misspellings(self) -> list[str]:
        return list(self._misspellings)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    async def _evaluate(self, data: EvaluationData) -> tuple[str, "Resolution"] | None:
        sample = data.sample.strip()
        if data.source == "text" and len(sample) < self.min_sample_length:
            logger.trace("Sample too short to classify: %r", sample)  # type: ignore[attr-defined]
            return None

        guess = await self.classifier.classify(sample)
        if not guess:
            logger.debug("No language guess for %s sample", data.source)
            return None
        logger.debug("Classified %s sample as %s", data.source, guess)
        return guess, await self.resolver.resolve(guess)

    def _apply(self, outcome: tuple[str, "Resolution"] | None) -> None:
        if outcome is None:
            self._settle_without_change()
            return
        requested, resolution = outcome
        try:
            self._bind(requested, resolution)
        except EngineUnavailable as exc:
            logger.warning("Keeping %s, engine failed for %s: %s",
                           self._checker.language, resolution.language, exc)
            self._settle_without_change()

    def _evaluation_failed(self, exc: Exception) -> None:
        self._settle_without_change()

    def _bind(self, requested: str, resolution: "Resolution") -> LanguageChange | None:
        """Swap the checker for *resolution*; returns the published change, if any."""
        current = self._checker

        if not resolution.available:
            if current.language == resolution.language and not current.bound:
                self._transition("resolved")
                return None
            new_checker = CheckerState(language=resolution.language, engine=None)
            change = LanguageChange(requested, resolution.language, available=False)
            logger.info("No dictionary for %s, spell checking disabled", resolution.language)
        elif current.language == resolution.language and current.bound:
            self._transition("resolved")
            return None
        else:
            try:
                engine = self.engine_factory()
                engine.set_dictionary(resolution.language, resolution.dictionary)
            except EngineUnavailable:
                raise
            except Exception as exc:
                raise EngineUnavailable(f"engine setup failed for {resolution.language}: {exc}") from exc
            new_checker = CheckerState(language=resolution.language, engine=engine)
            change = LanguageChange(requested, resolution.language, available=True)
            logger.info("Switched spell checker to %s (requested %s)", resolution.language, requested)

        self._checker = new_checker
        self._transition("resolved")
        self._publish(EventType.LANGUAGE_CHANGED, change)
        return change

    def _supersede_explicit(self) -> None:
        self._switch_generation += 1
        task, self._explicit = self._explicit, None
        if task is not None and not task.done():
            logger.trace("Cancelling superseded switch %s", task.get_name())  # type: ignore[attr-defined]
            task.cancel()

    async def switch_language(self, code: str) -> LanguageChange | None:
        """Explicitly switch to *code* (with fallbacks).

        Pending automatic evaluation and any earlier explicit switch are
        dropped. A signal or switch arriving while this one resolves
        supersedes it, and None is returned. Raises EngineUnavailable if the
        engine cannot be built; the previous checker is kept then.
        """
        self._supersede_explicit()
        if self._evaluator is not None:
            self._evaluator.cancel()
        generation = self._switch_generation
        task = asyncio.get_running_loop().create_task(
            self.resolver.resolve(code), name=f"switch-{code}-{generation}")
        self._explicit = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            if self._explicit is task:
                self._explicit = None

        if task.cancelled():
            logger.debug("Explicit switch to %s superseded", code)
            return None
        resolution = task.result()
        if generation != self._switch_generation:
            logger.debug("Explicit switch to %s superseded", code)
            return None
        try:
            return self._bind(code, resolution)
        except EngineUnavailable:
            self._settle_without_change()
            raise

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    async def _pump(self, source: AsyncIterable[str], sink: Callable[[str], None], name: str) -> None:
        try:
            async for item in source:
                sink(item)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("%s stream failed", name)

    def attach(
        self,
        text_stream: AsyncIterable[str] | None = None,
        error_stream: AsyncIterable[str] | None = None,
    ) -> ChangeEventStream:
        """Consume the given streams and return a stream of language changes.

        Must be called from a running event loop.
        """
        loop = asyncio.get_running_loop()
        stream = ChangeEventStream(self.bus)
        self._streams.append(stream)
        if text_stream is not None:
            self._pumps.append(loop.create_task(self._pump(text_stream, self.on_text, "text"), name="text-pump"))
        if error_stream is not None:
            self._pumps.append(loop.create_task(
                self._pump(error_stream, self.on_misspelling, "misspelling"), name="misspelling-pump"))
        return stream

    async def detach(self) -> None:
        """Stop consuming streams and drop every pending evaluation.

        Nothing started before this call can change the checker afterward.
        """
        pumps, self._pumps = self._pumps, []
        for task in pumps:
            task.cancel()
        if pumps:
            await asyncio.gather(*pumps, return_exceptions=True)

        self._supersede_explicit()
        if self._evaluator is not None:
            await self._evaluator.stop()
            self._evaluator = None
        self._misspellings.clear()
        if self._state is State.EVALUATING:
            self._settle_without_change()

        streams, self._streams = self._streams, []
        for stream in streams:
            stream.close()
        self._publish(EventType.DETACHED, None)
