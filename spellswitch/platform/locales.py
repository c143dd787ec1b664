"""Host locale discovery and the likely-locale table.

The likely-locale table maps a base language (``"en"``) to the one regional
variant the host is configured for (``"en-GB"``). Some distributions list
every locale for a language in ``locale -a``; a base with more than one
distinct locale is therefore left out instead of guessed. A valid ``LANG``
always wins for its own base.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import sys
from typing import TYPE_CHECKING, Iterable, Mapping

import spellswitch.log  # registers TRACE level and logger.trace()

if TYPE_CHECKING:
    from spellswitch.platform.engine import CheckEngine
    from spellswitch.platform.system_adapter import ISystemAdapter

logger = logging.getLogger(__name__)

# Linux and Windows spell locales with an underscore (en_US); codes in this
# package use the Chromium spelling (en-US).
_PLATFORM_LOCALE_RE = re.compile(r"[a-z]{2}[_-][A-Z]{2}")
_CODE_RE = re.compile(r"^([A-Za-z]{2})(?:[-_]([A-Za-z]{2}))?(?:$|[.@])")


def normalize_language_code(code: str) -> str:
    """``en_US.UTF-8`` → ``en-US``, ``EN`` → ``en``; other input is returned stripped."""
    code = code.strip()
    m = _CODE_RE.match(code)
    if not m:
        return code
    lang, region = m.group(1).lower(), m.group(2)
    return f"{lang}-{region.upper()}" if region else lang


def base_language(code: str) -> str:
    return code[:2].lower()


def build_likely_locale_table(locales: Iterable[str], lang_env: str | None = None) -> dict[str, str]:
    """Build ``{base: locale}`` from raw host locale names."""
    by_base: dict[str, set[str]] = {}
    for raw in locales:
        m = _PLATFORM_LOCALE_RE.search(raw)
        if not m:
            continue
        code = normalize_language_code(m.group(0))
        by_base.setdefault(base_language(code), set()).add(code)

    logger.debug("Host locales by base: %r", {k: sorted(v) for k, v in by_base.items()})

    table = {base: next(iter(codes)) for base, codes in by_base.items() if len(codes) == 1}

    if lang_env:
        m = _PLATFORM_LOCALE_RE.search(lang_env)
        if m:
            code = normalize_language_code(m.group(0))
            table[base_language(code)] = code

    logger.debug("Likely locale table: %r", table)
    return table


class HostLocaleSource:
    """Enumerates host locales and builds the likely-locale table once asked.

    Linux hosts are asked through ``locale -a``; elsewhere, if an engine is
    given, its available dictionaries are used (two-letter entries are mapped
    through *fallback_locales*).
    """

    def __init__(
        self,
        system: "ISystemAdapter | None" = None,
        environ: Mapping[str, str] | None = None,
        platform: str | None = None,
        engine: "CheckEngine | None" = None,
        fallback_locales: Mapping[str, str] | None = None,
    ):
        if system is None:
            from spellswitch.platform.subprocess_impl import SubprocessSystemAdapter
            system = SubprocessSystemAdapter()
        self.system = system
        self.environ = os.environ if environ is None else environ
        self.platform = platform or sys.platform
        self.engine = engine
        self.fallback_locales = fallback_locales or {}

    def raw_locales(self) -> list[str]:
        if self.platform.startswith("linux"):
            return self.system.list_locales()
        if self.engine is not None:
            out = []
            for entry in self.engine.get_available_dictionaries():
                if len(entry) == 2:
                    fallback = self.fallback_locales.get(entry.lower())
                    if fallback:
                        out.append(fallback)
                else:
                    out.append(normalize_language_code(entry))
            return out
        return []

    async def likely_locale_table(self) -> dict[str, str]:
        raw = await asyncio.to_thread(self.raw_locales)
        logger.trace("Raw locale list: %r", raw)  # type: ignore[attr-defined]
        lang_env = self.environ.get("LANG") if self.platform.startswith("linux") else None
        return build_likely_locale_table(raw, lang_env)
