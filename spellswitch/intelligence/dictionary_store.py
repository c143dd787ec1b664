"""DictionaryStore — local dictionary cache backed by HTTP downloads.

A dictionary for ``en-US`` lives at ``<cache_dir>/en-US.dic.json.gz``. Local
copies are preferred; a copy smaller than ``MIN_SIZE`` is treated as a broken
download, deleted and fetched again once.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile

import httpx

from spellswitch.errors import CorruptFile, DownloadError, NotFound
from spellswitch.platform.locales import base_language, normalize_language_code

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = os.path.expanduser("~/.cache/spellswitch/dictionaries")
# pyspellchecker publishes one word-frequency table per base language
DEFAULT_URL_TEMPLATE = (
    "https://raw.githubusercontent.com/barrust/pyspellchecker/master/"
    "spellchecker/resources/{base}.json.gz"
)


class DictionaryStore:
    """Loads dictionaries by language code, downloading on a cache miss.

    ``url_template`` may use ``{code}`` (``en-US``) and ``{base}`` (``en``).
    """

    MIN_SIZE = 8 * 1024

    def __init__(
        self,
        cache_dir: str | None = None,
        url_template: str = DEFAULT_URL_TEMPLATE,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.cache_dir = cache_dir or DEFAULT_CACHE_DIR
        self.url_template = url_template
        self.timeout = timeout
        self._client = client
        os.makedirs(self.cache_dir, exist_ok=True)

    def path_for(self, language: str) -> str:
        return os.path.join(self.cache_dir, f"{normalize_language_code(language)}.dic.json.gz")

    def url_for(self, language: str) -> str:
        code = normalize_language_code(language)
        return self.url_template.format(code=code, base=base_language(code))

    async def load_dictionary_for_language(self, language: str, cache_only: bool = False) -> bytes | str:
        """Return dictionary bytes, or the local file path if *cache_only*.

        Raises NotFound, DownloadError or CorruptFile.
        """
        lang = normalize_language_code(language)
        target = self.path_for(lang)
        logger.debug("Loading dictionary for language %s", lang)

        if os.path.exists(target):
            try:
                content = await asyncio.to_thread(self._read_checked, target, lang)
                logger.debug("Returning local copy: %s", target)
                return target if cache_only else content
            except CorruptFile as exc:
                logger.debug("Local copy unusable, fetching again: %s", exc)
            try:
                os.unlink(target)
            except FileNotFoundError:
                pass
            except OSError as exc:
                raise CorruptFile(lang, f"can't clear out {target}: {exc}") from exc

        await self._download(lang, target)
        content = await asyncio.to_thread(self._read_checked, target, lang)
        return target if cache_only else content

    def _read_checked(self, path: str, language: str) -> bytes:
        try:
            with open(path, "rb") as f:
                content = f.read()
        except OSError as exc:
            raise CorruptFile(language, f"failed to read {path}: {exc}") from exc
        if len(content) < self.MIN_SIZE:
            raise CorruptFile(language, f"{path} is {len(content)} bytes, most likely bogus")
        return content

    async def _fetch(self, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, follow_redirects=True)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url, follow_redirects=True)

    async def _download(self, language: str, target: str) -> None:
        url = self.url_for(language)
        logger.info("Downloading dictionary %s from %s", language, url)
        try:
            response = await self._fetch(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise NotFound(language, f"no dictionary at {url}") from exc
            raise DownloadError(language, f"{url}: HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise DownloadError(language, f"{url}: {exc}") from exc
        try:
            await asyncio.to_thread(self._write_atomic, target, response.content)
        except OSError as exc:
            raise DownloadError(language, f"can't save {target}: {exc}") from exc

    @staticmethod
    def _write_atomic(path: str, content: bytes) -> None:
        dir_path = os.path.dirname(os.path.abspath(path))
        fd, tmp_path = tempfile.mkstemp(dir=dir_path, suffix=".part")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.replace(tmp_path, path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
