"""
Remote ``extends`` resolution over HTTP.

HttpUrlFetcher is injected into ConfigMergerCore as its ``url_fetcher``.
Remote documents contribute settings only; their own ``extends`` are not
followed. Every failure (network error, timeout, bad status, malformed body)
resolves to None with a logged warning so the merge carries on.
"""

from __future__ import annotations

import logging as _logging
import typing as _typing

import httpx as _httpx

import layered_settings.constants as _constants
import layered_settings.merging.jsonc as jsonc
import layered_settings.merging.types as types

_logger = _logging.getLogger(__name__)


def settings_from_document(document: _typing.Any) -> types.Setting | None:
    """
    Extract the settings a remote document contributes.

    - A document with a ``settings`` object contributes that object
    - A document with neither ``settings`` nor ``extends`` is itself the
      settings mapping
    - Anything else contributes nothing

    Returns:
        Settings mapping, or None if the document is not an object.
    """
    if not isinstance(document, dict):
        return None

    settings = document.get("settings")
    if isinstance(settings, dict):
        return settings
    if "settings" not in document and "extends" not in document:
        return document
    return {}


class HttpUrlFetcher:
    """
    Fetches remote config documents with httpx.

    Example:
        >>> async with HttpUrlFetcher(timeout=2.0) as fetcher:
        ...     merger = ConfigMergerCore(reader, url_fetcher=fetcher)
        ...     await merger.merge_from_config("/repo/config.json", "/repo")

    Args:
        timeout: Seconds before a request gives up.
        transport: Optional httpx transport (used by tests).
        headers: Extra request headers.
    """

    def __init__(
        self,
        timeout: float = _constants.DEFAULT_URL_TIMEOUT,
        *,
        transport: _httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._timeout = timeout
        self._client = _httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers=headers,
            follow_redirects=True,
        )

    @property
    def timeout(self) -> float:
        return self._timeout

    async def fetch(self, url: str) -> types.Setting | None:
        """Fetch ``url`` and return its settings, or None on any failure."""
        _logger.debug("Fetching remote config %s", url)
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except _httpx.TimeoutException:
            _logger.warning("Timed out after %ss fetching %s", self._timeout, url)
            return None
        except _httpx.HTTPError as e:
            _logger.warning("Failed to fetch %s: %s", url, e)
            return None

        try:
            document = jsonc.parse_jsonc(response.text)
        except jsonc.JsoncParseError as e:
            _logger.warning("Failed to parse remote config %s: %s", url, e)
            return None

        settings = settings_from_document(document)
        if settings is None:
            _logger.warning("Remote config %s is not a JSON object", url)
        return settings

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpUrlFetcher:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
