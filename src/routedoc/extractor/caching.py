"""Per-view caching of extraction results.

Uses :mod:`diskcache` to persist the extracted entry list of each view so
that repeated documentation builds skip the parsing pipeline. Each view is
stored under ``<cache_key>.<view>`` as a JSON dump of the entries plus a
fingerprint of the files they were derived from: the source files of the
documented handlers and any extra route resources (such as the manifest
the routes were loaded from).

Freshness follows two modes:

* ``debug=False`` -- a stored entry is always trusted. Clear the cache
  after changing handlers or routes.
* ``debug=True`` -- the fingerprint is recomputed on every read and a
  mismatch triggers re-extraction.

:class:`diskcache.Cache` writes are transactional, so a concurrent reader
never observes a partially written entry. Failing to write is not fatal:
the freshly extracted entries are returned and a warning is logged.
"""

from __future__ import annotations

import hashlib
import inspect
import logging
import sqlite3
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Optional

import diskcache
from pydantic import TypeAdapter

from routedoc.annotation import resolve_handler
from routedoc.extractor.extractor import ApiDocExtractor
from routedoc.models import DEFAULT_VIEW, Entry

logger = logging.getLogger(__name__)

_ENTRIES = TypeAdapter(list[Entry])


def _source_file(handler: Any) -> Optional[Path]:
    try:
        source = inspect.getsourcefile(handler)
    except TypeError:
        return None
    return Path(source) if source else None


class CachingApiDocExtractor(ApiDocExtractor):
    """An :class:`ApiDocExtractor` whose :meth:`all` results are cached per view.

    Args:
        cache_dir: Root directory for the cache. An ``entries/``
            subdirectory is created inside it.
        cache_key: Prefix of the stored keys, so that several route tables
            can share one cache directory.
        debug: Validate stored entries against the source fingerprint.
        resources: Extra files whose changes invalidate the cache.
        **kwargs: Passed on to :class:`ApiDocExtractor`.

    Example::

        extractor = CachingApiDocExtractor(
            routes,
            parsers=default_parsers(),
            cache_dir="/tmp/routedoc-cache",
            resources=["routes.yaml"],
            debug=True,
        )
        entries = extractor.all("default")
    """

    def __init__(
        self,
        routes: Iterable[Any] = (),
        *,
        cache_dir: str | Path,
        cache_key: str = "routedoc",
        debug: bool = False,
        resources: Iterable[str | Path] = (),
        **kwargs: Any,
    ) -> None:
        super().__init__(routes, **kwargs)
        self._cache_dir = Path(cache_dir)
        self._cache_key = cache_key
        self._debug = debug
        self._resources = [Path(resource) for resource in resources]
        self._cache = diskcache.Cache(str(self._cache_dir / "entries"))

    def all(self, view: str = DEFAULT_VIEW) -> list[Entry]:
        key = self.view_key(view)
        stored = self._cache.get(key)

        if stored is not None and (not self._debug or stored["fingerprint"] == self.fingerprint()):
            logger.debug("Cache hit for '%s'", key)
            return _ENTRIES.validate_json(stored["entries"])

        logger.debug("Cache miss for '%s'", key)
        entries = super().all(view)
        payload = {
            "fingerprint": self.fingerprint(),
            "entries": _ENTRIES.dump_json(entries, by_alias=True, exclude_unset=True).decode(),
        }
        try:
            self._cache.set(key, payload)
        except (OSError, sqlite3.Error, diskcache.Timeout) as exc:
            logger.warning("Could not write extraction cache '%s': %s", key, exc)
        return entries

    def view_key(self, view: str) -> str:
        return f"{self._cache_key}.{view}"

    def fingerprint(self) -> str:
        """Hash of the paths, sizes and modification times of the tracked files."""
        paths: set[Path] = set(self._resources)
        for route in self.get_routes():
            handler = resolve_handler(route.handler)
            if handler is None or self.declaration_for(route, handler) is None:
                continue
            source = _source_file(handler)
            if source is not None:
                paths.add(source)

        digest = hashlib.sha256()
        for path in sorted(paths):
            try:
                stat = path.stat()
                digest.update(f"{path}|{stat.st_mtime_ns}|{stat.st_size}\n".encode())
            except OSError:
                digest.update(f"{path}|missing\n".encode())
        return digest.hexdigest()

    def clear(self) -> None:
        """Remove all cached views."""
        self._cache.clear()

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache`."""
        self._cache.close()
