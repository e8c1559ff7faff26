"""
Flat-file JSON storage for named collections.

Every collection (``users``, ``reports``, ``notifications``) lives in
one JSON document ``<data_dir>/<name>.json`` and is always read and
written as a whole.  ``JsonStore`` is the only code that touches these
files:

* ``load`` returns a freshly decoded copy of a collection.  A missing
  file is seeded with the caller's default; an empty or malformed file
  is logged and the default is returned without touching the file.
* ``save`` rewrites a collection atomically: the new content is written
  to a temporary file in the same directory and moved over the target
  with ``os.replace``, so readers see either the old or the new
  document, never a partial one.
* ``edit`` holds the collection's writer lock for a complete
  load-mutate-save cycle.  All writers of a collection go through that
  lock, so concurrent requests cannot lose each other's updates.
  Readers never wait on it.

Decoding revives timestamps: any string of the form
``YYYY-MM-DDTHH:MM:SS[.fff]Z`` becomes a UTC ``RevivedTimestamp``
that remembers its text.  Encoding writes revived values back as they
were read and other datetimes with millisecond precision.

File I/O runs in a worker thread so request coroutines only suspend
while a collection is being read or written.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import os
import re
import tempfile
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional

from .config import settings
from .errors import StorageError


logger = logging.getLogger(__name__)

TIMESTAMP_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,3})?Z")
_COLLECTION_NAME = re.compile(r"[A-Za-z0-9_-]+")

# Sentinels returned by JsonStore._read
_MISSING = object()
_INVALID = object()


class RevivedTimestamp(datetime):
    """A UTC ``datetime`` decoded from a stored string.

    ``source`` is the exact text it was decoded from.  Free text that
    happens to look like a timestamp (a report reason, a display name)
    is turned back into that text by the schemas and by ``encode``.
    """

    source: Optional[str] = None


def parse_timestamp(value: str) -> Optional[datetime]:
    """Return the UTC datetime for an ISO timestamp string, or ``None``.

    Only strings matching ``TIMESTAMP_PATTERN`` are accepted; values
    that match the pattern but name an impossible date (``2024-02-30``)
    are left alone.
    """
    if not TIMESTAMP_PATTERN.fullmatch(value):
        return None
    fmt = "%Y-%m-%dT%H:%M:%S.%fZ" if "." in value else "%Y-%m-%dT%H:%M:%SZ"
    try:
        parsed = datetime.strptime(value, fmt)
    except ValueError:
        return None
    revived = RevivedTimestamp(
        parsed.year, parsed.month, parsed.day,
        parsed.hour, parsed.minute, parsed.second, parsed.microsecond,
        tzinfo=timezone.utc,
    )
    revived.source = value
    return revived


def timestamp_text(value: datetime) -> str:
    """Return the text ``value`` was decoded from, else its stored form."""
    return getattr(value, "source", None) or format_timestamp(value)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ``YYYY-MM-DDTHH:MM:SS.fffZ`` in UTC.

    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S") + f".{value.microsecond // 1000:03d}Z"


def revive(value: Any) -> Any:
    """Recursively convert timestamp strings in decoded JSON to datetimes."""
    if isinstance(value, str):
        parsed = parse_timestamp(value)
        return parsed if parsed is not None else value
    if isinstance(value, list):
        return [revive(item) for item in value]
    if isinstance(value, dict):
        return {key: revive(item) for key, item in value.items()}
    return value


def _encode_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return timestamp_text(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode(data: Any) -> str:
    """Serialize a collection to pretty-printed JSON."""
    return json.dumps(data, default=_encode_default, ensure_ascii=False, indent=2)


def decode(text: str) -> Any:
    """Parse JSON text and revive timestamps."""
    return revive(json.loads(text))


class CollectionEdit:
    """Mutable view of a collection inside ``JsonStore.edit``.

    ``data`` may be mutated in place or replaced.  Nothing is written
    unless ``mark_changed`` was called.
    """

    def __init__(self, name: str, data: Any) -> None:
        self.name = name
        self.data = data
        self.changed = False

    def mark_changed(self) -> None:
        self.changed = True


class JsonStore:
    """Keyed persistence of whole JSON collections in one directory."""

    def __init__(self, data_dir: os.PathLike | str) -> None:
        self.data_dir = Path(data_dir)
        self._locks: Dict[str, asyncio.Lock] = {}

    def ensure_data_dir(self) -> Path:
        """Create the data directory if needed.  Safe to call repeatedly."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir

    def path_for(self, name: str) -> Path:
        if not _COLLECTION_NAME.fullmatch(name):
            raise ValueError(f"Invalid collection name: {name!r}")
        return self.data_dir / f"{name}.json"

    def lock_for(self, name: str) -> asyncio.Lock:
        """Return the writer lock of a collection."""
        lock = self._locks.get(name)
        if lock is None:
            lock = self._locks[name] = asyncio.Lock()
        return lock

    # -- blocking helpers, run in a worker thread -------------------------

    def _read(self, name: str) -> Any:
        self.ensure_data_dir()
        path = self.path_for(name)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return _MISSING
        except OSError as e:
            logger.error("Error reading collection %s: %s", name, e)
            return _INVALID
        if not text.strip():
            logger.warning("Collection file %s is empty. Using default value.", path.name)
            return _INVALID
        try:
            return decode(text)
        except ValueError as e:
            logger.error("Collection file %s is malformed: %s", path.name, e)
            return _INVALID

    def _write(self, name: str, data: Any) -> None:
        try:
            self.ensure_data_dir()
            text = encode(data)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error serializing collection %s: %s", name, e)
            raise StorageError(f"Could not save {name}: {e}") from e
        path = self.path_for(name)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.data_dir,
                prefix=f".{name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(text)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            logger.error("Error writing collection %s: %s", name, e)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Could not save {name}: {e}") from e

    # -- public API -------------------------------------------------------

    async def _load_locked(self, name: str, default: Any, strict: bool = False) -> Any:
        """Load a collection while holding its writer lock.

        With ``strict`` an unreadable collection raises ``StorageError``
        instead of falling back to ``default``, so an edit never
        replaces a corrupt file with the default.
        """
        data = await asyncio.to_thread(self._read, name)
        if data is _MISSING:
            logger.info("Collection %s not found. Initializing with default value.", name)
            seeded = copy.deepcopy(default)
            try:
                await asyncio.to_thread(self._write, name, seeded)
            except StorageError:
                if strict:
                    raise
            return copy.deepcopy(default)
        if data is _INVALID or not self._matches_default(data, default):
            if strict:
                raise StorageError(f"Collection {name} is unreadable; refusing to overwrite it")
            return copy.deepcopy(default)
        return data

    @staticmethod
    def _matches_default(data: Any, default: Any) -> bool:
        if isinstance(default, dict):
            return isinstance(data, dict)
        if isinstance(default, list):
            return isinstance(data, list)
        return True

    async def load(self, name: str, default: Any) -> Any:
        """Return the persisted collection ``name``.

        Never raises for read problems: a missing collection is seeded
        with ``default`` (and persisted when possible), an empty,
        malformed or wrongly shaped one is logged and ``default`` is
        returned while the file is left as it is.
        """
        data = await asyncio.to_thread(self._read, name)
        if data is _MISSING:
            async with self.lock_for(name):
                return await self._load_locked(name, default)
        if data is _INVALID or not self._matches_default(data, default):
            if data is not _INVALID:
                logger.error("Collection %s has an unexpected shape. Using default value.", name)
            return copy.deepcopy(default)
        return data

    async def save(self, name: str, data: Any) -> None:
        """Replace the whole collection ``name`` with ``data``.

        Raises ``StorageError`` when the collection cannot be written;
        the previous file is then left intact.
        """
        async with self.lock_for(name):
            await asyncio.to_thread(self._write, name, data)

    @asynccontextmanager
    async def edit(self, name: str, default: Any) -> AsyncIterator[CollectionEdit]:
        """Run a locked load-mutate-save cycle on collection ``name``.

        Usage::

            async with store.edit("reports", []) as session:
                session.data.append(record)
                session.mark_changed()

        The collection is written once on a clean exit if
        ``mark_changed`` was called.  If the block raises, nothing is
        written.
        """
        async with self.lock_for(name):
            data = await self._load_locked(name, default, strict=True)
            session = CollectionEdit(name, data)
            yield session
            if session.changed:
                await asyncio.to_thread(self._write, name, session.data)


def get_data_dir() -> Path:
    """Compute the directory holding the collection files.

    If ``settings.data_dir`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project package root.
    """
    data_dir = settings.data_dir
    if os.path.isabs(data_dir):
        return Path(data_dir)
    base_dir = Path(__file__).resolve().parent.parent.parent  # volunteer_board_api/
    return (base_dir / data_dir).resolve()


_store: Optional[JsonStore] = None


def get_store() -> JsonStore:
    """Return the process-wide store, creating it on first use."""
    global _store
    if _store is None:
        _store = JsonStore(get_data_dir())
    return _store


def set_store(store: Optional[JsonStore]) -> None:
    """Install a different store (tests point it at a temporary directory)."""
    global _store
    _store = store


def init_store() -> JsonStore:
    """Create the data directory at application start."""
    store = get_store()
    store.ensure_data_dir()
    logger.info("Using data directory %s", store.data_dir)
    return store
