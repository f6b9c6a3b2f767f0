# =============================================================================
# dbsource runtime defaults
#
# - No I/O at import time: the default DatabaseConnect is built lazily by
#   get_connect() and sources are only read on first use.
# - Config in the environment: DBSOURCE_SEARCH_PATH, DBSOURCE_NAMESPACE,
#   DBSOURCE_DRIVER_MAP, DBSOURCE_AUTOCOMMIT (see SourceConfig.from_env).
# - A .env file is loaded only when DBSOURCE_USE_DOTENV=true; its location
#   may be given with DBSOURCE_DOTENV_PATH. Existing OS variables win.
# - The default is cached per environment fingerprint, so mutating
#   os.environ yields a fresh default; reload_default() drops the cache.
# - Context-scoped overrides (configure/using_connect) use a ContextVar.
#   The store itself is not locked: hosts sharing one instance across threads
#   must serialise the first load and reloads themselves.
# =============================================================================
from __future__ import annotations
import logging
import os
from contextlib import contextmanager
from contextvars import ContextVar
from functools import lru_cache
from typing import Optional, Tuple

from dotenv import find_dotenv, load_dotenv

from dbsource.connect import DatabaseConnect

logger = logging.getLogger(__name__)

# Allow overriding the env prefix if you embed multiple copies/configs
_PREFIX = os.getenv("DBSOURCE_PREFIX", "DBSOURCE_")

_current: ContextVar[Optional[DatabaseConnect]] = ContextVar("dbsource_connect", default=None)
_dotenv_loaded = False


def _load_dotenv_once(prefix: str = _PREFIX) -> None:
    global _dotenv_loaded
    if _dotenv_loaded or os.getenv(f"{prefix}USE_DOTENV", "").lower() != "true":
        return
    dotenv_path = os.getenv(f"{prefix}DOTENV_PATH") or find_dotenv(usecwd=True)
    if dotenv_path and os.path.exists(dotenv_path):
        load_dotenv(dotenv_path, override=False)
        logger.debug(f"Loaded environment from {dotenv_path}")
    _dotenv_loaded = True


def _env_fingerprint(prefix: str = _PREFIX) -> Tuple[Tuple[str, str], ...]:
    """Stable key for caching: all DBSOURCE_* envs sorted, plus HOME."""
    items = tuple(sorted(
        (k, os.environ.get(k, ""))
        for k in os.environ.keys()
        if k.startswith(prefix) or k == "HOME"
    ))
    return items


@lru_cache(maxsize=8)
def _load_default_cached(_fp: Tuple[Tuple[str, str], ...]) -> DatabaseConnect:
    return DatabaseConnect.from_env(prefix=_PREFIX)


def _load_default() -> DatabaseConnect:
    _load_dotenv_once()
    # include env fingerprint as cache key to auto-refresh when env changes
    return _load_default_cached(_env_fingerprint())


def get_connect() -> DatabaseConnect:
    """Active DatabaseConnect (context override > lazily built default)."""
    return _current.get() or _load_default()


def configure(dbc: DatabaseConnect) -> None:
    """Set an override for this context (tests/embedded apps)."""
    _current.set(dbc)


def reload_default() -> None:
    """Drop the cached default (its sources are re-read on next use)."""
    global _dotenv_loaded
    _load_default_cached.cache_clear()
    _dotenv_loaded = False


@contextmanager
def using_connect(dbc: DatabaseConnect):
    tok = _current.set(dbc)
    try:
        yield dbc
    finally:
        _current.reset(tok)
