"""
Source store: named database sources read from INI files.

Every regular file in each search directory is read; each ``[section]``
becomes a source. Directories are applied last-to-first so that directories
earlier in the search path take priority. Loading happens once, on the first
read; :meth:`SourceStore.reload` re-reads on the next access, layering new
values over the old ones. Sources whose files were deleted are kept until
:meth:`SourceStore.clear` or :meth:`SourceStore.remove`.
"""
from __future__ import annotations
import configparser
import logging
import os
import re
import warnings
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from dbsource.config.config import DEFAULT_NAMESPACE, default_search_paths
from dbsource.file_loader import load_ini

logger = logging.getLogger(__name__)

# skips dotfiles and editor backups ("foo~", "#foo#")
_FILENAME_RE = re.compile(r"[\w+-][\w.+-]*")


class ConfigLoadWarning(UserWarning):
    """A configuration file could not be read or parsed and was skipped."""


class SourceStore:

    def __init__(self, search_paths: Optional[Iterable[str]] = None, namespace: str = DEFAULT_NAMESPACE):
        if search_paths is None:
            self.search_paths = default_search_paths(namespace)
        else:
            self.search_paths = [str(p) for p in search_paths]
        self._sources: dict[str, dict[str, str]] = {}
        self.loaded = False

    # ---- search path management -------------------------------------------

    def push_path(self, path) -> None:
        """Append a directory; it has the lowest priority."""
        self.search_paths.append(str(path))

    def unshift_path(self, path) -> None:
        """Prepend a directory; it has the highest priority."""
        self.search_paths.insert(0, str(path))

    def remove_path(self, path) -> bool:
        before = len(self.search_paths)
        self.search_paths[:] = [p for p in self.search_paths if p != str(path)]
        return len(self.search_paths) != before

    def set_paths(self, paths: Iterable[str]) -> None:
        self.search_paths[:] = [str(p) for p in paths]

    # ---- loading ----------------------------------------------------------

    def load(self) -> None:
        """
        Scan every search directory and merge the sources found.

        Reads run this once; an explicit call always rescans, whether or not
        the store is loaded, layering what it finds over the existing sources
        (nothing is cleared). Files that cannot be read or parsed are skipped
        with a ConfigLoadWarning.
        """
        for directory in reversed(self.search_paths):
            d = Path(directory)
            if not d.is_dir():
                logger.debug(f"Skipping missing source directory {d}")
                continue
            logger.debug(f"Scanning source directory {d}")
            for f in sorted(d.iterdir()):
                if not f.is_file():
                    continue
                if not _FILENAME_RE.fullmatch(f.name) or not os.access(f, os.R_OK):
                    logger.debug(f"Ignoring {f}")
                    continue
                self._load_file(f)
        self.loaded = True

    def _load_file(self, path: Path) -> None:
        try:
            config = load_ini(path)
        except (OSError, UnicodeDecodeError, configparser.Error) as e:
            self._skip(path, e)
            return

        for name, fields in config.items():
            self._sources.setdefault(name, {}).update(fields)
            logger.debug(f"Loaded source '{name}' from {path}")

    @staticmethod
    def _skip(path: Path, error: Exception) -> None:
        message = f"Skipping unreadable source file {path}: {error}"
        logger.warning(message)
        warnings.warn(message, ConfigLoadWarning, stacklevel=2)

    def reload(self) -> None:
        """Mark the store stale; the next access re-reads all files over the current data."""
        self.loaded = False

    def _ensure_loaded(self) -> None:
        if not self.loaded:
            self.load()

    # ---- access -----------------------------------------------------------

    def get(self, name: str) -> Optional[Mapping[str, str]]:
        self._ensure_loaded()
        fields = self._sources.get(name)
        return MappingProxyType(fields) if fields is not None else None

    def has(self, name: str) -> bool:
        self._ensure_loaded()
        return name in self._sources

    def names(self) -> set[str]:
        self._ensure_loaded()
        return set(self._sources)

    def set(self, name: str, fields: Mapping[str, str]) -> None:
        """Register or extend a source as if it had been read from a file."""
        self._ensure_loaded()
        self._sources.setdefault(name, {}).update(fields)

    def remove(self, name: str) -> bool:
        self._ensure_loaded()
        return self._sources.pop(name, None) is not None

    def clear(self) -> None:
        self._sources.clear()
        self.loaded = False

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._sources)
