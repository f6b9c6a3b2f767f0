"""
Which client library serves each source driver.

``driver_map.json`` maps a ``dbd`` value to the DB-API module used by
:class:`DbapiClient` and to the SQLAlchemy dialect/driver used by
``DatabaseConnect.engine()``. An extra JSON file of the same shape
(``DBSOURCE_DRIVER_MAP``) adds drivers or replaces built-in entries.
"""
from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from importlib.resources import files
from typing import Dict, Optional

from dbsource.config.config import DbSourceConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DriverInfo:
    dbapi: Optional[str] = None        # module imported by the generic connector
    sa_dialect: Optional[str] = None   # None: no engine() for this driver
    sa_driver: Optional[str] = None    # None: dialect default (sqlite)


@lru_cache(maxsize=4)
def load_driver_map(extra_path: Optional[str] = None) -> Dict[str, DriverInfo]:
    entries = json.loads(files(__package__).joinpath("driver_map.json").read_text(encoding="utf-8"))

    if extra_path:
        try:
            with open(extra_path, "r", encoding="utf-8") as f:
                entries.update(json.load(f))
        except FileNotFoundError:
            logger.warning(f"Driver map {extra_path} not found, using built-in map only")
        except json.JSONDecodeError as e:
            raise DbSourceConfigurationError(f"Invalid JSON in driver map {extra_path}: {e}") from e

    out: Dict[str, DriverInfo] = {}
    for dbd, info in entries.items():
        if not isinstance(info, dict):
            raise DbSourceConfigurationError(f"Driver map entry for {dbd!r} must be an object")
        # keyed like the parameter registry: "Pg" and "pg" are one driver
        out[dbd.lower()] = DriverInfo(
            dbapi=info.get("dbapi"),
            sa_dialect=info.get("sa_dialect"),
            sa_driver=info.get("sa_driver"),
        )
    return out


def get_driver_info(dbd: str, extra_path: Optional[str] = None) -> Optional[DriverInfo]:
    return load_driver_map(extra_path).get((dbd or "").lower())


def sa_minimal_url(dbd: str, *, override_driver: Optional[str] = None, extra_path: Optional[str] = None) -> str:
    """URL naming only the SQLAlchemy dialect; connections come from a ``creator``."""
    info = get_driver_info(dbd, extra_path)
    if not info or not info.sa_dialect:
        raise ValueError(f"No SQLAlchemy dialect for dbd={dbd!r}")
    driver = override_driver if override_driver is not None else info.sa_driver
    return f"{info.sa_dialect}+{driver}://" if driver else f"{info.sa_dialect}://"
