# dbsource/__init__.py
import logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

from .drivers import DriverParams, UnknownDriverError, register_driver, get_driver, params_for
from .params import get_field, db_params
from .config.config import SourceConfig, DbSourceConfigurationError
from .config.store import SourceStore, ConfigLoadWarning
from .connection.connectors import SourceConnectionError
from .connect import DatabaseConnect, UnknownSourceError

# Optional convenience: explicit plugin loader
_loaded_plugins = False

def load_plugins(
    group: str = "dbsource.drivers",
    *,
    strict: bool = False,
    reload: bool = False,
    include: set[str] | None = None,   # ep names to allow; None = all
) -> int:
    """
    Discover and register third-party driver parameter tables via entry points.
    Each entry point must load to a DriverParams instance.
    Returns the number of drivers loaded. Does nothing unless called.
    """
    global _loaded_plugins
    if _loaded_plugins and not reload:
        return 0

    from importlib.metadata import entry_points
    eps = entry_points().select(group=group)

    loaded = 0
    for ep in eps:
        if include and ep.name not in include:
            continue
        try:
            drv = ep.load()
            if not isinstance(drv, DriverParams):
                raise TypeError(f"entry point {ep.name!r} did not load a DriverParams")
            register_driver(drv)
            loaded += 1
        except Exception as e:
            if strict:
                raise
            logging.getLogger(__name__).warning("driver plugin %r failed to load: %s", ep.name, e)
            continue

    _loaded_plugins = True
    return loaded
