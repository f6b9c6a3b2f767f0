# drivers.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple, Union

# A descriptor is either a single field name or an alias group of equivalent
# names; the first name of a group is the one written to the DSN.
Descriptor = Union[str, Tuple[str, ...]]


class UnknownDriverError(ValueError):
    """Raised when a source names a driver that has no registered parameters."""


@dataclass(frozen=True)
class DriverParams:
    name: str
    params: Tuple[Descriptor, ...]

    def __post_init__(self):
        # accept lists from plugin code and normalise to hashable tuples
        object.__setattr__(self, "params", tuple(
            tuple(p) if isinstance(p, (list, tuple)) else p for p in self.params
        ))

_REGISTRY: dict[str, DriverParams] = {}

def register_driver(drv: DriverParams) -> None:
    _REGISTRY[drv.name.lower()] = drv

def get_driver(name: str | None) -> DriverParams | None:
    return _REGISTRY.get((name or "").lower())

def registered_drivers() -> list[str]:
    return sorted(_REGISTRY)

def params_for(name: str | None) -> Tuple[Descriptor, ...]:
    """Ordered connection parameters accepted by driver ``name`` (case-insensitive)."""
    drv = get_driver(name)
    if drv is None:
        raise UnknownDriverError(f"Unrecognized DBD {name!r}")
    return drv.params

def canonical_name(descriptor: Descriptor) -> str:
    return descriptor[0] if isinstance(descriptor, tuple) else descriptor

# ---- built-in drivers ------------------------------------------------------

# PostgreSQL (libpq keywords; dbname is the canonical spelling)
register_driver(DriverParams(
    name="pg",
    params=("host", "hostaddr", "port", "options", "service", "sslmode",
            ("dbname", "database", "db")),
))

# MySQL / MariaDB
register_driver(DriverParams(
    name="mysql",
    params=(
        "host", "port", "mysql_client_found_rows", "mysql_compression",
        "mysql_connect_timeout", "mysql_read_default_file", "mysql_read_default_group",
        "mysql_socket", "mysql_ssl", "mysql_ssl_client_key", "mysql_ssl_client_cert",
        "mysql_ssl_ca_file", "mysql_ssl_ca_path", "mysql_ssl_cipher", "mysql_local_infile",
        "mysql_multi_statements", "mysql_server_prepare", "mysql_embedded_options",
        "mysql_embedded_groups", ("database", "dbname", "db"),
    ),
))

# SQLite
register_driver(DriverParams(name="sqlite", params=(("dbname", "database", "db"),)))

# flat files
register_driver(DriverParams(
    name="csv",
    params=("f_dir", "csv_eol", "csv_sep_char", "csv_quote_char", "csv_escape_char", "csv_class"),
))
register_driver(DriverParams(
    name="dbm",
    params=("f_dir", "ext", "mldbm", "lockfile", "store_metadata", "cols", ("type", "dbm_type")),
))

