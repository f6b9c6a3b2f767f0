# dbsource/params.py
"""
Field resolution and DSN parameter building.

Sources are plain mappings of field name to string value, as read from an
INI section. Driver-specific field names come from :mod:`dbsource.drivers`.
"""
from __future__ import annotations
from typing import Mapping, Optional, Sequence, Union

from .drivers import Descriptor, canonical_name, params_for

DSN_SCHEME = "dbi"


def get_field(source: Mapping[str, Optional[str]], key: Union[str, Sequence[str]]) -> Optional[str]:
    """
    Extract the value associated with ``key`` from ``source``.

    ``key`` may be a single field name or an alias group; for a group the
    first alias present in the source wins, even when its value is empty.
    Returns None when nothing is present.
    """
    if isinstance(key, str):
        return source.get(key)
    for alias in key:
        value = source.get(alias)
        if value is not None:
            return value
    return None


def db_param_fields(source: Mapping[str, Optional[str]]) -> tuple[Descriptor, ...]:
    """Parameters accepted by the driver named in the source's ``dbd`` field."""
    return params_for(get_field(source, "dbd"))


def db_param_pairs(source: Mapping[str, Optional[str]]) -> list[tuple[str, str]]:
    pairs = []
    for descriptor in db_param_fields(source):
        value = get_field(source, descriptor)
        if value is not None:
            pairs.append((canonical_name(descriptor), value))
    return pairs


def db_params(source: Mapping[str, Optional[str]]) -> str:
    # e.g. "host=127.0.0.1;dbname=test_db"
    return ";".join(f"{k}={v}" for k, v in db_param_pairs(source))


def as_dsn(source: Mapping[str, Optional[str]]) -> str:
    return f"{DSN_SCHEME}:{get_field(source, 'dbd')}:{db_params(source)}"
