from __future__ import annotations
from typing import Any, Mapping, Dict

from dbsource.config.config import DbSourceConfigurationError


def parts_to_dsn(parts: Mapping[str, Any]) -> str:
    """
    Build a DSN string from 'parts':
        {"scheme"?: "dbi", "driver": "Pg", "params"?: {"host": ..., "dbname": ...}}
    Params keep their mapping order.
    """
    driver = (parts.get("driver") or "").strip()
    if not driver:
        raise DbSourceConfigurationError("parts_to_dsn: 'driver' is required")
    scheme = parts.get("scheme") or "dbi"

    params = parts.get("params") or {}
    if not isinstance(params, Mapping):
        raise DbSourceConfigurationError("parts_to_dsn: 'params' must be a mapping if provided")
    return f"{scheme}:{driver}:" + ";".join(f"{k}={v}" for k, v in params.items())


def dsn_to_parts(dsn: str) -> Dict[str, Any]:
    """
    Parse a DSN string of the form "dbi:Pg:host=127.0.0.1;dbname=test".
    Returns a dict with keys: scheme, driver, params (dict, in DSN order).

    Values may contain '=' (only the first one separates key from value);
    empty segments are ignored. A segment without '=' is an error.
    """
    if not isinstance(dsn, str) or dsn.count(":") < 2:
        raise DbSourceConfigurationError(f"Invalid DSN {dsn!r}: expected '<scheme>:<driver>:<params>'")

    scheme, driver, rest = dsn.split(":", 2)
    if not driver:
        raise DbSourceConfigurationError(f"Invalid DSN {dsn!r}: missing driver")

    params: Dict[str, str] = {}
    for segment in rest.split(";"):
        if not segment:
            continue
        key, sep, value = segment.partition("=")
        if not sep or not key:
            raise DbSourceConfigurationError(f"Invalid DSN parameter {segment!r} in {dsn!r}")
        params[key] = value
    return {"scheme": scheme, "driver": driver, "params": params}
