from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple
import os


class DbSourceConfigurationError(ValueError): ...

DEFAULT_NAMESPACE = "databases"


def default_search_paths(namespace: str = DEFAULT_NAMESPACE) -> list[str]:
    """System-wide directory first, then the user's own (which wins on conflicts)."""
    paths = [f"/etc/{namespace}/conf.d"]
    home = os.environ.get("HOME")
    if home:
        paths.append(os.path.join(home, f".{namespace}"))
    return paths


@dataclass(frozen=True, slots=True)
class SourceConfig:
    namespace: str = DEFAULT_NAMESPACE
    search_paths: Tuple[str, ...] | None = None   # None = default_search_paths(namespace)
    driver_map_path: str | None = None
    client_options: dict[str, object] = field(default_factory=dict)

    def resolved_search_paths(self) -> list[str]:
        if self.search_paths is not None:
            return list(self.search_paths)
        return default_search_paths(self.namespace)

    @classmethod
    def from_env(cls, prefix: str = "DBSOURCE_") -> "SourceConfig":
        """
        Env contract (all optional):
          - {P}SEARCH_PATH : os.pathsep-separated directories, replaces the defaults
          - {P}NAMESPACE   : namespace of the default directories ("databases")
          - {P}DRIVER_MAP  : JSON file extending the driver -> client module map
          - {P}AUTOCOMMIT  : "true"/"false", default client autocommit mode
        """
        get = os.getenv

        namespace = get(prefix + "NAMESPACE") or DEFAULT_NAMESPACE
        if not namespace.replace("-", "").replace("_", "").replace(".", "").isalnum():
            raise DbSourceConfigurationError(f"{prefix}NAMESPACE is not a valid directory name: {namespace!r}")

        search_paths = None
        raw = get(prefix + "SEARCH_PATH")
        if raw is not None:
            search_paths = tuple(os.path.expanduser(p) for p in raw.split(os.pathsep) if p)

        client_options: dict[str, object] = {}
        autocommit = get(prefix + "AUTOCOMMIT")
        if autocommit is not None:
            flag = autocommit.strip().lower()
            if flag not in ("true", "false", "1", "0", "yes", "no"):
                raise DbSourceConfigurationError(f"Invalid boolean for {prefix}AUTOCOMMIT: {autocommit!r}")
            client_options["autocommit"] = flag in ("true", "1", "yes")

        return cls(
            namespace=namespace,
            search_paths=search_paths,
            driver_map_path=get(prefix + "DRIVER_MAP") or None,
            client_options=client_options,
        )
