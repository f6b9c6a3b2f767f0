"""
Connect to databases described in INI source files.

Reads connection information from::

    /etc/databases/conf.d/*
    $HOME/.databases/*

A configuration file contains one or more sections of the form::

    [mydb]
    dbd = Pg
    schema_search_path = foo, public
    dbic_schema = myapp.schema.Base
    dbname = my_test_db
    host = 127.0.0.1
    username = guest
    password = 12345

Access to these files should be controlled with file permissions: whoever
can read a file can use the credentials in it.

Usage:
    from dbsource import DatabaseConnect

    dbc = DatabaseConnect()
    dbc.dsn("mydb")                  # "dbi:Pg:host=127.0.0.1;dbname=my_test_db"
    conn = dbc.dbh("mydb")           # DB-API connection, search path already set
    dsn, user, password = dbc.dbi_args("mydb")
    engine = dbc.engine("mydb")      # SQLAlchemy engine (optional extra)

Every method that takes a source accepts either a source name or a mapping
of fields (e.g. ``{"dbd": "SQLite", "dbname": "/tmp/x.db"}``).
"""
from __future__ import annotations
import logging
import traceback
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from dbsource.config.config import SourceConfig
from dbsource.config.store import SourceStore
from dbsource.connection.connectors import DbapiClient, SourceConnectionError, execute_statements
from dbsource.drivers import Descriptor, params_for
from dbsource.params import as_dsn, db_params, get_field

logger = logging.getLogger(__name__)

SourceRef = Union[str, Mapping[str, str]]


class UnknownSourceError(KeyError):
    """Raised when a source name is not defined in any configuration file."""

    def __str__(self):
        return f"Unknown database source: {self.args[0]!r}"


class DatabaseConnect:

    def __init__(self, search_paths: Optional[Iterable[str]] = None, *,
                 config: Optional[SourceConfig] = None,
                 store: Optional[SourceStore] = None,
                 client=None):
        self.config = config or SourceConfig()
        if store is None:
            if search_paths is None:
                search_paths = self.config.resolved_search_paths()
            store = SourceStore(search_paths)
        self.store = store
        self.client = client or DbapiClient(self.config.driver_map_path)

    @classmethod
    def from_env(cls, prefix: str = "DBSOURCE_", client=None) -> "DatabaseConnect":
        return cls(config=SourceConfig.from_env(prefix), client=client)

    # ---- source resolution ------------------------------------------------

    def _resolve(self, source: SourceRef) -> Mapping[str, str]:
        if isinstance(source, Mapping):
            return source
        fields = self.store.get(source)
        if fields is None:
            raise UnknownSourceError(source)
        return fields

    # ---- information about a source ---------------------------------------

    def field(self, source: SourceRef, key: Union[str, Descriptor]) -> Optional[str]:
        return get_field(self._resolve(source), key)

    def dbd(self, source: SourceRef) -> Optional[str]:
        return self.field(source, "dbd")

    def username(self, source: SourceRef) -> Optional[str]:
        return self.field(source, "username")

    def password(self, source: SourceRef) -> Optional[str]:
        return self.field(source, "password")

    def schema_search_path(self, source: SourceRef) -> Optional[str]:
        return self.field(source, "schema_search_path")

    def dbic_schema(self, source: SourceRef) -> Optional[str]:
        return self.field(source, "dbic_schema")

    def db_params(self, source: SourceRef) -> str:
        """The parameter portion of the DSN (e.g. "host=127.0.0.1;dbname=test_db")."""
        return db_params(self._resolve(source))

    def dsn(self, source: SourceRef) -> str:
        return as_dsn(self._resolve(source))

    def dbi_args(self, source: SourceRef) -> tuple[str, Optional[str], Optional[str]]:
        """The dsn, username and password, for opening a connection yourself."""
        src = self._resolve(source)
        return as_dsn(src), get_field(src, "username"), get_field(src, "password")

    connect_args = dbi_args

    def on_connect_sql(self, source: SourceRef) -> list[str]:
        """
        Statements to run right after connecting.

        For PostgreSQL sources with a ``schema_search_path`` this sets the
        session search path. The value is used verbatim: identifiers must be
        quoted in the configuration file if they need it.
        """
        src = self._resolve(source)
        dbd = get_field(src, "dbd")
        params_for(dbd)  # unregistered drivers fail here as in dsn()

        sql = []
        search_path = get_field(src, "schema_search_path")
        if dbd.lower() == "pg" and search_path:
            sql.append(f"SET search_path = '{search_path}'")
        return sql

    def on_connect(self, source: SourceRef) -> Callable[[Any], None]:
        """A callback running :meth:`on_connect_sql` on a DB-API connection."""
        statements = self.on_connect_sql(source)
        return lambda conn: execute_statements(conn, statements)

    # ---- connecting -------------------------------------------------------

    def dbh(self, source: SourceRef, options: Optional[Mapping[str, Any]] = None):
        """
        Open a new connection and run the post-connect statements.

        ``options`` go to the client; the default is the configured client
        options with autocommit on.
        """
        src = self._resolve(source)
        dsn, username, password = self.dbi_args(src)
        statements = self.on_connect_sql(src)
        if options is None:
            options = {"autocommit": True, **self.config.client_options}

        try:
            conn = self.client.connect(dsn, username, password, dict(options))
        except Exception as e:
            logger.error(f"Failed to connect to {dsn}: {e}")
            logger.debug(traceback.format_exc())
            raise SourceConnectionError(f"Failed to connect to {dsn}: {e}", extra_info=dsn) from e

        try:
            execute_statements(conn, statements)
        except Exception as e:
            logger.error(f"Post-connect statement failed on {dsn}: {e}")
            try:
                conn.close()
            except Exception as close_error:
                logger.debug(f"Failed to close connection: {close_error}")
            raise SourceConnectionError(f"Post-connect statement failed on {dsn}: {e}", extra_info=statements) from e
        return conn

    connect = dbh

    def engine(self, source: SourceRef, options: Optional[Mapping[str, Any]] = None, **engine_opts):
        """
        SQLAlchemy engine whose connections come from :meth:`dbh`.

        Uses ``NullPool`` unless a ``poolclass`` is given, so every checkout
        is a fresh connection with the post-connect statements applied.
        """
        from sqlalchemy import create_engine
        from sqlalchemy.pool import NullPool
        from dbsource.connection.driver_registry import sa_minimal_url

        src = dict(self._resolve(source))
        url = sa_minimal_url(get_field(src, "dbd"), override_driver=src.get("sa_driver"),
                             extra_path=self.config.driver_map_path)
        engine_opts.setdefault("poolclass", NullPool)
        return create_engine(url, creator=lambda: self.dbh(src, options), **engine_opts)

    # ---- search path ------------------------------------------------------

    @property
    def search_paths(self) -> list[str]:
        return self.store.search_paths

    def push_path(self, path) -> None:
        self.store.push_path(path)

    def unshift_path(self, path) -> None:
        self.store.unshift_path(path)

    def remove_path(self, path) -> bool:
        return self.store.remove_path(path)

    def set_paths(self, paths: Iterable[str]) -> None:
        self.store.set_paths(paths)

    # ---- source management ------------------------------------------------

    def sources(self) -> set[str]:
        return self.store.names()

    def has_source(self, name: str) -> bool:
        return self.store.has(name)

    def get_source(self, name: str) -> Optional[Mapping[str, str]]:
        return self.store.get(name)

    def add_source(self, name: str, fields: Mapping[str, str]) -> None:
        self.store.set(name, fields)

    def delete_source(self, name: str) -> bool:
        return self.store.remove(name)

    def forget_sources(self) -> None:
        self.store.clear()

    def load_sources(self) -> None:
        self.store.load()

    def reload_sources(self) -> None:
        self.store.reload()
