import logging
import importlib
from typing import Any, Mapping, Optional

from dbsource.connection.driver_registry import get_driver_info
from dbsource.connection.dsn_parts_helper import dsn_to_parts
from dbsource.params import get_field


logger = logging.getLogger(__name__)

DATABASE_ALIASES = ("dbname", "database", "db")


class SourceConnectionError(Exception):
    """Raised when a connection failed."""
    def __init__(self, message, extra_info=''):
        super().__init__(message)
        self.extra_info = extra_info


def _flag(value) -> bool:
    # DBD-style booleans: "", "0", "false", "no", "off" are false
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in ("", "0", "false", "no", "off")


class BaseConnector:
    """Base class for database connectors."""

    def __init__(self, driver: str, params: Mapping[str, str], user: Optional[str] = None,
                 password: Optional[str] = None, options: Optional[Mapping[str, Any]] = None,
                 driver_map_path: Optional[str] = None):
        """
        Initialize connector from the parts of a parsed DSN.

        ``options`` are client options; ``autocommit`` (default True) is
        consumed here, everything else is passed through to the driver.
        """
        self.database_type = driver
        self.params = dict(params)
        self.user = user
        self.password = password
        self.options = dict(options or {})
        self.autocommit = _flag(self.options.pop('autocommit', True))

        self.host = self.params.get('host')
        self.port = self.params.get('port')
        self.database = get_field(self.params, DATABASE_ALIASES)

        driver_info = get_driver_info(driver, driver_map_path)
        self.database_module = driver_info.dbapi if driver_info else None

    def connect(self):
        raise NotImplementedError

    def _credentials(self) -> dict:
        creds = {}
        if self.user is not None:
            creds['user'] = self.user
        if self.password is not None:
            creds['password'] = self.password
        return creds

    def _location(self) -> str:
        port = f":{self.port}" if self.port else ''
        return f"'{self.database}' at {self.host or 'localhost'}{port}"


class PostgresConnector(BaseConnector):
    def connect(self):
        import psycopg
        connection_msg = f"Connected to the postgres database {self._location()}"

        # DSN params are libpq keywords already; only the database aliases need folding
        kwargs = {k: v for k, v in self.params.items() if k not in DATABASE_ALIASES}
        if self.database is not None:
            kwargs['dbname'] = self.database
        kwargs.update(self._credentials())
        kwargs.update(self.options)

        conn = psycopg.connect(autocommit=self.autocommit, **kwargs)
        logger.info(f"{connection_msg}, connection status: {conn.info.status.name}")
        return conn


# DBD::mysql attribute -> PyMySQL keyword
_MYSQL_KWARGS = {
    'host': 'host',
    'port': 'port',
    'mysql_connect_timeout': 'connect_timeout',
    'mysql_read_default_file': 'read_default_file',
    'mysql_read_default_group': 'read_default_group',
    'mysql_socket': 'unix_socket',
    'mysql_ssl_client_key': 'ssl_key',
    'mysql_ssl_client_cert': 'ssl_cert',
    'mysql_ssl_ca_file': 'ssl_ca',
}
_MYSQL_INT_KWARGS = {'port', 'connect_timeout'}


class MySQLConnector(BaseConnector):

    def connect_kwargs(self) -> dict:
        from pymysql.constants import CLIENT

        kwargs: dict[str, Any] = {}
        client_flag = 0
        for key, value in self.params.items():
            if key in DATABASE_ALIASES:
                continue
            if key in _MYSQL_KWARGS:
                name = _MYSQL_KWARGS[key]
                kwargs[name] = int(value) if name in _MYSQL_INT_KWARGS else value
            elif key == 'mysql_ssl':
                kwargs['ssl_disabled'] = not _flag(value)
            elif key == 'mysql_local_infile':
                kwargs['local_infile'] = _flag(value)
            elif key == 'mysql_client_found_rows':
                if _flag(value):
                    client_flag |= CLIENT.FOUND_ROWS
            elif key == 'mysql_multi_statements':
                if _flag(value):
                    client_flag |= CLIENT.MULTI_STATEMENTS
            else:
                logger.debug(f"MySQL parameter '{key}' has no PyMySQL equivalent, ignored")

        if client_flag:
            kwargs['client_flag'] = client_flag
        if self.database is not None:
            kwargs['database'] = self.database
        kwargs.update(self._credentials())
        kwargs['autocommit'] = self.autocommit
        kwargs.update(self.options)
        return kwargs

    def connect(self):
        import pymysql
        connection_msg = f"Connected to the mysql database {self._location()}"

        conn = pymysql.connect(**self.connect_kwargs())
        logger.info(f"{connection_msg}, connection thread: {conn.thread_id()}")
        return conn


class SqliteConnector(BaseConnector):
    def connect(self):
        import sqlite3
        db_path = self.database or ':memory:'
        conn = sqlite3.connect(db_path, **self.options)
        if self.autocommit:
            conn.isolation_level = None
        logger.info(f"Connected to SQLite database: {db_path}")
        return conn


class GenericConnector(BaseConnector):
    """
    Generic DB-API 2.0 connector.

    The driver module is the one mapped to the driver id in
    ``driver_map.json``, or the lowercased driver id itself. DSN params,
    credentials and options are all passed to ``module.connect()`` as
    keyword arguments.
    """
    def connect(self):
        module_name = self.database_module or (self.database_type or "").lower()

        try:
            db_module = importlib.import_module(module_name)
        except ImportError:
            raise ValueError(
                f"Could not import database module '{module_name}' for dbd '{self.database_type}'. "
                f"Ensure the driver is installed or defined in driver_map.json."
            )
        if not callable(getattr(db_module, 'connect', None)):
            raise ValueError(f"Module '{module_name}' is not a DB-API driver (no connect())")

        kwargs = dict(self.params)
        kwargs.update(self._credentials())
        kwargs.update(self.options)
        conn = db_module.connect(**kwargs)

        # Try setting autocommit if supported
        if self.autocommit and hasattr(conn, 'autocommit'):
            try:
                attr = getattr(conn, 'autocommit')
                if callable(attr):
                    conn.autocommit(True)
                else:
                    conn.autocommit = True
            except Exception:
                logger.warning(f"Could not set autocommit for generic driver {module_name}")

        logger.info(f"Connected to the {self.database_type} database via generic driver '{module_name}'")
        return conn


def get_connector_class(database_type):
    """Factory to get the appropriate connector class."""
    db_type = (database_type or "").lower()

    if db_type == 'pg':
        return PostgresConnector
    elif db_type == 'mysql':
        return MySQLConnector
    elif db_type == 'sqlite':
        return SqliteConnector
    else:
        return GenericConnector


class DbapiClient:
    """
    Default database client: opens a DB-API connection for a "dbi:" DSN.

    Any object with the same ``connect(dsn, username, password, options)``
    signature can be used in its place.
    """

    def __init__(self, driver_map_path: Optional[str] = None):
        self.driver_map_path = driver_map_path

    def connect(self, dsn: str, username: Optional[str] = None, password: Optional[str] = None,
                options: Optional[Mapping[str, Any]] = None):
        parts = dsn_to_parts(dsn)
        connector_cls = get_connector_class(parts['driver'])
        connector = connector_cls(parts['driver'], parts['params'], username, password, options,
                                  driver_map_path=self.driver_map_path)
        return connector.connect()


def execute_statements(conn, statements):
    """Run each statement on a DB-API connection, in order."""
    if not statements:
        return
    cur = conn.cursor()
    try:
        for sql in statements:
            logger.debug(f"Executing post-connect statement: {sql}")
            cur.execute(sql)
    finally:
        cur.close()
