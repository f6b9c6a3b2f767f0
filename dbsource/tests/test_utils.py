"""Helpers shared by the dbsource test modules."""
import textwrap
from pathlib import Path


def write_source_file(directory, name, text):
    """Write an INI source file (dedented) into ``directory`` and return its path."""
    path = Path(directory) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
    return path


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.closed = False

    def execute(self, sql):
        if self.conn.fail_on and self.conn.fail_on in sql:
            raise RuntimeError(f"cannot execute {sql}")
        self.conn.executed.append(sql)

    def close(self):
        self.closed = True


class FakeConnection:
    """Minimal DB-API connection recording executed statements."""

    def __init__(self, fail_on=None):
        self.executed = []
        self.closed = False
        self.fail_on = fail_on

    def cursor(self):
        return FakeCursor(self)

    def close(self):
        self.closed = True


class FakeClient:
    """Database client double: records connect() calls."""

    def __init__(self, error=None, fail_on=None):
        self.calls = []
        self.error = error
        self.fail_on = fail_on
        self.connections = []

    def connect(self, dsn, username=None, password=None, options=None):
        self.calls.append((dsn, username, password, options))
        if self.error is not None:
            raise self.error
        conn = FakeConnection(fail_on=self.fail_on)
        self.connections.append(conn)
        return conn
