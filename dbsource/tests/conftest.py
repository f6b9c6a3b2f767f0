import pytest

from dbsource.config.store import SourceStore
from dbsource.connect import DatabaseConnect
from dbsource.tests.test_utils import FakeClient, write_source_file


@pytest.fixture
def source_dirs(tmp_path):
    """Two search directories: ``system`` (low priority) and ``user`` (high priority)."""
    system = tmp_path / "etc" / "conf.d"
    user = tmp_path / "home" / ".databases"
    system.mkdir(parents=True)
    user.mkdir(parents=True)
    return user, system


@pytest.fixture
def store(source_dirs):
    user, system = source_dirs
    return SourceStore([user, system])


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def dbc(source_dirs, fake_client):
    user, system = source_dirs
    write_source_file(system, "main", """
        [pgdb]
        dbd = Pg
        host = 127.0.0.1
        dbname = test
        username = guest
        password = 12345
        schema_search_path = foo,public
        dbic_schema = myapp.schema.Base

        [litedb]
        dbd = SQLite
        database = /tmp/lite.db
        schema_search_path = ignored
    """)
    return DatabaseConnect([user, system], client=fake_client)
