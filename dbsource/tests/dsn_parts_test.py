"""DSN string parsing tests."""
import pytest

from dbsource.config.config import DbSourceConfigurationError
from dbsource.connection.dsn_parts_helper import dsn_to_parts, parts_to_dsn


def test_dsn_to_parts():
    assert dsn_to_parts("dbi:Pg:host=127.0.0.1;dbname=test") == {
        "scheme": "dbi",
        "driver": "Pg",
        "params": {"host": "127.0.0.1", "dbname": "test"},
    }


def test_dsn_to_parts_edge_cases():
    # empty parameter list, '=' and ':' inside values, stray separators
    assert dsn_to_parts("dbi:csv:")["params"] == {}
    assert dsn_to_parts("dbi:Pg:options=-c x=1;;")["params"] == {"options": "-c x=1"}
    assert dsn_to_parts("dbi:SQLite:dbname=C:\\data\\x.db")["params"] == {"dbname": "C:\\data\\x.db"}


@pytest.mark.parametrize("dsn", ["", "dbi:Pg", "dbi::host=x", "dbi:Pg:host", "dbi:Pg:=x", None])
def test_dsn_to_parts_invalid(dsn):
    with pytest.raises(DbSourceConfigurationError):
        dsn_to_parts(dsn)


def test_parts_to_dsn():
    assert parts_to_dsn({"driver": "mysql", "params": {"host": "h", "database": "d"}}) == "dbi:mysql:host=h;database=d"
    assert parts_to_dsn({"driver": "csv"}) == "dbi:csv:"
    with pytest.raises(DbSourceConfigurationError):
        parts_to_dsn({"params": {}})
    with pytest.raises(DbSourceConfigurationError):
        parts_to_dsn({"driver": "Pg", "params": ["host=x"]})
