"""Field resolution and DSN parameter string tests."""
import pytest

from dbsource.drivers import UnknownDriverError, params_for
from dbsource.params import as_dsn, db_param_pairs, db_params, get_field


def test_get_field_single_key():
    src = {"dbd": "Pg", "host": "db.example.com"}
    assert get_field(src, "host") == "db.example.com"
    assert get_field(src, "port") is None


def test_alias_group_uses_first_alias_name():
    # only the second alias is present; the value is found under it
    assert get_field({"b": "2"}, ("a", "b", "c")) == "2"
    assert db_param_pairs({"dbd": "SQLite", "database": "x.db"}) == [("dbname", "x.db")]


def test_alias_group_first_present_wins():
    src = {"db": "third", "database": "second"}
    assert get_field(src, ("dbname", "database", "db")) == "second"


def test_empty_value_counts_as_present():
    src = {"dbname": "", "database": "other"}
    assert get_field(src, ("dbname", "database", "db")) == ""
    assert get_field({"host": ""}, "host") == ""


def test_none_value_counts_as_absent():
    src = {"dbname": None, "database": "other"}
    assert get_field(src, ("dbname", "database", "db")) == "other"


def test_db_params_registry_order_and_omission():
    src = {
        "dbd": "Pg",
        "sslmode": "require",
        "database": "app",
        "host": "10.0.0.5",
        "username": "guest",     # not a DSN parameter
        "unrelated": "x",
    }
    assert db_params(src) == "host=10.0.0.5;sslmode=require;dbname=app"
    keys = [k for k, _ in db_param_pairs(src)]
    allowed = [p if isinstance(p, str) else p[0] for p in params_for("Pg")]
    assert keys == [k for k in allowed if k in keys]


def test_db_params_keeps_empty_values():
    assert db_params({"dbd": "Pg", "host": "", "dbname": "x"}) == "host=;dbname=x"


def test_db_params_nothing_resolves():
    assert db_params({"dbd": "csv"}) == ""


def test_dbm_type_alias():
    assert db_params({"dbd": "DBM", "f_dir": "/data", "dbm_type": "SDBM_File"}) == "f_dir=/data;type=SDBM_File"


def test_as_dsn():
    src = {"dbd": "Pg", "dbname": "test", "host": "127.0.0.1"}
    assert as_dsn(src) == "dbi:Pg:host=127.0.0.1;dbname=test"


def test_unknown_driver():
    with pytest.raises(UnknownDriverError):
        db_params({"dbd": "Oracle", "host": "x"})
    with pytest.raises(UnknownDriverError):
        as_dsn({"dbd": "Oracle"})


def test_missing_dbd():
    with pytest.raises(UnknownDriverError):
        db_params({"host": "x"})
