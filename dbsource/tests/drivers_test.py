"""Driver parameter registry tests."""
import pytest

import dbsource
from dbsource import drivers
from dbsource.drivers import DriverParams, UnknownDriverError, params_for, register_driver


@pytest.fixture
def registry(monkeypatch):
    # isolate registrations made by a test
    monkeypatch.setattr(drivers, "_REGISTRY", dict(drivers._REGISTRY))
    return drivers._REGISTRY


def test_builtin_drivers_registered():
    assert {"pg", "mysql", "sqlite", "csv", "dbm"} <= set(drivers.registered_drivers())


def test_lookup_is_case_insensitive():
    assert params_for("Pg") == params_for("pg") == params_for("PG")
    assert params_for("SQLite") == (("dbname", "database", "db"),)


def test_pg_parameter_order():
    assert params_for("Pg") == (
        "host", "hostaddr", "port", "options", "service", "sslmode",
        ("dbname", "database", "db"),
    )


def test_mysql_database_group_comes_last():
    params = params_for("mysql")
    assert params[0] == "host"
    assert params[-1] == ("database", "dbname", "db")


@pytest.mark.parametrize("name", ["Oracle", "", None])
def test_unknown_driver(name):
    with pytest.raises(UnknownDriverError):
        params_for(name)


def test_register_driver_normalises_alias_lists(registry):
    register_driver(DriverParams(name="Oracle", params=["host", "port", ["sid", "service_name"]]))
    assert params_for("oracle") == ("host", "port", ("sid", "service_name"))
    assert drivers.get_driver("ORACLE").name == "Oracle"


def test_register_driver_replaces_existing(registry):
    register_driver(DriverParams(name="csv", params=("f_dir",)))
    assert params_for("CSV") == ("f_dir",)


class _EntryPoint:
    def __init__(self, name, value):
        self.name = name
        self.value = value

    def load(self):
        if isinstance(self.value, Exception):
            raise self.value
        return self.value


class _EntryPoints:
    def __init__(self, eps):
        self.eps = eps

    def select(self, group):
        return [ep for ep in self.eps if group == "dbsource.drivers"]


def _patch_entry_points(monkeypatch, eps):
    import importlib.metadata
    monkeypatch.setattr(importlib.metadata, "entry_points", lambda: _EntryPoints(eps))
    monkeypatch.setattr(dbsource, "_loaded_plugins", False)


def test_load_plugins_registers_drivers(monkeypatch, registry):
    _patch_entry_points(monkeypatch, [
        _EntryPoint("firebird", DriverParams(name="Firebird", params=("host", ("dbname", "db")))),
        _EntryPoint("broken", ImportError("missing module")),
        _EntryPoint("wrong", object()),
    ])
    assert dbsource.load_plugins() == 1
    assert params_for("firebird") == ("host", ("dbname", "db"))
    # one-shot unless reload is requested
    assert dbsource.load_plugins() == 0


def test_load_plugins_strict_and_include(monkeypatch, registry):
    _patch_entry_points(monkeypatch, [
        _EntryPoint("broken", ImportError("missing module")),
        _EntryPoint("informix", DriverParams(name="Informix", params=("host",))),
    ])
    assert dbsource.load_plugins(include={"informix"}) == 1
    with pytest.raises(ImportError):
        dbsource.load_plugins(strict=True, reload=True)
