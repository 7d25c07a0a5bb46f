from __future__ import annotations

import dataclasses

import pytest

from dbauditor.config import Config, ConfigLoader, ConnectionConfig, load_config
from dbauditor.core.exceptions import ConfigurationError


def test_connection_config_is_immutable():
    config = ConnectionConfig(server="db01", database="Sales", user="sa", password="x")
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.database = "Other"

    changed = config.with_overrides(database="Staging", user=None, options={"encrypt": False})
    assert (changed.database, changed.user, changed.options.encrypt) == ("Staging", "sa", False)
    assert (config.database, config.options.encrypt) == ("Sales", True)


def test_password_is_not_in_repr():
    assert "hunter2" not in repr(ConnectionConfig(password="hunter2"))


def test_validation_lists_every_problem():
    config = Config(connection=ConnectionConfig(dialect="oracle", port=70000))
    with pytest.raises(ConfigurationError) as excinfo:
        config.validate()
    errors = excinfo.value.details["errors"]
    assert any("Unsupported dialect" in error for error in errors)
    assert "database is required" in errors
    assert "Invalid port number: 70000" in errors


def test_sqlite_needs_no_server():
    assert ConnectionConfig(dialect="sqlite", database="shop.db").validate() == []


def test_yaml_file_env_and_args_precedence(clean_env, tmp_path):
    config_file = tmp_path / "dbauditor.yaml"
    config_file.write_text(
        "dbauditor:\n"
        "  connection:\n"
        "    server: file-server\n"
        "    database: FileDb\n"
        "    user: reader\n"
        "  audit_log:\n"
        "    path: file.log\n",
        encoding="utf-8",
    )
    clean_env.setenv("DBAUDITOR_CONNECTION__DATABASE", "EnvDb")
    clean_env.setenv("DBAUDITOR_CONNECTION__OPTIONS__ENCRYPT", "false")

    config = ConfigLoader().load_config(str(config_file), args={"database": "ArgDb", "port": None})

    assert config.connection.server == "file-server"
    assert config.connection.database == "ArgDb"
    assert config.connection.user == "reader"
    assert config.connection.options.encrypt is False
    assert config.audit_log.path == "file.log"


def test_dotenv_file_is_read(clean_env, tmp_path):
    (tmp_path / ".env").write_text(
        "DBAUDITOR_CONNECTION__SERVER=dotenv-server\nDBAUDITOR_CONNECTION__DATABASE=Sales\n",
        encoding="utf-8",
    )
    config = load_config()
    assert config.connection.target == "dotenv-server/Sales"


def test_toml_file(tmp_path):
    config_file = tmp_path / "dbauditor.toml"
    config_file.write_text(
        '[connection]\ndialect = "sqlite"\ndatabase = "shop.db"\n\n'
        '[connection.options]\nquery_timeout_s = 5\n',
        encoding="utf-8",
    )
    config = ConfigLoader().load_config(str(config_file), env=False)
    assert config.connection.dialect == "sqlite"
    assert config.connection.options.query_timeout_s == 5


def test_env_values_are_coerced():
    loader = ConfigLoader()
    values = loader.load_from_env({
        "DBAUDITOR_CONNECTION__PORT": "1433",
        "DBAUDITOR_CONNECTION__OPTIONS__QUERY_TIMEOUT_S": "90",
        "DBAUDITOR_AUDIT_LOG__INCLUDE_DETAILS": "no",
        "DBAUDITOR_CONNECTION__NOT_AN_OPTION": "ignored",
        "UNRELATED": "x",
    })
    assert values["connection"]["port"] == 1433
    assert values["connection"]["options"]["query_timeout_s"] == 90
    assert values["audit_log"]["include_details"] is False
    assert "not_an_option" not in values["connection"]


def test_bad_boolean_is_rejected():
    with pytest.raises(ConfigurationError):
        ConfigLoader().load_from_env({"DBAUDITOR_CONNECTION__OPTIONS__ENCRYPT": "maybe"})


def test_missing_and_unsupported_files(tmp_path):
    with pytest.raises(ConfigurationError):
        ConfigLoader().load_from_file(str(tmp_path / "absent.yaml"))
    ini = tmp_path / "dbauditor.ini"
    ini.write_text("[connection]\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        ConfigLoader().load_from_file(str(ini))


def test_unknown_file_option_is_a_configuration_error(tmp_path):
    config_file = tmp_path / "dbauditor.yaml"
    config_file.write_text("connection:\n  hostname: db01\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        ConfigLoader().load_config(str(config_file), env=False)


def test_validation_can_be_deferred(clean_env):
    config = ConfigLoader().load_config(args={"audit_log": "custom.log"}, validate=False)
    assert config.audit_log.path == "custom.log"
    assert config.connection.validate()
