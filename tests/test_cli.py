"""Tests for the wp-dind command line."""

import json

import pytest
from click.testing import CliRunner

from wpdind.base import BaseCommand
from wpdind.exceptions import ValidationError
from wpdind.main import cli, handle_cli_errors


@pytest.fixture
def env(tmp_path, monkeypatch, docker):
    """Point the CLI at tmp_path and the fake engine."""
    monkeypatch.setenv("WP_DIND_INSTANCES_DIR", str(tmp_path / "instances"))
    monkeypatch.setenv("WP_DIND_HOST_LOGS_DIR", str(tmp_path / "host-logs"))
    monkeypatch.setenv("WP_DIND_HOST_CONFIG_DIR", str(tmp_path / "host-config"))
    monkeypatch.setenv("WP_DIND_WORKSPACE_DIR", str(tmp_path / "workspace"))
    monkeypatch.setenv("WP_DIND_WORKSPACE_COMPOSE_FILE", str(tmp_path / "run" / "compose.yml"))
    for name in ("WP_DIND_ENV_FILE", "WP_DIND_WORKSPACE_CONFIG", "WP_DIND_LOGS_DIR", "WORKSPACE_TYPE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("wpdind.base.base_command.DockerService", lambda *args, **kwargs: docker)
    return tmp_path


@pytest.fixture
def runner():
    return CliRunner()


def _json(result):
    return json.loads(result.output)


def test_help_lists_commands(runner):
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    for command in ("create", "clone", "remove", "workspace:start"):
        assert command in result.output


def test_create_json(runner, env):
    result = runner.invoke(cli, ["create", "shop", "57", "74", "apache", "--json"])

    assert result.exit_code == 0
    data = _json(result)
    assert data["status"] == "applied"
    assert data["instance"]["port"] == 8001
    assert data["instance"]["stack"]["webserver"] == "apache"
    assert (env / "instances" / "shop" / ".instance-info").is_file()


def test_create_rejected_exit_code(runner, env):
    result = runner.invoke(cli, ["create", "bad!name", "--json"])

    assert result.exit_code == 1
    assert _json(result)["status"] == "rejected"


def test_create_writes_operation_log(runner, env):
    result = runner.invoke(cli, ["create", "shop"])

    assert result.exit_code == 0
    logs = list((env / "instances" / ".manager-logs" / "shop").glob("*/*_create.log"))
    assert len(logs) == 1
    text = logs[0].read_text()
    assert "wp-dind Operation Log" in text
    assert "Status: SUCCESS" in text


def test_start_stop_cycle(runner, env, docker):
    runner.invoke(cli, ["create", "shop", "--json"])

    started = runner.invoke(cli, ["start", "shop", "--json"])
    assert started.exit_code == 0
    assert _json(started)["url"] == "http://localhost:8001"
    assert "shop-nginx" in docker.running

    stopped = runner.invoke(cli, ["stop", "shop", "--json"])
    assert stopped.exit_code == 0
    assert "shop-nginx" not in docker.running


def test_start_missing_instance(runner, env):
    result = runner.invoke(cli, ["start", "nope", "--json"])

    assert result.exit_code == 1


def test_list_json(runner, env, docker):
    runner.invoke(cli, ["create", "b-site", "--json"])
    runner.invoke(cli, ["create", "a-site", "--json"])
    runner.invoke(cli, ["start", "b-site", "--json"])

    result = runner.invoke(cli, ["list", "--json"])

    assert result.exit_code == 0
    data = _json(result)
    assert data["total"] == 2
    assert [(i["name"], i["status"]) for i in data["instances"]] == [
        ("a-site", "stopped"),
        ("b-site", "running"),
    ]
    assert "credentials" not in data["instances"][0]


def test_list_table(runner, env):
    runner.invoke(cli, ["create", "shop", "--json"])

    result = runner.invoke(cli, ["list"])

    assert result.exit_code == 0
    assert "shop" in result.output


def test_info_json(runner, env):
    runner.invoke(cli, ["create", "shop", "--json"])

    result = runner.invoke(cli, ["info", "shop", "--json"])

    assert result.exit_code == 0
    data = _json(result)
    assert data["name"] == "shop"
    assert data["credentials"]["database"] == "wordpress"


def test_info_missing_reports_error(runner, env):
    result = runner.invoke(cli, ["info", "nope", "--json"])

    assert result.exit_code == 1
    assert "does not exist" in _json(result)["error"]


def test_remove_refuses_without_tty(runner, env):
    runner.invoke(cli, ["create", "shop", "--json"])

    result = runner.invoke(cli, ["remove", "shop"])

    assert result.exit_code == 1
    assert (env / "instances" / "shop").exists()


def test_remove_force(runner, env):
    runner.invoke(cli, ["create", "shop", "--json"])

    result = runner.invoke(cli, ["remove", "shop", "--force", "--json"])

    assert result.exit_code == 0
    assert _json(result)["status"] == "applied"
    assert not (env / "instances" / "shop").exists()


def test_remove_confirmed_interactively(runner, env, monkeypatch):
    monkeypatch.setattr(BaseCommand, "stdin_is_interactive", lambda self: True)
    runner.invoke(cli, ["create", "shop", "--json"])

    result = runner.invoke(cli, ["remove", "shop"], input="yes\n")

    assert result.exit_code == 0
    assert not (env / "instances" / "shop").exists()


def test_remove_declined_keeps_instance(runner, env, monkeypatch):
    monkeypatch.setattr(BaseCommand, "stdin_is_interactive", lambda self: True)
    runner.invoke(cli, ["create", "shop", "--json"])

    result = runner.invoke(cli, ["remove", "shop"], input="y\n")

    assert result.exit_code == 0
    assert (env / "instances" / "shop").exists()


def test_clone_with_alias(runner, env):
    runner.invoke(cli, ["create", "shop", "--json"])

    result = runner.invoke(cli, ["clone", "shop", "shop-copy", "copy-files", "--json"])

    assert result.exit_code == 0
    data = _json(result)
    assert data["strategy"] == "files-only-copy"
    assert data["instance"]["port"] == 8002


def test_logs_passes_options(runner, env, docker):
    runner.invoke(cli, ["create", "shop", "--json"])

    result = runner.invoke(cli, ["logs", "shop", "web", "-f", "--tail", "20"])

    assert result.exit_code == 0
    assert docker.called("compose_logs")[0][2:] == ("shop", "nginx", True, 20)


def test_logs_rejects_unknown_service(runner, env):
    result = runner.invoke(cli, ["logs", "shop", "redis"])

    assert result.exit_code == 2


def test_init_and_workspace_status(runner, env):
    init = runner.invoke(cli, ["init", "blog", "--type", "workspace", "--json"])
    assert init.exit_code == 0
    assert _json(init)["workspace"]["workspaceType"] == "workspace"

    started = runner.invoke(cli, ["workspace:start", "--json"])
    assert started.exit_code == 0

    status = runner.invoke(cli, ["workspace:status", "--json"])
    assert _json(status)["status"] == "running"

    stopped = runner.invoke(cli, ["workspace:stop", "--json"])
    assert stopped.exit_code == 0


def test_create_refused_in_workspace_mode(runner, env):
    runner.invoke(cli, ["init", "blog", "--type", "workspace", "--json"])

    result = runner.invoke(cli, ["create", "shop", "--json"])

    assert result.exit_code == 1
    assert _json(result)["status"] == "rejected"


def test_handle_cli_errors_maps_wp_dind_errors():
    @handle_cli_errors
    def failing():
        raise ValidationError("bad input", context="details")

    with pytest.raises(SystemExit) as exc_info:
        failing()
    assert exc_info.value.code == 1


def test_handle_cli_errors_maps_keyboard_interrupt():
    @handle_cli_errors
    def interrupted():
        raise KeyboardInterrupt

    with pytest.raises(SystemExit) as exc_info:
        interrupted()
    assert exc_info.value.code == 130
