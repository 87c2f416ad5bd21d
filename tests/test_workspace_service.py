"""Tests for workspace initialization and single-site mode."""

import json

import yaml

from wpdind.models.instance import InstanceRecord, StackSpec
from wpdind.models.results import ResultStatus


def _document(store):
    return json.loads(store.config_path.read_text())


def test_init_writes_document(workspace_service, store):
    result = workspace_service.init_workspace("demo")

    assert result.status == ResultStatus.APPLIED
    data = _document(store)
    assert data["workspaceName"] == "demo"
    assert data["workspaceType"] == "multi-instance"
    assert data["initializedAt"].endswith("Z")
    assert data["instances"] == {}
    assert data["stack"]["dindImage"] == "airoman/wp-dind:dind-27.0.3"
    assert data["stack"]["phpVersions"] == ["7.4", "8.0", "8.1", "8.2", "8.3"]
    assert data["stack"]["webservers"] == ["nginx", "apache"]
    assert data["imageVersions"]["php83"] == "8.3.14"
    assert "workspaceStack" not in data


def test_init_single_site_records_stack(workspace_service, store):
    result = workspace_service.init_workspace(
        "blog", "workspace", webserver="apache", php_version="82", mysql_version="57"
    )

    assert result.status == ResultStatus.APPLIED
    assert _document(store)["workspaceStack"] == {
        "webserver": "apache",
        "phpVersion": "8.2",
        "mysqlVersion": "5.7",
    }


def test_reinit_is_rejected(workspace_service, store):
    workspace_service.init_workspace("demo")
    before = store.config_path.read_bytes()

    result = workspace_service.init_workspace("other", "workspace")

    assert result.status == ResultStatus.REJECTED
    assert store.config_path.read_bytes() == before


def test_init_invalid_type_is_rejected(workspace_service, store):
    result = workspace_service.init_workspace("demo", "cluster")

    assert result.status == ResultStatus.REJECTED
    assert not store.exists()


def test_single_site_init_refused_with_instances(workspace_service, store):
    with store.transaction() as workspace:
        workspace.instances["shop"] = InstanceRecord(
            name="shop", port=8001, stack=StackSpec("nginx", "8.3", "8.0"), created_at=""
        )

    result = workspace_service.init_workspace("blog", "workspace")

    assert result.status == ResultStatus.REJECTED


def test_start_is_noop_in_multi_instance_mode(workspace_service, docker, settings):
    workspace_service.init_workspace("demo")

    result = workspace_service.start()

    assert result.status == ResultStatus.APPLIED
    assert docker.calls == []
    assert not settings.workspace_compose_file.exists()


def test_start_renders_and_runs_stack(workspace_service, docker, settings):
    workspace_service.init_workspace("blog", "workspace")

    result = workspace_service.start()

    assert result.status == ResultStatus.APPLIED
    assert result.data["url"] == "http://localhost:8000"
    assert "wp-shared" in docker.networks

    descriptor = yaml.safe_load(settings.workspace_compose_file.read_text())
    assert list(descriptor["services"]) == ["workspace-mysql", "workspace-php", "workspace-nginx"]
    conf = settings.workspace_compose_file.with_name("workspace-nginx.conf")
    assert "fastcgi_pass workspace-php:9000;" in conf.read_text()

    [up] = docker.called("compose_up")
    assert up[2] == "workspace"
    assert "workspace-nginx" in docker.running

    [wait] = docker.called("wait_for_mysql")
    assert wait[1:] == ("workspace-mysql", "rootpassword", 60, 1)


def test_start_uses_environment_type_without_document(workspace_service, docker, settings, store):
    settings.workspace_type = "workspace"
    settings.default_webserver = "apache"

    result = workspace_service.start()

    assert result.status == ResultStatus.APPLIED
    assert not store.exists()
    assert "workspace-apache" in docker.running


def test_start_mysql_timeout_is_partial(workspace_service, docker):
    workspace_service.init_workspace("blog", "workspace")
    docker.mysql_ready = False

    result = workspace_service.start()

    assert result.status == ResultStatus.PARTIAL


def test_start_engine_failure_is_partial(workspace_service, docker):
    workspace_service.init_workspace("blog", "workspace")
    docker.fail_on["compose_up"] = "pull access denied"

    result = workspace_service.start()

    assert result.status == ResultStatus.PARTIAL
    assert result.cleanup_hint == "wp-dind workspace:stop"


def test_stop_without_compose_file_is_noop(workspace_service, docker):
    result = workspace_service.stop()

    assert result.status == ResultStatus.APPLIED
    assert docker.calls == []


def test_stop_tears_down(workspace_service, docker):
    workspace_service.init_workspace("blog", "workspace")
    workspace_service.start()

    result = workspace_service.stop()

    assert result.status == ResultStatus.APPLIED
    assert docker.called("compose_down")[0][2] == "workspace"
    assert "workspace-mysql" not in docker.running


def test_status_reports_containers(workspace_service, docker):
    workspace_service.init_workspace("blog", "workspace")
    workspace_service.start()
    docker.running["shop-nginx"] = {"status": "Up", "ports": ""}

    status = workspace_service.status()

    assert status["enabled"] is True
    assert status["status"] == "running"
    assert status["workspaceName"] == "blog"
    assert set(status["containers"]) == {"workspace-mysql", "workspace-php", "workspace-nginx"}


def test_status_multi_instance(workspace_service):
    workspace_service.init_workspace("demo")

    assert workspace_service.status() == {"mode": "multi-instance", "enabled": False}
