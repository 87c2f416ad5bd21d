"""Tests for the instance lifecycle manager."""

import json

import pytest

from wpdind.exceptions import InstanceNotFoundError, ValidationError
from wpdind.models.instance import InstanceRecord, InstanceStatus, StackSpec
from wpdind.models.results import ResultStatus
from wpdind.network_allocator import next_network


def _document(store):
    return json.loads(store.config_path.read_text())


# ----------------------------------------------------------------------
# create
# ----------------------------------------------------------------------


def test_create_writes_instance(instance_service, settings, docker, store):
    result = instance_service.create("shop")

    assert result.status == ResultStatus.APPLIED
    instance_dir = settings.instances_dir / "shop"
    assert (instance_dir / ".instance-info").is_file()
    assert (instance_dir / "docker-compose.yml").is_file()
    assert (instance_dir / "data" / "wordpress").is_dir()
    assert (instance_dir / "data" / "mysql").is_dir()

    record = _document(store)["instances"]["shop"]
    assert record["status"] == "created"
    assert record["port"] == 8001
    assert record["network"] == {"name": "wp-network-1", "subnet": "172.20.1.0/24", "ordinal": 1}
    assert record["stack"] == {"webserver": "nginx", "phpVersion": "8.3", "mysqlVersion": "8.0"}

    assert docker.networks["wp-network-1"] == ["172.20.1.0/24"]
    assert "wp-shared" in docker.networks
    # Containers are not started by create
    assert docker.called("compose_up") == []


def test_create_seeds_configs_and_log_links(instance_service, settings):
    instance_service.create("shop", "57", "74", "apache")

    config = settings.instances_dir / "shop" / "config"
    assert (config / "php-7.4" / "custom.ini").is_file()
    assert (config / "php-7.4" / "wordpress.ini").is_file()
    assert (config / "mysql-5.7" / "custom.cnf").is_file()
    assert "proxy:fcgi://php:9000" in (config / "apache-2.4.62" / "wordpress.conf").read_text()

    link = settings.instances_dir / "shop" / "logs" / "php-7.4"
    assert link.is_symlink()
    assert link.resolve() == (settings.host_logs_dir / "shop" / "php-7.4").resolve()


def test_create_generates_distinct_passwords(instance_service):
    instance = instance_service.create("shop").instance

    credentials = instance.credentials
    assert len(credentials.db_password) == 25
    assert len(credentials.db_root_password) == 25
    assert credentials.db_password != credentials.db_root_password
    assert credentials.db_password.isalnum()


def test_second_instance_gets_next_port_and_network(instance_service, store):
    instance_service.create("one")
    result = instance_service.create("two")

    assert result.instance.port == 8002
    assert result.instance.network.name == "wp-network-2"
    assert _document(store)["nextNetworkOrdinal"] == 3


def test_removed_network_ordinal_is_not_reused(instance_service):
    instance_service.create("one")
    instance_service.create("two")
    instance_service.remove("one")

    result = instance_service.create("three")

    assert result.instance.network.name == "wp-network-3"
    assert result.instance.port == 8003


def test_legacy_document_networks_are_not_proposed_again(
    instance_service, settings, docker, store
):
    # Written by an older manager: no counter, no per-record network
    store.config_path.parent.mkdir(parents=True, exist_ok=True)
    store.config_path.write_text(
        json.dumps(
            {
                "workspaceName": "legacy",
                "workspaceType": "multi-instance",
                "instances": {
                    "alpha": {"port": 8001, "status": "running"},
                    "beta": {"port": 8002, "status": "running"},
                },
            }
        )
    )
    for ordinal, name in enumerate(["alpha", "beta"], start=1):
        instance_dir = settings.instances_dir / name
        instance_dir.mkdir(parents=True)
        (instance_dir / ".instance-info").write_text(
            f"NAME={name}\nPORT={8000 + ordinal}\nNETWORK=wp-network-{ordinal}\n"
        )
        docker.networks[f"wp-network-{ordinal}"] = [f"172.20.{ordinal}.0/24"]

    result = instance_service.create("gamma")

    assert result.status == ResultStatus.APPLIED
    assert result.instance.network.name == "wp-network-3"
    assert result.instance.port == 8003
    assert _document(store)["nextNetworkOrdinal"] == 4


def test_removed_name_can_be_created_again(instance_service, settings, store):
    instance_service.create("shop")
    assert instance_service.remove("shop").status == ResultStatus.APPLIED

    result = instance_service.create("shop")

    assert result.status == ResultStatus.APPLIED
    assert (settings.instances_dir / "shop" / ".instance-info").is_file()
    assert result.instance.network.name == "wp-network-2"
    assert "shop" in _document(store)["instances"]


@pytest.mark.parametrize("name", ["", "bad name", "shop!", "../escape"])
def test_create_invalid_name_is_rejected(instance_service, store, name):
    result = instance_service.create(name)

    assert result.status == ResultStatus.REJECTED
    assert not store.exists()


def test_create_invalid_webserver_is_rejected(instance_service, settings, docker, store):
    result = instance_service.create("shop", webserver="caddy")

    assert result.status == ResultStatus.REJECTED
    assert not (settings.instances_dir / "shop").exists()
    assert not store.exists()
    assert docker.calls == []


def _tree(root):
    return sorted(str(path.relative_to(root)) for path in root.rglob("*"))


def test_create_duplicate_is_rejected(instance_service, settings, docker, store):
    instance_service.create("shop")
    document = store.config_path.read_bytes()
    tree = _tree(settings.instances_dir)
    networks = dict(docker.networks)

    result = instance_service.create("shop")

    assert result.status == ResultStatus.REJECTED
    assert "already exists" in result.message
    assert store.config_path.read_bytes() == document
    assert _tree(settings.instances_dir) == tree
    assert docker.networks == networks


def test_create_duplicate_record_only_is_rejected(instance_service, store):
    with store.transaction() as workspace:
        workspace.instances["ghost"] = InstanceRecord(
            name="ghost", port=8001, stack=StackSpec("nginx", "8.3", "8.0"), created_at=""
        )

    assert instance_service.create("ghost").status == ResultStatus.REJECTED


def test_unknown_version_falls_back_with_warning(instance_service, settings):
    result = instance_service.create("shop", mysql_version="99", php_version="83")

    assert result.status == ResultStatus.APPLIED
    assert result.instance.stack.mysql_version == "8.0"
    assert any("MySQL" in warning for warning in result.warnings)
    info = (settings.instances_dir / "shop" / ".instance-info").read_text()
    assert "MYSQL_VERSION=80" in info


def test_create_rejected_in_single_site_mode(instance_service, store, settings):
    with store.transaction() as workspace:
        workspace.workspace_name = "blog"
        workspace.workspace_type = "workspace"

    result = instance_service.create("shop")

    assert result.status == ResultStatus.REJECTED
    assert "single-site" in result.message
    assert not (settings.instances_dir / "shop").exists()


def test_create_network_conflict_rolls_back(instance_service, settings, docker, store):
    docker.networks["wp-network-1"] = ["172.20.1.0/24"]

    result = instance_service.create("shop")

    assert result.status == ResultStatus.ROLLED_BACK
    assert not (settings.instances_dir / "shop").exists()
    assert _document(store)["instances"] == {}
    # The pre-existing network belongs to someone else and is kept
    assert "wp-network-1" in docker.networks
    assert docker.called("remove_network") == []


def test_create_failure_after_network_rolls_back(instance_service, settings, docker, store):
    settings.templates_dir = settings.instances_dir.parent / "missing-templates"

    result = instance_service.create("shop")

    assert result.status == ResultStatus.ROLLED_BACK
    assert not (settings.instances_dir / "shop").exists()
    assert not (settings.host_logs_dir / "shop").exists()
    assert "wp-network-1" not in docker.networks
    assert _document(store)["instances"] == {}


def test_create_incomplete_rollback_is_partial(instance_service, settings, docker):
    settings.templates_dir = settings.instances_dir.parent / "missing-templates"
    docker.fail_on["remove_network"] = "network has active endpoints"

    result = instance_service.create("shop")

    assert result.status == ResultStatus.PARTIAL
    assert result.cleanup_hint == "wp-dind remove shop --force"


# ----------------------------------------------------------------------
# start / stop
# ----------------------------------------------------------------------


def test_start_runs_containers_and_reports_url(instance_service, docker, store):
    instance_service.create("shop")

    result = instance_service.start("shop")

    assert result.status == ResultStatus.APPLIED
    assert result.data["url"] == "http://localhost:8001"
    assert {"shop-mysql", "shop-php", "shop-nginx"} <= set(docker.running)
    assert docker.called("compose_up")[0][2] == "shop"
    assert _document(store)["instances"]["shop"]["status"] == "running"


def test_start_without_published_port_warns(instance_service, docker, monkeypatch):
    instance_service.create("shop")
    monkeypatch.setattr(docker, "container_port", lambda *args: None)

    result = instance_service.start("shop")

    assert result.status == ResultStatus.APPLIED
    assert "url" not in result.data
    assert len(result.warnings) == 1


def test_start_is_idempotent(instance_service):
    instance_service.create("shop")

    assert instance_service.start("shop").status == ResultStatus.APPLIED
    assert instance_service.start("shop").status == ResultStatus.APPLIED


def test_start_missing_is_rejected(instance_service):
    result = instance_service.start("nope")

    assert result.status == ResultStatus.REJECTED
    assert "does not exist" in result.message


def test_start_engine_failure_is_partial(instance_service, docker, store):
    instance_service.create("shop")
    docker.fail_on["compose_up"] = "image not found"

    result = instance_service.start("shop")

    assert result.status == ResultStatus.PARTIAL
    assert "image not found" in result.message
    assert _document(store)["instances"]["shop"]["status"] == "created"


def test_stop_marks_stopped(instance_service, docker, store):
    instance_service.create("shop")
    instance_service.start("shop")

    result = instance_service.stop("shop")

    assert result.status == ResultStatus.APPLIED
    assert "shop-nginx" not in docker.running
    assert _document(store)["instances"]["shop"]["status"] == "stopped"


# ----------------------------------------------------------------------
# remove
# ----------------------------------------------------------------------


def test_remove_deletes_everything(instance_service, settings, docker, store):
    instance_service.create("shop")
    instance_service.start("shop")

    result = instance_service.remove("shop")

    assert result.status == ResultStatus.APPLIED
    assert not (settings.instances_dir / "shop").exists()
    assert not (settings.host_logs_dir / "shop").exists()
    assert "wp-network-1" not in docker.networks
    assert "wp-shared" in docker.networks
    assert docker.called("compose_down")[0][3] is True
    assert "shop" not in _document(store)["instances"]


def test_remove_missing_is_rejected(instance_service):
    assert instance_service.remove("nope").status == ResultStatus.REJECTED


def test_remove_document_only_instance(instance_service, docker, store):
    network = next_network(5)
    docker.networks[network.name] = [network.subnet]
    with store.transaction() as workspace:
        workspace.instances["ghost"] = InstanceRecord(
            name="ghost",
            port=8001,
            stack=StackSpec("nginx", "8.3", "8.0"),
            created_at="",
            network=network,
        )

    result = instance_service.remove("ghost")

    assert result.status == ResultStatus.APPLIED
    assert network.name not in docker.networks
    assert _document(store)["instances"] == {}


def test_remove_disk_only_instance(instance_service, settings, store):
    instance_service.create("shop")
    with store.transaction() as workspace:
        workspace.instances.pop("shop")

    result = instance_service.remove("shop")

    assert result.status == ResultStatus.APPLIED
    assert not (settings.instances_dir / "shop").exists()


def test_remove_with_teardown_failure_is_partial(instance_service, settings, docker, store):
    instance_service.create("shop")
    docker.fail_on["compose_down"] = "daemon unreachable"

    result = instance_service.remove("shop")

    assert result.status == ResultStatus.PARTIAL
    assert "docker rm -f shop-mysql shop-php shop-nginx" in result.cleanup_hint
    assert not (settings.instances_dir / "shop").exists()
    assert "shop" not in _document(store)["instances"]


# ----------------------------------------------------------------------
# queries
# ----------------------------------------------------------------------


def test_list_uses_exact_container_names(instance_service, docker):
    instance_service.create("shop")
    instance_service.create("shop2")
    docker.running["shop2-mysql"] = {"status": "Up", "ports": ""}
    docker.running["shop-mysql-backup"] = {"status": "Up", "ports": ""}

    instances = {i.name: i for i in instance_service.list_instances()}

    assert instances["shop"].live_status == "stopped"
    assert instances["shop2"].live_status == "running"


def test_list_ignores_stored_status(instance_service, docker):
    instance_service.create("shop")
    instance_service.start("shop")
    docker.running.clear()

    [instance] = instance_service.list_instances()

    assert instance.live_status == "stopped"


def test_list_includes_interrupted_creates(instance_service, store, settings):
    instance_service.create("shop")
    with store.transaction() as workspace:
        workspace.instances["ghost"] = InstanceRecord(
            name="ghost", port=8002, stack=StackSpec("apache", "8.2", "5.7"), created_at=""
        )
    (settings.instances_dir / ".hidden").mkdir()

    instances = instance_service.list_instances()

    assert [i.name for i in instances] == ["ghost", "shop"]
    assert instances[0].live_status == "creating"


def test_info_contains_credentials_and_urls(instance_service, settings):
    instance_service.create("shop")
    instance_service.start("shop")

    info = instance_service.info("shop")

    assert info["status"] == "running"
    assert info["port"] == 8001
    assert info["network"]["subnet"] == "172.20.1.0/24"
    assert set(info["credentials"]) == {"database", "user", "password", "rootPassword"}
    assert info["directories"]["instance"] == str(settings.instances_dir / "shop")
    assert set(info["containers"]) == {"shop-mysql", "shop-php", "shop-nginx"}
    assert "http://localhost:8001" in info["urls"]


def test_info_missing_raises(instance_service):
    with pytest.raises(InstanceNotFoundError):
        instance_service.info("nope")


def test_logs_web_alias_maps_to_webserver(instance_service, docker):
    instance_service.create("shop", webserver="apache")

    assert instance_service.logs("shop", service="web", follow=True, tail=10) == 0

    call = docker.called("compose_logs")[0]
    assert call[2:] == ("shop", "apache", True, 10)


def test_logs_rejects_other_webserver(instance_service):
    instance_service.create("shop")

    with pytest.raises(ValidationError):
        instance_service.logs("shop", service="apache")


def test_set_status_persists_transient_marker(instance_service, store):
    instance_service.create("shop")

    instance_service.set_status("shop", InstanceStatus.CLONING)

    assert _document(store)["instances"]["shop"]["status"] == "cloning"
