from __future__ import annotations

import json

import yaml
from typer.testing import CliRunner

from kappctl import main
from kappctl.commands import get_cmd
from kappctl.config import AppConfig


def _service(name: str, cluster: str = "default", phase: str = "Succeeded") -> dict:
    return {
        "metadata": {"name": name, "namespace": "kappital-system", "creationTimestamp": "2024-01-01T00:00:00Z"},
        "spec": {"clusterName": cluster, "customResources": [{"name": "stale"}]},
        "status": {"phase": phase, "message": ""},
    }


def _instance(name: str, status: str = "Running") -> dict:
    return {
        "Name": name,
        "Namespace": "default",
        "Kind": "DemoApp",
        "APIVersion": "demo.kappital.io/v1alpha1",
        "Status": status,
        "ServiceID": "id-" + name,
        "RawResource": "",
        "ClusterName": "default",
        "CreateTimestamp": "2024-01-01T00:00:00Z",
    }


class _FakeClient:
    def __init__(self, services: list[dict], instances: dict[str, list[dict]], status: int = 200):
        self.services = {svc["metadata"]["name"]: svc for svc in services}
        self.order = [svc["metadata"]["name"] for svc in services]
        self.instances = instances
        self.status = status
        self.calls: list[tuple] = []

    def get_service(self, name: str, cluster: str):
        self.calls.append(("get_service", name, cluster))
        if self.status != 200:
            return self.status, b"not found"
        return 200, json.dumps(self.services[name]).encode()

    def list_services(self, cluster: str):
        self.calls.append(("list_services", cluster))
        return self.status, json.dumps([self.services[n] for n in self.order]).encode()

    def list_instances(self, name: str):
        self.calls.append(("list_instances", name))
        return 200, json.dumps(self.instances.get(name)).encode()


def _patch(monkeypatch, client: _FakeClient) -> None:
    monkeypatch.setattr(get_cmd, "make_client", lambda *args, **kwargs: client)
    monkeypatch.setattr(get_cmd, "load_config", lambda: AppConfig(manager_https_server="https://m:1"))


def _rows(output: str) -> list[list[str]]:
    return [line.split() for line in output.strip().splitlines()]


def test_get_service_single_row(monkeypatch) -> None:
    client = _FakeClient([_service("foo", cluster="prod-1")], {})
    _patch(monkeypatch, client)

    result = CliRunner().invoke(main.app, ["get", "service", "foo", "-c", "prod-1"])

    assert result.exit_code == 0, result.output
    rows = _rows(result.output)
    assert rows[0] == ["NAME", "CLUSTER", "NAMESPACE", "PHASE", "MESSAGE", "CREATED"]
    assert rows[1][:4] == ["foo", "prod-1", "kappital-system", "Succeeded"]
    assert len(rows) == 2
    assert client.calls == [("get_service", "foo", "prod-1")]


def test_get_service_list_empty(monkeypatch) -> None:
    _patch(monkeypatch, _FakeClient([], {}))

    result = CliRunner().invoke(main.app, ["get", "svc"])

    assert result.exit_code == 0, result.output
    assert "No resources found" in result.output


def test_get_service_output_json_is_raw(monkeypatch) -> None:
    _patch(monkeypatch, _FakeClient([_service("foo")], {}))

    result = CliRunner().invoke(main.app, ["get", "service", "foo", "-o", "json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["metadata"]["name"] == "foo"


def test_get_service_status_error(monkeypatch) -> None:
    _patch(monkeypatch, _FakeClient([_service("foo")], {}, status=404))

    result = CliRunner().invoke(main.app, ["get", "service", "foo"])

    assert result.exit_code != 0
    assert "cannot get the service binding, http code: 404, msg: not found" in result.output


def test_get_service_rejects_bad_cluster(monkeypatch) -> None:
    client = _FakeClient([_service("foo")], {})
    _patch(monkeypatch, client)

    result = CliRunner().invoke(main.app, ["get", "service", "foo", "-c", "1234"])

    assert result.exit_code != 0
    assert client.calls == []


def test_get_instance_all_concatenates_in_service_order(monkeypatch) -> None:
    client = _FakeClient(
        [_service("svc-b"), _service("svc-a", phase="Pending")],
        {"svc-b": [_instance("b-1"), _instance("b-2")], "svc-a": [_instance("a-1")]},
    )
    _patch(monkeypatch, client)

    result = CliRunner().invoke(main.app, ["get", "instance", "-A"])

    assert result.exit_code == 0, result.output
    rows = _rows(result.output)
    assert rows[0][0] == "INSTANCENAME"
    assert [(r[0], r[2], r[4]) for r in rows[1:]] == [
        ("b-1", "svc-b", "Running"),
        ("b-2", "svc-b", "Running"),
        ("a-1", "svc-a", "Pending"),
    ]
    assert [c for c in client.calls if c[0] == "list_instances"] == [
        ("list_instances", "svc-b"),
        ("list_instances", "svc-a"),
    ]


def test_get_instance_all_without_services(monkeypatch) -> None:
    _patch(monkeypatch, _FakeClient([], {}))

    result = CliRunner().invoke(main.app, ["get", "instances", "--all"])

    assert result.exit_code == 0, result.output
    assert "No service deployed into cluster." in result.output


def test_get_instance_requires_service(monkeypatch) -> None:
    _patch(monkeypatch, _FakeClient([], {}))

    result = CliRunner().invoke(main.app, ["get", "instance"])
    assert result.exit_code != 0
    assert "please specify the instance and service name" in result.output

    result = CliRunner().invoke(main.app, ["get", "instance", "inst-1"])
    assert result.exit_code != 0
    assert "please specify the service name" in result.output


def test_get_instance_filters_by_name(monkeypatch) -> None:
    _patch(monkeypatch, _FakeClient([_service("svc")], {"svc": [_instance("one"), _instance("two")]}))

    result = CliRunner().invoke(main.app, ["get", "instance", "two", "-s", "svc"])

    assert result.exit_code == 0, result.output
    names = [r[0] for r in _rows(result.output)[1:]]
    assert names == ["two"]


def test_get_instance_output_merges_into_service(monkeypatch) -> None:
    _patch(monkeypatch, _FakeClient([_service("svc", phase="Failed")], {"svc": [_instance("one")]}))

    result = CliRunner().invoke(main.app, ["get", "instance", "-s", "svc", "-o", "yaml"])

    assert result.exit_code == 0, result.output
    doc = yaml.safe_load(result.output)
    assert doc["metadata"]["name"] == "svc"
    assert doc["spec"]["customResources"] == [
        {
            "kind": "DemoApp",
            "apiVersion": "demo.kappital.io/v1alpha1",
            "name": "one",
            "namespace": "default",
            "uid": "id-one",
            "status": "Unknown",
        }
    ]


def test_overlay_status() -> None:
    assert get_cmd.overlay_status("Running", "Succeeded") == "Running"
    assert get_cmd.overlay_status("Running", "Pending") == "Pending"
    for phase in ("Failed", "Unknown", "", "Upgrading"):
        assert get_cmd.overlay_status("Running", phase) == "Unknown"


def test_null_instance_list_is_empty(monkeypatch) -> None:
    _patch(monkeypatch, _FakeClient([_service("svc")], {}))

    result = CliRunner().invoke(main.app, ["get", "instance", "-s", "svc"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == ""
