from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import typer

from .. import console, flags
from ..config import AppConfig, load_config
from ..errors import DecodeError, InputError, StatusError
from ..formatting import age_output, output_raw, print_table
from ..http import make_client
from ..operation import run_operation
from ..validation import validate_inputs
from ..views import Instance, Service

app = typer.Typer(help="Display one or many Kappital resources.")

PHASE_PENDING = "Pending"
PHASE_SUCCEEDED = "Succeeded"
PHASE_UNKNOWN = "Unknown"


def _decode(buf: bytes, want: type) -> Any:
    try:
        data = json.loads(buf)
    except ValueError as e:
        raise DecodeError(f"failed to unmarshal http response: {e}") from e
    if data is None and want is list:
        return []
    if not isinstance(data, want):
        raise DecodeError(f"failed to unmarshal http response: expected a JSON {want.__name__}")
    return data


def _section(doc: dict[str, Any], key: str) -> dict[str, Any]:
    value = doc.get(key)
    return value if isinstance(value, dict) else {}


def service_phase(svc: dict[str, Any]) -> str:
    return str(_section(svc, "status").get("phase") or "")


def overlay_status(status: str, phase: str) -> str:
    """Instance status as shown to the user, given the owning service phase."""
    if phase == PHASE_SUCCEEDED:
        return status
    if phase == PHASE_PENDING:
        return PHASE_PENDING
    return PHASE_UNKNOWN


def service_row(svc: dict[str, Any]) -> Service:
    meta = _section(svc, "metadata")
    return Service(
        Name=str(meta.get("name") or ""),
        Cluster=str(_section(svc, "spec").get("clusterName") or ""),
        Namespace=str(meta.get("namespace") or ""),
        Phase=service_phase(svc),
        Message=str(_section(svc, "status").get("message") or ""),
        Created=age_output(meta.get("creationTimestamp")),
    )


def instance_row(ins: dict[str, Any], service_name: str, phase: str) -> Instance:
    return Instance(
        InstanceName=str(ins.get("Name") or ""),
        Namespace=str(ins.get("Namespace") or ""),
        ServiceName=service_name,
        ClusterName=str(ins.get("ClusterName") or ""),
        Status=overlay_status(str(ins.get("Status") or ""), phase),
        Created=age_output(ins.get("CreateTimestamp")),
    )


def instance_resource(ins: dict[str, Any], phase: str) -> dict[str, Any]:
    resource = {
        "kind": ins.get("Kind") or "",
        "apiVersion": ins.get("APIVersion") or "",
        "name": ins.get("Name") or "",
        "namespace": ins.get("Namespace") or "",
        "uid": ins.get("ServiceID") or "",
        "status": overlay_status(str(ins.get("Status") or ""), phase),
        "rawMessage": ins.get("RawResource") or "",
    }
    return {k: v for k, v in resource.items() if v or k == "name"}


def merge_instances(svc: dict[str, Any], instances: list[dict[str, Any]]) -> dict[str, Any]:
    """The service document with its custom resources replaced by ``instances``."""
    phase = service_phase(svc)
    merged = dict(svc)
    spec = dict(_section(svc, "spec"))
    spec["customResources"] = [instance_resource(ins, phase) for ins in instances]
    merged["spec"] = spec
    return merged


@dataclass
class GetServiceOperation:
    service_name: str = ""
    cluster: str = flags.DEFAULT_CLUSTER
    output: str = ""
    all_result: bool = False
    config: AppConfig | None = None

    def arguments(self) -> dict[str, str | bool]:
        return {
            "service-name": self.service_name,
            flags.CLUSTER.flag_name: self.cluster,
            flags.OUTPUT.flag_name: self.output,
            flags.ALL.flag_name: self.all_result,
        }

    def pre_run(self) -> None:
        self.config = load_config()
        validate_inputs(self.arguments())

    def run(self) -> None:
        client = make_client(self.config)
        if self.service_name:
            code, buf = client.get_service(self.service_name, self.cluster)
        else:
            code, buf = client.list_services(self.cluster)
        if code != 200:
            raise StatusError(
                f"cannot get the service binding, http code: {code}, msg: {buf.decode('utf-8', errors='replace')}",
                code,
                buf.decode("utf-8", errors="replace"),
            )
        self.output_result(buf)

    def output_result(self, buf: bytes) -> None:
        if self.output:
            output_raw(buf, self.output)
            return
        if self.service_name:
            print_table([service_row(_decode(buf, dict))])
            return
        services = _decode(buf, list)
        if not services:
            console.ok("No resources found")
            return
        print_table([service_row(svc) for svc in services])


@dataclass
class GetInstanceOperation:
    instance_name: str = ""
    service_name: str = ""
    namespace: str = flags.DEFAULT_NAMESPACE
    cluster: str = flags.DEFAULT_CLUSTER
    output: str = ""
    all_result: bool = False
    config: AppConfig | None = None
    rows: list[Instance] = field(default_factory=list)

    def arguments(self) -> dict[str, str | bool]:
        return {
            flags.INSTANCE.flag_name: self.instance_name,
            flags.SERVICE.flag_name: self.service_name,
            flags.NAMESPACE.flag_name: self.namespace,
            flags.CLUSTER.flag_name: self.cluster,
            flags.ALL.flag_name: self.all_result,
            flags.OUTPUT.flag_name: self.output,
        }

    def pre_run(self) -> None:
        self.config = load_config()
        if not self.instance_name and not self.all_result and not self.service_name:
            raise InputError("please specify the instance and service name")
        if not self.all_result and not self.service_name:
            raise InputError("the instance is managed by a service, please specify the service name")
        validate_inputs(self.arguments())

    def run(self) -> None:
        client = make_client(self.config)
        if self.all_result:
            code, buf = client.list_services(self.cluster)
            if code != 200:
                raise StatusError(f"cannot get the service list, because get the http code: {code}", code)
            services = _decode(buf, list)
            if not services:
                console.ok("No service deployed into cluster.")
                return
        else:
            code, buf = client.get_service(self.service_name, self.cluster)
            if code != 200:
                raise StatusError(f"cannot get the service list, because get the http code: {code}", code)
            services = [_decode(buf, dict)]

        for svc in services:
            self.collect(client, svc)
        print_table(self.rows)

    def collect(self, client, svc: dict[str, Any]) -> None:
        name = str(_section(svc, "metadata").get("name") or "")
        code, buf = client.list_instances(name)
        if code != 200:
            raise StatusError(f"cannot get the instance list, because get the http code: {code}", code)
        instances = _decode(buf, list)

        if self.output:
            merged = merge_instances(svc, instances)
            output_raw(json.dumps(merged, separators=(",", ":")), self.output)
            return

        phase = service_phase(svc)
        for ins in instances:
            if self.instance_name and ins.get("Name") != self.instance_name:
                continue
            self.rows.append(instance_row(ins, name, phase))


def get_service(
    service_name: str = typer.Argument("", help="Service name; omit to list all services."),
    output: str = flags.OUTPUT.option(),
    cluster: str = flags.CLUSTER.option(),
    all_result: bool = flags.ALL.option(),
):
    """
    Query one or many Cloud Native Services.
    """
    run_operation(
        GetServiceOperation(service_name=service_name, cluster=cluster, output=output, all_result=all_result)
    )


def get_instance(
    instance_name: str = typer.Argument("", help="Instance name; omit to list all instances of the service."),
    service: str = flags.SERVICE.option(),
    namespace: str = flags.NAMESPACE.option(),
    cluster: str = flags.CLUSTER.option(),
    output: str = flags.OUTPUT.option(),
    all_result: bool = flags.ALL.option(),
):
    """
    Query instances of a Cloud Native Service.
    """
    run_operation(
        GetInstanceOperation(
            instance_name=instance_name,
            service_name=service,
            namespace=namespace,
            cluster=cluster,
            output=output,
            all_result=all_result,
        )
    )


app.command("service")(get_service)
app.command("services", hidden=True)(get_service)
app.command("svc", hidden=True)(get_service)
app.command("instance")(get_instance)
app.command("instances", hidden=True)(get_instance)
