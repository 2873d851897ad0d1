from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any

import typer
import yaml
from kappital_client import NetworkError

from .. import console, flags
from ..config import AppConfig, load_config
from ..errors import DecodeError, InputError, KappctlError, PackageError, StatusError
from ..http import make_client
from ..operation import run_operation
from ..package import load_package
from ..validation import validate_inputs

app = typer.Typer(help="Create Kappital resources from a package or a file.")

DEFAULT_CLUSTER_ID = flags.DEFAULT_CLUSTER
_CR_KEYS = ("apiVersion", "kind", "metadata", "spec")


def _check_deploy(name: str, code: int, buf: bytes) -> None:
    if code != 200:
        detail = buf.decode("utf-8", errors="replace")
        raise StatusError(f"deploy service {name} failed, statusCode: {code}, detail: {detail}", code, detail)


def default_custom_resource(csd_spec: dict[str, Any]) -> dict[str, Any]:
    """Build the sample custom resource declared by the first CR version of a CSD."""
    crd_spec = (csd_spec.get("CRD") or {}).get("spec") or {}
    group = crd_spec.get("group")
    kind = (crd_spec.get("names") or {}).get("kind")
    versions = csd_spec.get("CRVersions") or []
    if not isinstance(group, str) or not isinstance(kind, str) or not versions:
        return {}

    first = versions[0]
    cr: dict[str, Any] = {
        "kind": kind,
        "apiVersion": f"{group}/{first.get('name') or ''}",
        "metadata": {"name": first.get("CRName") or ""},
    }
    values = first.get("defaultValues") or ""
    if values:
        try:
            cr["spec"] = json.loads(values)
        except ValueError as e:
            raise PackageError(f"the default values of {kind} is not valid JSON, err: {e}") from e
    return cr


def read_custom_resources(path: str) -> list[dict[str, Any]]:
    """Read every custom resource of a multi-document YAML or JSON file."""
    try:
        with open(os.path.abspath(path), "rb") as f:
            raw = f.read()
    except OSError as e:
        raise InputError(f"read cr file failed, err: {e}") from e
    try:
        docs = list(yaml.safe_load_all(raw))
    except yaml.YAMLError as e:
        raise DecodeError(f"cannot decode the cr file {path}, err: {e}") from e

    crs = []
    for doc in docs:
        if doc is None:
            continue
        if not isinstance(doc, dict):
            raise DecodeError(f"cannot decode the cr file {path}, err: every document must be a mapping")
        crs.append(json.loads(json.dumps({k: doc[k] for k in _CR_KEYS if k in doc}, default=str)))
    return crs


@dataclass
class CreateServiceOperation:
    package_dir: str
    config: AppConfig | None = None
    service: dict[str, Any] = field(default_factory=dict)

    def pre_run(self) -> None:
        self.service = load_package(self.package_dir)
        self.config = load_config()

    def run(self) -> None:
        name = self.service["metadata"]["name"]
        body = {
            "instanceName": self.service["spec"]["description"]["name"],
            "clusterID": DEFAULT_CLUSTER_ID,
            "service": self.service,
        }
        client = make_client(self.config)
        try:
            code, buf = client.deploy_service(body)
        except NetworkError as e:
            raise KappctlError(f"deploy service {name} failed, err: {e}") from e
        _check_deploy(name, code, buf)

        try:
            result = json.loads(buf)
        except ValueError as e:
            raise DecodeError(f"json Unmarshal response {buf.decode('utf-8', errors='replace')} failed, err: {e}") from e
        service_id = result.get("ID", "") if isinstance(result, dict) else ""
        console.ok(f"deploy service {name} success.")
        console.raw(f"{{'service_name': {name}, 'service_id': {service_id}}}")


@dataclass
class CreateInstanceOperation:
    service_name: str = ""
    package_dir: str = ""
    resource_path: str = ""
    config: AppConfig | None = None
    service: dict[str, Any] | None = None

    def pre_run(self) -> None:
        self.config = load_config()
        if self.service_name:
            validate_inputs({flags.SERVICE.flag_name: self.service_name})
            return
        if not self.package_dir:
            raise InputError("service name and package path must have one parameter")
        self.service = load_package(self.package_dir)
        self.service_name = self.service["metadata"]["name"]

    def custom_resources(self) -> list[dict[str, Any]]:
        if self.resource_path:
            return read_custom_resources(self.resource_path)
        if self.service is None:
            raise InputError(
                "cannot deploy instance without service package, err: only pass in the instance "
                "name, but does not have the resource file"
            )
        return [default_custom_resource(csd.get("spec") or {}) for csd in self.service["spec"]["manifests"]]

    def run(self) -> None:
        body: dict[str, Any] = {"clusterID": DEFAULT_CLUSTER_ID}
        if self.service is not None:
            body["service"] = self.service
        crs = self.custom_resources()
        if crs:
            body["instanceCustomResources"] = crs

        client = make_client(self.config)
        try:
            code, buf = client.deploy_instance(self.service_name, DEFAULT_CLUSTER_ID, body)
        except NetworkError as e:
            raise KappctlError(f"deploy service {self.service_name} failed, err: {e}") from e
        _check_deploy(self.service_name, code, buf)
        console.ok(f"deploy service {self.service_name} success.")


@app.command("service")
def create_service(
    package_dir: str = typer.Argument(..., help="Cloud Native Package directory path."),
):
    """
    Use a Kappital package to create a Cloud Native Service in a cluster.
    """
    run_operation(CreateServiceOperation(package_dir=package_dir))


@app.command("instance")
def create_instance(
    service_name: str = typer.Argument("", help="Service name.", show_default=False),
    file: str = flags.FILE.option(),
    dir_path: str = flags.DIR.option(),
):
    """
    Install an instance of a specific Cloud Native Service.
    """
    run_operation(CreateInstanceOperation(service_name=service_name, package_dir=dir_path, resource_path=file))
