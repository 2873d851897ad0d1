from __future__ import annotations

from dataclasses import dataclass

import typer
from kappital_client import NetworkError

from .. import console, flags
from ..config import AppConfig, load_config
from ..errors import KappctlError, StatusError
from ..http import make_client
from ..operation import run_operation
from ..validation import validate_inputs

app = typer.Typer(help="Delete Kappital resources.")


def _check_delete(what: str, name: str, code: int, buf: bytes) -> None:
    if code != 200:
        detail = buf.decode("utf-8", errors="replace")
        raise StatusError(f"delete {what} {name} failed, statusCode: {code}, detail: {detail}", code, detail)


@dataclass
class DeleteServiceOperation:
    service_name: str
    cluster: str = flags.DEFAULT_CLUSTER
    config: AppConfig | None = None

    def arguments(self) -> dict[str, str | bool]:
        return {
            flags.SERVICE.flag_name: self.service_name,
            flags.CLUSTER.flag_name: self.cluster,
        }

    def pre_run(self) -> None:
        self.config = load_config()
        validate_inputs(self.arguments())

    def run(self) -> None:
        client = make_client(self.config)
        try:
            code, buf = client.delete_service(self.service_name, self.cluster)
        except NetworkError as e:
            raise KappctlError(f"delete service {self.service_name} failed, err: {e}") from e
        _check_delete("service", self.service_name, code, buf)
        console.ok(f"delete service {self.service_name} success.")


@dataclass
class DeleteInstanceOperation:
    instance_name: str
    service_name: str
    cluster: str = flags.DEFAULT_CLUSTER
    config: AppConfig | None = None

    def arguments(self) -> dict[str, str | bool]:
        return {
            flags.SERVICE.flag_name: self.service_name,
            flags.INSTANCE.flag_name: self.instance_name,
            flags.CLUSTER.flag_name: self.cluster,
        }

    def pre_run(self) -> None:
        self.config = load_config()
        validate_inputs(self.arguments())

    def run(self) -> None:
        client = make_client(self.config)
        try:
            code, buf = client.delete_instance(self.service_name, self.instance_name, self.cluster)
        except NetworkError as e:
            raise KappctlError(f"delete service instance {self.instance_name} failed, err: {e}") from e
        _check_delete("service instance", self.instance_name, code, buf)
        console.ok(f"delete service instance {self.instance_name} success.")


@app.command("service")
def delete_service(
    service_name: str = typer.Argument(..., help="Service name."),
    cluster: str = flags.CLUSTER.option(),
):
    """
    Delete a Cloud Native Service in a cluster.
    """
    run_operation(DeleteServiceOperation(service_name=service_name, cluster=cluster))


@app.command("instance")
def delete_instance(
    instance_name: str = typer.Argument(..., help="Instance name."),
    cluster: str = flags.CLUSTER.option(),
    service: str = flags.SERVICE.option(required=True),
):
    """
    Delete a Cloud Native Service Instance in a cluster.
    """
    run_operation(DeleteInstanceOperation(instance_name=instance_name, service_name=service, cluster=cluster))
