from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import typer

DEFAULT_CLUSTER = "default"
DEFAULT_NAMESPACE = "default"


@dataclass(frozen=True)
class InputFlag:
    name: str
    short: str
    default: str | bool
    usage: str

    @property
    def flag_name(self) -> str:
        return self.name

    def option(self, *, required: bool = False) -> Any:
        decls = [f"--{self.name}"]
        if self.short:
            decls.append(f"-{self.short}")
        default = ... if required else self.default
        return typer.Option(default, *decls, help=self.usage, show_default=bool(self.default) and not required)


MANAGER_ADDR = InputFlag("manager-addr", "", "", "the ip Addr of kappital-manager")
MANAGER_HTTPS_PORT = InputFlag("manager-https-port", "", "", "the HTTPS Port of kappital-manager")
MANAGER_CLIENT_CERT = InputFlag("manager-client-cert", "", "", "the HTTPS client certificate file of kappital-manager")
MANAGER_CLIENT_KEY = InputFlag("manager-client-key", "", "", "the HTTPS client key file of kappital-manager")
MANAGER_CA = InputFlag("manager-ca", "", "", "the HTTPS ca file for kappital-manager")
MANAGER_SKIP_VERIFY = InputFlag("manager-skip-verify", "", False, "connect to kappital-manager need to skip verify")
OUTPUT = InputFlag("output", "o", "", "the output format of the queried resource, can be yaml or json")
CLUSTER = InputFlag("cluster", "c", DEFAULT_CLUSTER, "the cluster scope of the Cloud Native Service")
ALL = InputFlag(
    "all",
    "A",
    False,
    "query resources across all repos/clusters. When this flag is set, --repo or --cluster flag has no effect",
)
NAMESPACE = InputFlag("namespace", "n", DEFAULT_NAMESPACE, "the namespace of the specified instance")
SERVICE = InputFlag("service", "s", "", "the cloud native service name")
INSTANCE = InputFlag("instance", "i", "", "the cloud native service instance name")
FILE = InputFlag("file", "f", "", "the custom resource file path")
NAME = InputFlag("name", "", "kappital-demo", "the kappital package name")
VERSION = InputFlag("version", "v", "0.1.0", "the kappital package version")
DIR = InputFlag("dir", "d", "", "the Cloud Native Package Path")
