from __future__ import annotations

import base64
import os
from dataclasses import dataclass

from .. import console, flags
from ..config import AppConfig, save_config
from ..errors import ConfigError, InputError
from ..operation import run_operation
from ..validation import valid_port


def read_file_to_base64(path: str) -> str:
    if not path:
        return ""
    abs_path = os.path.abspath(path)
    try:
        with open(abs_path, "rb") as f:
            return base64.b64encode(f.read()).decode("ascii")
    except OSError as e:
        raise ConfigError(f"read file {abs_path}: {e}", abs_path) from e


@dataclass
class ConfigOperation:
    manager_ip: str = ""
    manager_https_port: str = ""
    cert_file: str = ""
    key_file: str = ""
    ca_file: str = ""
    skip_verify: bool = False

    def clean_space_characters(self) -> None:
        self.manager_ip = self.manager_ip.strip()
        self.manager_https_port = self.manager_https_port.strip()
        self.cert_file = self.cert_file.strip()
        self.key_file = self.key_file.strip()

    def is_valid(self) -> bool:
        return bool(self.manager_ip) and valid_port(self.manager_https_port)

    def build_config(self) -> AppConfig:
        return AppConfig(
            manager_https_server=f"https://{self.manager_ip}:{self.manager_https_port}",
            manager_client_certificate_data=read_file_to_base64(self.cert_file),
            manager_client_key_data=read_file_to_base64(self.key_file),
            manager_ca=read_file_to_base64(self.ca_file),
            manager_skip_verify=self.skip_verify,
        )

    def pre_run(self) -> None:
        self.clean_space_characters()
        if not self.is_valid():
            raise InputError(
                f"the parameter is invalid: --{flags.MANAGER_ADDR.flag_name} is required "
                f"and --{flags.MANAGER_HTTPS_PORT.flag_name} must be a port in [0, 65535]"
            )

    def run(self) -> None:
        path = save_config(self.build_config())
        console.ok(f"config written: {path}")


def config(
    manager_addr: str = flags.MANAGER_ADDR.option(),
    manager_https_port: str = flags.MANAGER_HTTPS_PORT.option(),
    manager_client_cert: str = flags.MANAGER_CLIENT_CERT.option(),
    manager_client_key: str = flags.MANAGER_CLIENT_KEY.option(),
    manager_ca: str = flags.MANAGER_CA.option(),
    manager_skip_verify: bool = flags.MANAGER_SKIP_VERIFY.option(),
):
    """
    Config kappctl with Kappital-Manager.
    """
    run_operation(
        ConfigOperation(
            manager_ip=manager_addr,
            manager_https_port=manager_https_port,
            cert_file=manager_client_cert,
            key_file=manager_client_key,
            ca_file=manager_ca,
            skip_verify=manager_skip_verify,
        )
    )
