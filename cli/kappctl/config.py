from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kappital_client import ManagerConfig
from kappital_client.urls import build_manager_url

from .errors import ConfigError

CONFIG_DIRNAME = ".kappital"
CONFIG_FILENAME = "config"
ENV_CONFIG_PATH = "KAPPITALCONFIG"

KEY_SERVER = "manager-https-server"
KEY_CLIENT_CERT = "manager-client-certificate-data"
KEY_CLIENT_KEY = "manager-client-key-data"
KEY_CA = "manager-ca"
KEY_SKIP_VERIFY = "manager-skip-verify"


@dataclass
class AppConfig:
    manager_https_server: str = ""
    manager_client_certificate_data: str = ""
    manager_client_key_data: str = ""
    manager_ca: str = ""
    manager_skip_verify: bool = False

    def build_manager_url(self, template: str, *args: Any) -> str:
        return build_manager_url(self.manager_https_server, template, *args)

    def manager(self) -> ManagerConfig:
        return ManagerConfig(
            base_url=self.manager_https_server,
            client_cert_data=self.manager_client_certificate_data,
            client_key_data=self.manager_client_key_data,
            ca_data=self.manager_ca,
            skip_verify=self.manager_skip_verify,
        )


def config_path() -> str:
    return str(Path.home() / CONFIG_DIRNAME / CONFIG_FILENAME)


def resolve_config_path() -> str:
    path = config_path()
    if os.path.exists(path):
        return path
    override = os.getenv(ENV_CONFIG_PATH, "")
    if not override:
        raise ConfigError("missing the kappctl config file", path)
    return override


def to_json(cfg: AppConfig) -> dict[str, Any]:
    # empty values are omitted so the file only carries what was configured
    data = {
        KEY_SERVER: cfg.manager_https_server,
        KEY_CLIENT_CERT: cfg.manager_client_certificate_data,
        KEY_CLIENT_KEY: cfg.manager_client_key_data,
        KEY_CA: cfg.manager_ca,
        KEY_SKIP_VERIFY: cfg.manager_skip_verify,
    }
    return {k: v for k, v in data.items() if v}


def from_json(data: Any) -> AppConfig:
    if not isinstance(data, dict):
        raise ValueError("config must be a JSON object")
    return AppConfig(
        manager_https_server=str(data.get(KEY_SERVER) or ""),
        manager_client_certificate_data=str(data.get(KEY_CLIENT_CERT) or ""),
        manager_client_key_data=str(data.get(KEY_CLIENT_KEY) or ""),
        manager_ca=str(data.get(KEY_CA) or ""),
        manager_skip_verify=bool(data.get(KEY_SKIP_VERIFY) or False),
    )


def load_config() -> AppConfig:
    path = resolve_config_path()
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as e:
        raise ConfigError(f"read config file {path}: {e}", path) from e
    try:
        return from_json(json.loads(raw))
    except ValueError as e:
        raise ConfigError(f"unmarshal config file {path}: {e}", path) from e


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    parent = os.path.dirname(path)
    try:
        os.makedirs(parent, mode=0o700, exist_ok=True)
        os.chmod(parent, 0o700)
    except OSError as e:
        raise ConfigError(f"create directory {parent} to store config file: {e}", parent) from e

    # replace rather than truncate, the file holds key material
    if os.path.lexists(path):
        try:
            os.remove(path)
        except OSError as e:
            raise ConfigError(f"cannot remove old config file {path}: {e}", path) from e

    data = json.dumps(to_json(cfg), separators=(",", ":")).encode("utf-8")
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(path, 0o600)
    except OSError as e:
        raise ConfigError(f"write data into file {path}: {e}", path) from e
    return path
