from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ManagerConfig:
    base_url: str
    client_cert_data: str = ""
    client_key_data: str = ""
    ca_data: str = ""
    skip_verify: bool = False


@dataclass
class RequestInfo:
    """One-shot description of a request to the manager.

    ``body`` is JSON-encoded unless ``is_file`` is set, in which case it must
    already be a binary buffer. The TLS fields carry base64-encoded PEM blobs.
    """

    method: str
    path: str
    body: Any = None
    is_file: bool = False
    header_adder: dict[str, str] = field(default_factory=dict)
    header_setter: dict[str, str] = field(default_factory=dict)
    ca_crt: str = ""
    client_crt: str = ""
    client_key: str = ""
    skip: bool = False

    @classmethod
    def for_manager(cls, cfg: ManagerConfig, method: str, path: str, **kwargs: Any) -> "RequestInfo":
        return cls(
            method=method,
            path=path,
            ca_crt=cfg.ca_data,
            client_crt=cfg.client_cert_data,
            client_key=cfg.client_key_data,
            skip=cfg.skip_verify,
            **kwargs,
        )
