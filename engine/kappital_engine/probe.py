"""HTTPS liveness/readiness endpoints served beside the controller."""
from __future__ import annotations

import logging
import socket
import ssl
import threading
from dataclasses import dataclass

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from kappital_client.tls import pem_files

from .netutil import split_host_port

log = logging.getLogger(__name__)

CIPHERS = ":".join(
    [
        "ECDHE-RSA-AES128-GCM-SHA256",
        "ECDHE-RSA-AES256-GCM-SHA384",
        "ECDHE-ECDSA-AES128-GCM-SHA256",
        "ECDHE-ECDSA-AES256-GCM-SHA384",
    ]
)
# idle connections waiting on the next request are closed after this
READ_HEADER_TIMEOUT = 120
STOP_TIMEOUT = 5.0

app = FastAPI(title="kappital-engine-probe", docs_url=None, redoc_url=None, openapi_url=None)


@app.get("/healthz", response_class=PlainTextResponse)
def healthz() -> PlainTextResponse:
    return PlainTextResponse("OK\n")


@app.get("/readyz", response_class=PlainTextResponse)
def readyz() -> PlainTextResponse:
    return PlainTextResponse("OK\n")


def probe_config(host: str, port: int, cert_pem: bytes, key_pem: bytes) -> uvicorn.Config:
    """Build a loaded uvicorn config whose TLS context holds the in-memory keypair."""
    with pem_files(cert_pem, key_pem) as (cert_path, key_path):
        config = uvicorn.Config(
            app,
            host=host,
            port=port,
            ssl_certfile=cert_path,
            ssl_keyfile=key_path,
            ssl_version=ssl.PROTOCOL_TLS_SERVER,
            ssl_ciphers=CIPHERS,
            timeout_keep_alive=READ_HEADER_TIMEOUT,
            log_config=None,
            access_log=False,
        )
        config.load()
    config.ssl.minimum_version = ssl.TLSVersion.TLSv1_2
    return config


@dataclass
class ProbeServer:
    server: uvicorn.Server
    sock: socket.socket
    thread: threading.Thread

    @property
    def port(self) -> int:
        return self.sock.getsockname()[1]

    def stop(self) -> None:
        self.server.should_exit = True
        self.thread.join(STOP_TIMEOUT)
        self.sock.close()


def start_probe_server(address: str, cert_pem: bytes, key_pem: bytes) -> ProbeServer:
    """Bind the probe listener and serve it from a daemon thread.

    Binding happens here, so an address that is already taken raises
    :class:`OSError` to the caller instead of failing inside the thread.
    """
    host, port = split_host_port(address)
    config = probe_config(host, port, cert_pem, key_pem)
    sock = socket.create_server((host, port))
    server = uvicorn.Server(config)
    thread = threading.Thread(target=server.run, kwargs={"sockets": [sock]}, name="probe-server", daemon=True)
    thread.start()
    log.info("health probe listening on https://%s", address)
    return ProbeServer(server=server, sock=sock, thread=thread)
