from __future__ import annotations

import io
import json
import ssl

import httpx
import pytest

from kappital_client import (
    BodyTypeError,
    KappitalClient,
    ManagerConfig,
    NetworkError,
    RequestBuildError,
    RequestInfo,
    TLSMaterialError,
    execute,
)
from kappital_client import urls
from kappital_client.tls import client_ssl_context, decode_pem
from kappital_client.transport import build_request


class _Recorder:
    def __init__(self, status: int = 200, body: bytes = b"{}"):
        self.status = status
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, content=self.body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def test_execute_returns_status_and_body_verbatim() -> None:
    rec = _Recorder(status=500, body=b"boom")
    code, body = execute(RequestInfo(method="GET", path="http://manager.test/x"), transport=rec.transport())
    assert (code, body) == (500, b"boom")
    assert len(rec.requests) == 1


def test_execute_encodes_json_body() -> None:
    rec = _Recorder()
    info = RequestInfo(method="POST", path="http://manager.test/x", body={"instanceName": "demo", "n": [1, 2]})
    execute(info, transport=rec.transport())
    assert json.loads(rec.requests[0].content) == {"instanceName": "demo", "n": [1, 2]}


def test_execute_sends_binary_buffers_as_is() -> None:
    rec = _Recorder()
    for body in (b"raw", bytearray(b"raw"), io.BytesIO(b"raw")):
        execute(RequestInfo(method="PUT", path="http://manager.test/f", body=body, is_file=True), transport=rec.transport())
    assert [r.content for r in rec.requests] == [b"raw", b"raw", b"raw"]


def test_execute_rejects_non_binary_file_body() -> None:
    rec = _Recorder()
    with pytest.raises(BodyTypeError, match="body must be binary buffer"):
        execute(RequestInfo(method="PUT", path="http://manager.test/f", body="text", is_file=True), transport=rec.transport())
    assert rec.requests == []


def test_execute_unencodable_json_body() -> None:
    with pytest.raises(RequestBuildError):
        execute(RequestInfo(method="POST", path="http://manager.test/x", body={"s": {1, 2}}), transport=_Recorder().transport())


def test_header_setter_replaces_added_values() -> None:
    request = build_request(
        RequestInfo(
            method="GET",
            path="http://manager.test/x",
            header_adder={"X-Trace": "a", "Accept": "application/json"},
            header_setter={"X-Trace": "b"},
        )
    )
    assert request.headers.get_list("X-Trace") == ["b"]
    assert request.headers["Accept"] == "application/json"


def test_build_request_invalid_url() -> None:
    with pytest.raises(RequestBuildError):
        build_request(RequestInfo(method="GET", path="http://manager.test:port/x"))


def test_transport_failure_is_network_error() -> None:
    def _fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(NetworkError, match="perform request failed"):
        execute(RequestInfo(method="GET", path="http://manager.test/x"), transport=httpx.MockTransport(_fail))


def test_client_ssl_context_loads_material(tls_material) -> None:
    ctx = client_ssl_context(tls_material["ca"], tls_material["cert"], tls_material["key"], skip_verify=False)
    assert ctx.verify_mode == ssl.CERT_REQUIRED
    assert ctx.check_hostname is True


def test_client_ssl_context_skip_verify_with_ca(tls_material) -> None:
    ctx = client_ssl_context(tls_material["ca"], tls_material["cert"], tls_material["key"], skip_verify=True)
    assert ctx.verify_mode == ssl.CERT_NONE
    assert ctx.check_hostname is False


def _wrap76(data: str) -> str:
    return "\r\n".join(data[i : i + 76] for i in range(0, len(data), 76))


def test_client_ssl_context_accepts_line_wrapped_base64(tls_material) -> None:
    ctx = client_ssl_context(
        _wrap76(tls_material["ca"]), _wrap76(tls_material["cert"]), _wrap76(tls_material["key"]), skip_verify=False
    )
    assert ctx.verify_mode == ssl.CERT_REQUIRED


def test_decode_pem_rejects_embedded_spaces() -> None:
    with pytest.raises(TLSMaterialError, match="manager ca"):
        decode_pem("bm90IG Eg", "manager ca")


def test_client_ssl_context_mismatched_key(tls_material) -> None:
    with pytest.raises(TLSMaterialError):
        client_ssl_context(tls_material["ca"], tls_material["cert"], tls_material["other_key"], skip_verify=False)


def test_client_ssl_context_bad_ca(tls_material) -> None:
    with pytest.raises(TLSMaterialError):
        client_ssl_context("bm90IGEgY2VydA==", tls_material["cert"], tls_material["key"], skip_verify=False)


def test_undecodable_client_cert_fails_before_request(tls_material) -> None:
    rec = _Recorder()
    cfg = ManagerConfig(
        base_url="https://manager.test:8443",
        client_cert_data="%%not-base64%%",
        client_key_data=tls_material["key"],
        ca_data=tls_material["ca"],
    )
    with pytest.raises(TLSMaterialError, match="client certificate"):
        KappitalClient(cfg, transport=rec.transport()).list_services("default")
    assert rec.requests == []


def test_fill_template_checks_arity() -> None:
    assert urls.fill_template("%v/a/%v", "x", 1) == "x/a/1"
    with pytest.raises(ValueError):
        urls.fill_template("%v/a/%v", "x")


def test_client_urls() -> None:
    rec = _Recorder()
    client = KappitalClient(ManagerConfig(base_url="http://m:1"), transport=rec.transport())

    client.get_service("svc", "prod-1")
    client.list_services("default")
    client.list_instances("svc")
    client.delete_service("svc", "prod-1")
    client.delete_instance("svc", "inst", "prod-1")
    client.deploy_service({"a": 1})
    client.deploy_instance("svc", "default", {"a": 1})

    got = [(r.method, str(r.url)) for r in rec.requests]
    assert got == [
        ("GET", "http://m:1/api/v1alpha1/servicebinding/svc?cluster_name=prod-1&detail=true"),
        ("GET", "http://m:1/api/v1alpha1/servicebinding?cluster_name=default"),
        ("GET", "http://m:1/api/v1alpha1/servicebinding/svc/instance"),
        ("DELETE", "http://m:1/api/v1alpha1/servicebinding/svc?cluster_name=prod-1"),
        ("DELETE", "http://m:1/api/v1alpha1/servicebinding/svc/instance/inst?cluster_name=prod-1"),
        ("POST", "http://m:1/api/v1alpha1/servicebinding"),
        ("POST", "http://m:1/api/v1alpha1/servicebinding/svc/instance?cluster_name=default"),
    ]
