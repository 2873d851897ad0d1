from __future__ import annotations

from typing import Any

import httpx

from . import urls
from .config_types import ManagerConfig, RequestInfo
from .transport import execute


class KappitalClient:
    """Thin wrapper mapping manager endpoints to single requests.

    Every method returns ``(status, body)``; callers decide what a non-200
    status means.
    """

    def __init__(self, cfg: ManagerConfig, *, transport: httpx.BaseTransport | None = None):
        self._cfg = cfg
        self._transport = transport

    def _url(self, template: str, *args: Any) -> str:
        return urls.build_manager_url(self._cfg.base_url, template, *args)

    def _do(self, method: str, path: str, *, body: Any = None) -> tuple[int, bytes]:
        info = RequestInfo.for_manager(self._cfg, method, path, body=body)
        return execute(info, transport=self._transport)

    def deploy_service(self, body: Any) -> tuple[int, bytes]:
        return self._do("POST", self._url(urls.DEPLOY_SERVICE_URL), body=body)

    def deploy_instance(self, service_name: str, cluster: str, body: Any) -> tuple[int, bytes]:
        return self._do("POST", self._url(urls.DEPLOY_INSTANCE_URL, service_name, cluster), body=body)

    def get_service(self, service_name: str, cluster: str) -> tuple[int, bytes]:
        path = self._url(urls.GET_SERVICE_URL, f"/{service_name}", cluster) + urls.DETAIL_SUFFIX
        return self._do("GET", path)

    def list_services(self, cluster: str) -> tuple[int, bytes]:
        return self._do("GET", self._url(urls.GET_SERVICES_URL, cluster))

    def list_instances(self, service_name: str) -> tuple[int, bytes]:
        return self._do("GET", self._url(urls.GET_INSTANCES_URL, service_name))

    def delete_service(self, service_name: str, cluster: str) -> tuple[int, bytes]:
        return self._do("DELETE", self._url(urls.DELETE_SERVICE_URL, service_name, cluster))

    def delete_instance(self, service_name: str, instance_name: str, cluster: str) -> tuple[int, bytes]:
        return self._do("DELETE", self._url(urls.DELETE_INSTANCE_URL, service_name, instance_name, cluster))
