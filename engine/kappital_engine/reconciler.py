from __future__ import annotations

import base64
import json
import logging
from typing import Any, Mapping

import kopf

from .status import ServicePackage

log = logging.getLogger(__name__)

GROUP = "core.kappital.io"
VERSION = "v1alpha1"
PLURAL = "servicepackages"
SYSTEM_NAMESPACE = "kappital-system"


def decode_resources(encoded: str) -> dict[str, Any]:
    """Decode the base64 JSON bundle of sub-resources carried in ``spec.resources``."""
    resources = json.loads(base64.b64decode(encoded.replace("\r", "").replace("\n", ""), validate=True))
    if resources is None:
        return {}
    if not isinstance(resources, dict):
        raise ValueError(f"resources must be a JSON object, got {type(resources).__name__}")
    return resources


def reconcile(body: Mapping[str, Any], namespace: str | None) -> dict[str, Any] | None:
    """Return the status to write for ``body``, or None when nothing is to be done.

    Workloads named in the resource bundle are applied and watched by their own
    controllers; here the bundle only has to decode for the package to settle.
    """
    if namespace != SYSTEM_NAMESPACE:
        log.warning(
            "engine only accepts the custom resource with namespace *%s*, but the current namespace is %s.",
            SYSTEM_NAMESPACE,
            namespace or "",
        )
        return None
    pack = ServicePackage.from_body(body)
    # deleted packages wait for the manager to collect them
    if pack.is_deleted():
        return None
    pack.verify_status()

    err = None
    try:
        decode_resources(pack.resources)
    except ValueError as e:
        log.error("cannot analysis the resources of service package %s, err: %s", pack.name, e)
        err = e
    pack.update_status(err)
    return pack.status.to_dict()


@kopf.on.resume(GROUP, VERSION, PLURAL)
@kopf.on.create(GROUP, VERSION, PLURAL)
@kopf.on.update(GROUP, VERSION, PLURAL)
def reconcile_service_package(body, namespace, name, patch, logger, **_kwargs):  # type: ignore
    status = reconcile(body, namespace)
    if status is None:
        return
    logger.info("service package %s is %s", name, status["phase"])
    patch.status.update(status)
