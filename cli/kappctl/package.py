"""Load a Cloud Native Package directory into a ``CloudNativeService`` document.

A package is a directory holding a ``metadata.{yaml,yml,json}`` descriptor
plus two resource directories:

- ``manifests/`` with CustomResourceDefinitions and CustomServiceDefinitions
- ``operator/`` with the RBAC objects, ServiceAccounts and Deployments of the operator

Any other directory is skipped.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any

import yaml

from .descriptor import normalize_descriptor, validate_descriptor
from .errors import PackageError

log = logging.getLogger(__name__)

CNS_API_VERSION = "core.kappital.io/v1alpha1"
CNS_KIND = "CloudNativeService"

OPERATOR_DIR = "operator"
MANIFESTS_DIR = "manifests"

CLUSTER_ROLE_GVK = "rbac.authorization.k8s.io/v1/ClusterRole"
CLUSTER_ROLE_BINDING_GVK = "rbac.authorization.k8s.io/v1/ClusterRoleBinding"
DEPLOYMENT_GVK = "apps/v1/Deployment"
SERVICE_ACCOUNT_GVK = "v1/ServiceAccount"
CRD_V1_GVK = "apiextensions.k8s.io/v1/CustomResourceDefinition"
CRD_V1BETA1_GVK = "apiextensions.k8s.io/v1beta1/CustomResourceDefinition"
CSD_GVK = "core.kappital.io/v1alpha1/CustomServiceDefinition"

ACCEPTED_GVKS = {
    OPERATOR_DIR: frozenset({CLUSTER_ROLE_GVK, CLUSTER_ROLE_BINDING_GVK, DEPLOYMENT_GVK, SERVICE_ACCOUNT_GVK}),
    MANIFESTS_DIR: frozenset({CSD_GVK, CRD_V1_GVK, CRD_V1BETA1_GVK}),
}
METADATA_FILES = frozenset({"metadata.yaml", "metadata.yml", "metadata.json"})
RESOURCE_SUFFIXES = (".json", ".yaml", ".yml")

MAX_FILE_COUNT = 1024
MAX_DEPTH = 3
MAX_FILE_SIZE = 1024 * 1024
MAX_TOTAL_SIZE = 10 * 1024 * 1024

# GVK -> key under spec.operator
_OPERATOR_KEYS = {
    DEPLOYMENT_GVK: "deployments",
    SERVICE_ACCOUNT_GVK: "serviceAccounts",
    CLUSTER_ROLE_GVK: "clusterRoles",
    CLUSTER_ROLE_BINDING_GVK: "clusterRoleBindings",
}


class _TooDeep(Exception):
    pass


@dataclass
class PackageLoader:
    root: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    operator: dict[str, list[dict[str, Any]]] = field(
        default_factory=lambda: {key: [] for key in _OPERATOR_KEYS.values()}
    )
    crds: list[dict[str, Any]] = field(default_factory=list)
    csds: list[dict[str, Any]] = field(default_factory=list)
    file_count: int = 0
    total_size: int = 0

    def load(self, path: str) -> dict[str, Any]:
        self.root = os.path.abspath(os.path.normpath(path))
        try:
            entries = sorted(os.listdir(self.root))
        except OSError as e:
            raise PackageError(f"unable to read package {path}, err: {e}") from e

        for name in entries:
            full = os.path.join(self.root, name)
            if os.path.isdir(full):
                if name not in ACCEPTED_GVKS:
                    log.warning("skip the %s dir of package %s, it is not a resource directory", name, path)
                    continue
                self._load_dir(full, 2, ACCEPTED_GVKS[name])
            elif name in METADATA_FILES:
                self._load_metadata(full)
        if not self.metadata:
            raise PackageError(f"the package {path} has no metadata file")
        return self._service()

    def _read(self, path: str) -> bytes:
        if self.file_count + 1 > MAX_FILE_COUNT:
            raise PackageError(f"the file count is over the max file count {MAX_FILE_COUNT}")
        try:
            with open(path, "rb") as f:
                raw = f.read(MAX_FILE_SIZE + 1)
        except OSError as e:
            raise PackageError(f"error reading file {path}, err: {e}") from e
        if len(raw) > MAX_FILE_SIZE or self.total_size + len(raw) > MAX_TOTAL_SIZE:
            raise PackageError(
                f"the file size is over the max file size {MAX_FILE_SIZE} or total file size {MAX_TOTAL_SIZE}"
            )
        self.file_count += 1
        self.total_size += len(raw)
        log.info("convert file %s", path)
        return raw

    def _load_metadata(self, path: str) -> None:
        raw = self._read(path)
        try:
            desc = normalize_descriptor(yaml.safe_load(raw))
        except (yaml.YAMLError, ValueError) as e:
            raise PackageError(f"cannot decode the metadata file, err: {e}") from e
        problems = validate_descriptor(desc)
        if problems:
            for problem in problems:
                log.error("%s", problem)
            raise PackageError("invalid metadata file content")
        self.metadata = desc

    def _load_dir(self, path: str, depth: int, accepted: frozenset[str]) -> None:
        if depth > MAX_DEPTH:
            raise _TooDeep(path)
        try:
            entries = sorted(os.listdir(path))
        except OSError as e:
            raise PackageError(f"unable to read package {path}, err: {e}") from e
        for name in entries:
            full = os.path.join(path, name)
            if os.path.isdir(full):
                try:
                    self._load_dir(full, depth + 1, accepted)
                except _TooDeep:
                    log.warning("the directory depth is over the max deep level %d, skip %s", MAX_DEPTH, full)
                continue
            if depth + 1 > MAX_DEPTH:
                raise _TooDeep(full)
            self._load_file(full, accepted)

    def _load_file(self, path: str, accepted: frozenset[str]) -> None:
        if not path.lower().endswith(RESOURCE_SUFFIXES):
            raise PackageError(f"the file type of {path} is not accepted")
        raw = self._read(path)
        try:
            docs = [doc for doc in yaml.safe_load_all(raw) if doc is not None]
        except yaml.YAMLError as e:
            raise PackageError(f"error decoding GVK in file {path}: {e}") from e

        for doc in docs:
            if not isinstance(doc, dict) or not doc.get("apiVersion") or not doc.get("kind"):
                raise PackageError(f"{path} is invalid, GVK should be provided")
            gvk = f"{doc['apiVersion']}/{doc['kind']}"
            if gvk not in accepted:
                raise PackageError(f"current GVK {gvk} cannot accept to resolution")
            self._collect(gvk, doc)

    def _collect(self, gvk: str, doc: dict[str, Any]) -> None:
        # YAML timestamps and similar scalars must survive as JSON strings
        doc = json.loads(json.dumps(doc, default=str))
        if gvk in (CRD_V1_GVK, CRD_V1BETA1_GVK):
            self.crds.append(doc)
        elif gvk == CSD_GVK:
            self.csds.append(doc)
        else:
            self.operator[_OPERATOR_KEYS[gvk]].append(doc)

    def _service(self) -> dict[str, Any]:
        by_name = {}
        for crd in self.crds:
            name = (crd.get("metadata") or {}).get("name")
            by_name.setdefault(name, crd)

        manifests = []
        for csd in self.csds:
            spec = dict(csd.get("spec") or {})
            crd_name = spec.get("CRDName") or ""
            if crd_name not in by_name:
                raise PackageError(f"cannot find the crd to the csd {crd_name}")
            spec["CRD"] = by_name[crd_name]
            manifests.append({**csd, "spec": spec})

        name = self.metadata.get("name", "")
        return {
            "apiVersion": CNS_API_VERSION,
            "kind": CNS_KIND,
            "metadata": {"name": name},
            "spec": {
                "operator": self.operator,
                "description": self.metadata,
                "manifests": manifests,
                "version": self.metadata.get("version", ""),
            },
        }


def load_package(path: str) -> dict[str, Any]:
    """Read a package directory; raises :class:`PackageError` on any problem."""
    return PackageLoader().load(path)
