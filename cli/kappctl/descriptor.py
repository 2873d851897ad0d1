"""Textual descriptor of a Cloud Native Service (the package ``metadata.yaml``)."""
from __future__ import annotations

import json
from typing import Any

import yaml

DEFAULT_VERSION = "latest"
DEFAULT_SOURCE = "OpenSource"
SERVICE_TYPES = frozenset({"operator", "helm"})
MAX_STRING_LEN = 64

# serialized key order; every field is dropped when empty except the two objects
_STRING_KEYS = ("name", "version", "type", "briefDescription", "detail")
_LIST_KEYS = (
    "maintainers",
    "industries",
    "links",
    "keywords",
    "architecture",
    "capabilities",
    "categories",
    "devices",
    "scenes",
)
_OBJECT_KEYS = {
    "logo": ("base64data", "mediaType"),
    "provider": ("name", "url"),
}
_ITEM_KEYS = {
    "maintainers": ("name", "email"),
    "links": ("name", "url"),
}


def _pick(data: Any, keys: tuple[str, ...]) -> dict[str, str]:
    if not isinstance(data, dict):
        return {}
    return {k: str(data[k]) for k in keys if data.get(k)}


def normalize_descriptor(data: Any) -> dict[str, Any]:
    """Keep only known descriptor fields, in their canonical shape."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("descriptor must be a mapping")
    out: dict[str, Any] = {}
    for key in _STRING_KEYS:
        if data.get(key):
            out[key] = str(data[key])
    for key, sub_keys in _OBJECT_KEYS.items():
        out[key] = _pick(data.get(key), sub_keys)
    if data.get("source"):
        out["source"] = str(data["source"])
    for key in _LIST_KEYS:
        items = data.get(key)
        if not items or not isinstance(items, list):
            continue
        if key in _ITEM_KEYS:
            out[key] = [_pick(item, _ITEM_KEYS[key]) for item in items]
        else:
            out[key] = [str(item) for item in items]
    if data.get("minKubeVersion"):
        out["minKubeVersion"] = str(data["minKubeVersion"])
    return out


def validate_descriptor(desc: dict[str, Any]) -> list[str]:
    """Fill defaults in place and return the problems found, if any."""
    problems: list[str] = []
    name = desc.get("name") or ""
    if not name or len(name.encode("utf-8")) > MAX_STRING_LEN:
        problems.append(f"the Service Package NAME cannot be empty or longer than the {MAX_STRING_LEN} bytes")
    if not desc.get("version"):
        desc["version"] = DEFAULT_VERSION
    if len(desc["version"].encode("utf-8")) > MAX_STRING_LEN:
        problems.append(f"the Service Package VERSION cannot longer than the {MAX_STRING_LEN} bytes")
    if not desc.get("source"):
        desc["source"] = DEFAULT_SOURCE
    if desc.get("type") not in SERVICE_TYPES:
        problems.append("the service type is invalid")
    return problems


def rewrite_metadata(raw: bytes, name: str, version: str) -> bytes:
    """Set the descriptor name and re-serialize it through JSON into YAML.

    ``version`` is accepted for symmetry with the init flags but only the
    name is rewritten.
    """
    desc = normalize_descriptor(yaml.safe_load(raw))
    desc["name"] = name
    doc = json.loads(json.dumps(desc))
    return yaml.safe_dump(doc, sort_keys=True, allow_unicode=True, default_flow_style=False).encode("utf-8")
