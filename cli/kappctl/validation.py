from __future__ import annotations

import re
from typing import Mapping

from . import flags
from .errors import InputError

MAX_STRING_LENGTH = 64
MIN_PORT = 0
MAX_PORT = 65535

YAML_FORMAT = "yaml"
JSON_FORMAT = "json"
OUTPUT_FORMATS = frozenset({YAML_FORMAT, JSON_FORMAT, ""})

_FIRST_SEGMENT = re.compile(r"[A-Za-z][A-Za-z0-9]+")
_SEGMENT = re.compile(r"[A-Za-z0-9]+")
_DECIMAL = re.compile(r"[+-]?[0-9]+")


def validate_format(fmt: str) -> None:
    if fmt.lower() not in OUTPUT_FORMATS:
        raise InputError(f"output format [{fmt}] is not supported")


def valid_format(fmt: str) -> bool:
    return fmt.lower() in OUTPUT_FORMATS


def validate_cluster_name(name: str) -> None:
    """Empty means the default cluster; otherwise dash-separated segments."""
    if not name:
        return
    for i, segment in enumerate(name.split("-")):
        if not segment:
            raise InputError("cannot use empty string after '-'")
        pattern = _FIRST_SEGMENT if i == 0 else _SEGMENT
        if not pattern.fullmatch(segment):
            raise InputError("contain invalid character(s)")


def is_valid_cluster_name(name: str) -> bool:
    try:
        validate_cluster_name(name)
    except InputError:
        return False
    return True


def valid_port(port: str) -> bool:
    if not _DECIMAL.fullmatch(port):
        return False
    return MIN_PORT <= int(port) <= MAX_PORT


def validate_inputs(inputs: Mapping[str, str | bool]) -> None:
    """Check an argument bag keyed by flag name.

    Non-string values are ignored. Every string is capped at 64 bytes; the
    cluster and output flags carry extra rules.
    """
    for key, value in inputs.items():
        if not isinstance(value, str):
            continue
        if len(value.encode("utf-8")) > MAX_STRING_LENGTH:
            raise InputError(f"the argument [{key}] length is greater than the max length {MAX_STRING_LENGTH}")
        if key == flags.CLUSTER.flag_name:
            validate_cluster_name(value)
        elif key == flags.OUTPUT.flag_name:
            validate_format(value)
