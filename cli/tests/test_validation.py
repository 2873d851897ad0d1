from __future__ import annotations

import pytest

from kappctl import validation
from kappctl.errors import InputError


@pytest.mark.parametrize(
    ("port", "expected"),
    [
        ("", False),
        ("-1", False),
        ("65536", False),
        ("65535", True),
        ("0", True),
        ("443", True),
        ("6553xx5", False),
        (" 443", False),
    ],
)
def test_valid_port(port: str, expected: bool) -> None:
    assert validation.valid_port(port) is expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("", True),
        ("1234", False),
        ("abc-", False),
        ("abc-1", True),
        ("abc-abc1abc", True),
        ("a`b/c?d=xfe", False),
        ("a", False),
        ("prod-1", True),
        ("ab--cd", False),
    ],
)
def test_is_valid_cluster_name(name: str, expected: bool) -> None:
    assert validation.is_valid_cluster_name(name) is expected


@pytest.mark.parametrize("fmt", ["yaml", "json", "", "YAML", "Json"])
def test_valid_format_accepts_whitelist(fmt: str) -> None:
    assert validation.valid_format(fmt)


@pytest.mark.parametrize("fmt", ["xml", "table", "yml"])
def test_valid_format_rejects_others(fmt: str) -> None:
    assert not validation.valid_format(fmt)
    with pytest.raises(InputError, match=r"output format \[.*\] is not supported"):
        validation.validate_format(fmt)


def test_validate_inputs_caps_every_string() -> None:
    with pytest.raises(InputError, match=r"\[service\]"):
        validation.validate_inputs({"service": "s" * 65})
    validation.validate_inputs({"service": "s" * 64})


def test_validate_inputs_counts_bytes() -> None:
    # 22 three-byte characters are 66 bytes
    with pytest.raises(InputError):
        validation.validate_inputs({"instance": "中" * 22})


def test_validate_inputs_dispatches_on_key() -> None:
    with pytest.raises(InputError):
        validation.validate_inputs({"cluster": "1234"})
    with pytest.raises(InputError):
        validation.validate_inputs({"output": "xml"})
    # the same values under other keys only face the length cap
    validation.validate_inputs({"service": "1234", "instance": "xml"})


def test_validate_inputs_ignores_non_strings() -> None:
    validation.validate_inputs({"all": True, "cluster": "default", "output": ""})
