from __future__ import annotations

import platform
import sys
from dataclasses import dataclass
from importlib import metadata

SERVICE_NAME_ENGINE = "kappital-engine"
VERSION_FLAGS = frozenset({"version", "--version", "-v"})

DIST_NAME = "kappital"
DEFAULT_VERSION = "v0.0.0-master"

# filled at build time
GIT_COMMIT = "unknown"
GIT_TREE_STATE = "unknown"
BUILD_DATE = "unknown"


@dataclass(frozen=True)
class VersionInfo:
    service_name: str
    version: str
    git_commit: str
    git_tree_state: str
    build_date: str
    python_version: str
    implementation: str
    platform: str


def package_version() -> str:
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return DEFAULT_VERSION


def get(service_name: str = SERVICE_NAME_ENGINE) -> VersionInfo:
    return VersionInfo(
        service_name=service_name,
        version=package_version(),
        git_commit=GIT_COMMIT,
        git_tree_state=GIT_TREE_STATE,
        build_date=BUILD_DATE,
        python_version=platform.python_version(),
        implementation=sys.implementation.name,
        platform=f"{sys.platform}/{platform.machine()}",
    )


def is_version_flag(arg: str) -> bool:
    return arg in VERSION_FLAGS
