"""Flat records rendered by ``kappctl get`` tables, one column per field."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Repository:
    Name: str = ""
    Public: str = ""
    ServiceCount: str = ""
    Created: str = ""


@dataclass
class Service:
    Name: str = ""
    Cluster: str = ""
    Namespace: str = ""
    Phase: str = ""
    Message: str = ""
    Created: str = ""


@dataclass
class Instance:
    InstanceName: str = ""
    Namespace: str = ""
    ServiceName: str = ""
    ClusterName: str = ""
    Status: str = ""
    Created: str = ""


@dataclass
class Package:
    Repository: str = ""
    Name: str = ""
    Type: str = ""
    Created: str = ""


@dataclass
class Version:
    Repository: str = ""
    Name: str = ""
    Type: str = ""
    Version: str = ""
    Keywords: str = ""
    Status: str = ""
    Created: str = ""
