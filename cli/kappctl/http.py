from __future__ import annotations

from kappital_client import KappitalClient

from .config import AppConfig


def make_client(cfg: AppConfig) -> KappitalClient:
    return KappitalClient(cfg.manager())
