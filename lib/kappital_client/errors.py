from __future__ import annotations


class KappitalClientError(Exception):
    """Base client error."""


class RequestBuildError(KappitalClientError):
    """The request could not be constructed."""


class BodyTypeError(RequestBuildError):
    def __init__(self, got: type):
        super().__init__(f"body must be binary buffer, got {got.__name__}")
        self.got = got


class TLSMaterialError(KappitalClientError):
    """CA, client certificate or client key could not be used."""


class NetworkError(KappitalClientError):
    """Transport/network layer error."""
