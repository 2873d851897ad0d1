from __future__ import annotations


class KappctlError(Exception):
    """Base kappctl error; the message is shown to the user as-is."""

    exit_code = 1


class InputError(KappctlError):
    """An argument failed validation."""


class ConfigError(KappctlError):
    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class StatusError(KappctlError):
    def __init__(self, message: str, status_code: int, detail: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class DecodeError(KappctlError):
    """A manager response did not have the expected shape."""


class ScaffoldError(KappctlError):
    """Creating the package scaffold failed."""


class PackageError(KappctlError):
    """A Cloud Native Package directory could not be loaded."""
