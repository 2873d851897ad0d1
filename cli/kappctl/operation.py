from __future__ import annotations

import logging
from typing import Protocol

import typer
from kappital_client import KappitalClientError

from . import console
from .errors import KappctlError

log = logging.getLogger(__name__)


class Operation(Protocol):
    def pre_run(self) -> None: ...

    def run(self) -> None: ...


def run_operation(op: Operation) -> None:
    """Run a command operation, turning failures into an error line and exit code."""
    try:
        op.pre_run()
        op.run()
    except KappctlError as exc:
        log.debug("%s failed", type(op).__name__, exc_info=True)
        console.err(str(exc))
        raise typer.Exit(code=exc.exit_code)
    except KappitalClientError as exc:
        log.debug("%s failed", type(op).__name__, exc_info=True)
        console.err(str(exc))
        raise typer.Exit(code=1)
