from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable

import typer
import yaml

from .. import console, flags
from ..descriptor import rewrite_metadata
from ..errors import ScaffoldError
from ..operation import run_operation
from ..validation import validate_inputs

DEMO_NAME = "kappital-demo"
METADATA_FILE = "metadata.yaml"
MAX_DEPTH = 5
DIR_MODE = 0o750
FILE_MODE = 0o600


def scaffold_root() -> Traversable:
    return resources.files("kappctl") / "scaffold" / DEMO_NAME


@dataclass
class InitOperation:
    dir_path: str = "."
    name: str = str(flags.NAME.default)
    version: str = str(flags.VERSION.default)

    def arguments(self) -> dict[str, str | bool]:
        return {
            flags.NAME.flag_name: self.name,
            flags.VERSION.flag_name: self.version,
        }

    def pre_run(self) -> None:
        if not self.dir_path:
            self.dir_path = "."
        validate_inputs(self.arguments())

    def run(self) -> None:
        dest = os.path.normpath(os.path.join(os.path.abspath(self.dir_path), self.name))
        try:
            os.makedirs(dest, mode=DIR_MODE, exist_ok=True)
        except OSError as e:
            raise ScaffoldError(f"cannot create directory {dest}: {e}") from e
        self.create_package(scaffold_root(), dest, 0)
        console.ok(f"init service {self.name} package success.")

    def create_package(self, src: Traversable, dest: str, depth: int) -> None:
        if depth >= MAX_DEPTH:
            raise ScaffoldError("the directory is too deep")
        for entry in sorted(src.iterdir(), key=lambda e: e.name):
            if entry.is_dir():
                self.create_package(entry, os.path.join(dest, entry.name), depth + 1)
                continue
            self.create_file(entry, dest)

    def create_file(self, src: Traversable, dest_dir: str) -> None:
        data = src.read_bytes()
        if src.name == METADATA_FILE:
            try:
                data = rewrite_metadata(data, self.name, self.version)
            except (yaml.YAMLError, ValueError) as e:
                raise ScaffoldError(f"cannot rewrite {METADATA_FILE}: {e}") from e

        path = os.path.join(dest_dir, src.name)
        try:
            if not os.path.isdir(dest_dir):
                os.makedirs(dest_dir, mode=DIR_MODE, exist_ok=True)
                console.ok(f"create directory: {dest_dir}")
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError as e:
            raise ScaffoldError(f"cannot create the file {path}: {e}") from e
        console.ok(f"create file: {src.name}")


def init(
    dir_path: str = typer.Argument(".", help="Directory the package is created in."),
    name: str = flags.NAME.option(),
    version: str = flags.VERSION.option(),
):
    """
    Create a Kappital package scaffold from scratch.
    """
    run_operation(InitOperation(dir_path=dir_path, name=name, version=version))
