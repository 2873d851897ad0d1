from __future__ import annotations

import typer
from kappital_client.logging_ import setup_logging

from .commands import config_cmd, init_cmd
from .commands.create_cmd import app as create_app
from .commands.delete_cmd import app as delete_app
from .commands.get_cmd import app as get_app


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="kappctl",
        help="kappctl controls the Kappital manager.",
        no_args_is_help=True,
        add_completion=False,
    )

    app.command("config")(config_cmd.config)
    app.command("init")(init_cmd.init)
    app.add_typer(get_app, name="get")
    app.add_typer(delete_app, name="delete")
    app.add_typer(create_app, name="create")

    @app.callback()
    def _main(
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
    ):
        setup_logging(verbose)

    return app


app = _build_app()
