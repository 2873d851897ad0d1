from __future__ import annotations

import logging
import sys

import kopf
import typer
from kappital_client.logging_ import SERVER_FORMAT, setup_logging

from . import reconciler, version
from .certs import self_signed_cert
from .netutil import NoLocalAddressError, get_local_ip, replace_ip
from .probe import start_probe_server

log = logging.getLogger("kappital_engine")

LEADER_ELECTION_ID = "83317d75.kappital.io"
DEFAULT_PROBE_ADDR = ":8081"


def fatal(msg: str, *args) -> None:
    log.critical(msg, *args)
    sys.exit(1)


def run(
    health_probe_bind_address: str = typer.Option(
        DEFAULT_PROBE_ADDR, "--health-probe-bind-address", help="The address the probe endpoint binds to."
    ),
    leader_elect: bool = typer.Option(
        False,
        "--leader-elect",
        help="Enable leader election for the controller. "
        "Enabling this will ensure there is only one active kappital-engine.",
    ),
):
    """
    Run the kappital-engine controller.
    """
    setup_logging(False, level=logging.INFO, fmt=SERVER_FORMAT)

    try:
        ip = get_local_ip()
    except NoLocalAddressError as e:
        fatal("cannot get local ip address, error: %s.", e)

    try:
        cert, key = self_signed_cert()
    except ValueError as e:
        fatal("cannot get the self https certificate, err: %s", e)

    probe_addr = replace_ip(health_probe_bind_address, ip)
    try:
        start_probe_server(probe_addr, cert, key)
    except OSError as e:
        fatal("cannot start health check on %s, err: %s", probe_addr, e)

    log.info("starting kappital-engine")
    kopf.run(
        namespaces=[reconciler.SYSTEM_NAMESPACE],
        standalone=not leader_elect,
        peering_name=LEADER_ELECTION_ID if leader_elect else None,
        clusterwide=False,
    )


def main() -> None:
    if len(sys.argv) > 1 and version.is_version_flag(sys.argv[1]):
        print(version.get())
        raise SystemExit(0)
    typer.run(run)


if __name__ == "__main__":
    main()
