from __future__ import annotations

import base64
import binascii
import contextlib
import os
import ssl
import tempfile
from typing import Iterator

from .errors import TLSMaterialError


def decode_pem(data: str, what: str) -> bytes:
    # line breaks in wrapped base64 are skipped; any other stray byte is an error
    data = data.replace("\r", "").replace("\n", "")
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise TLSMaterialError(f"cannot decode {what}: {e}") from e


@contextlib.contextmanager
def pem_files(cert_pem: bytes, key_pem: bytes) -> Iterator[tuple[str, str]]:
    """Expose an in-memory certificate/key pair as file paths.

    The ssl module only reads keypairs from files, so the material is written
    to a private temporary directory that is removed when the block exits.
    """
    with tempfile.TemporaryDirectory(prefix="kappital-tls-") as tmp:
        os.chmod(tmp, 0o700)
        cert_path = os.path.join(tmp, "tls.crt")
        key_path = os.path.join(tmp, "tls.key")
        for path, data in ((cert_path, cert_pem), (key_path, key_pem)):
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        yield cert_path, key_path


def load_cert_chain_pem(ctx: ssl.SSLContext, cert_pem: bytes, key_pem: bytes) -> None:
    with pem_files(cert_pem, key_pem) as (cert_path, key_path):
        ctx.load_cert_chain(cert_path, key_path)


def client_ssl_context(ca_b64: str, cert_b64: str, key_b64: str, *, skip_verify: bool) -> ssl.SSLContext:
    ca_pem = decode_pem(ca_b64, "manager ca")
    cert_pem = decode_pem(cert_b64, "client certificate")
    key_pem = decode_pem(key_b64, "client key")

    ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    try:
        ctx.load_verify_locations(cadata=ca_pem.decode("ascii", errors="replace"))
    except (ssl.SSLError, ValueError) as e:
        raise TLSMaterialError(f"cannot load manager ca: {e}") from e
    try:
        load_cert_chain_pem(ctx, cert_pem, key_pem)
    except ssl.SSLError as e:
        raise TLSMaterialError(f"invalid client certificate/key pair: {e}") from e

    if skip_verify:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx
