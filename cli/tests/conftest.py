from __future__ import annotations

import base64
import datetime as dt

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _key_pem(key: rsa.RSAPrivateKey) -> bytes:
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )


def _cert(subject: str, key, issuer: str, signer, *, ca: bool) -> x509.Certificate:
    now = dt.datetime.now(dt.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, subject)]))
        .issuer_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, issuer)]))
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - dt.timedelta(minutes=5))
        .not_valid_after(now + dt.timedelta(days=1))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .sign(signer, hashes.SHA256())
    )


@pytest.fixture(scope="session")
def tls_material() -> dict[str, str]:
    """Base64 PEM blobs as stored in the kappctl config file."""
    ca_key = _key()
    ca_cert = _cert("kappital-test-ca", ca_key, "kappital-test-ca", ca_key, ca=True)
    client_key = _key()
    client_cert = _cert("kappctl", client_key, "kappital-test-ca", ca_key, ca=False)
    return {
        "ca": _b64(ca_cert.public_bytes(serialization.Encoding.PEM)),
        "cert": _b64(client_cert.public_bytes(serialization.Encoding.PEM)),
        "key": _b64(_key_pem(client_key)),
        "other_key": _b64(_key_pem(_key())),
    }


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("KAPPITALCONFIG", raising=False)
    return tmp_path

