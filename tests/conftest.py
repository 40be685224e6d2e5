"""Shared fixtures for crlstore tests."""

from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519
from cryptography.x509.oid import NameOID

from crlstore.store import CertStore, Database, migrate


def make_issuer(common_name: str = "Test CA", key=None) -> tuple[bytes, bytes]:
    """Create a self-signed CA and return (certificate PEM, key PEM)."""
    key = key or ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(timezone.utc)

    algorithm = None if isinstance(key, ed25519.Ed25519PrivateKey) else hashes.SHA256()
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=365))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(
            x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False
        )
        .sign(key, algorithm)
    )

    cert_pem = cert.public_bytes(serialization.Encoding.PEM)
    key_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return cert_pem, key_pem


@pytest.fixture
def issuer() -> tuple[bytes, bytes]:
    return make_issuer()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "certdb.sqlite"


@pytest.fixture
def database(db_path):
    db = Database.from_url(f"sqlite:///{db_path}")
    migrate(db)
    yield db
    db.close()


@pytest.fixture
def store(database) -> CertStore:
    return CertStore(database)


def roughly_same_time(t1: datetime, t2: datetime, tolerance: float = 1.0) -> bool:
    """Check two timestamps are within ``tolerance`` seconds of each other."""
    return abs((t1 - t2).total_seconds()) < tolerance
