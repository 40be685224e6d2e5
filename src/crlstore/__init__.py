"""crlstore - Certificate record store and CRL generation for certificate authorities."""

from .core import (
    CertificateRecord,
    CertificateStatus,
    CRLStoreError,
    OCSPRecord,
    RevocationReason,
    RevokedEntry,
)
from .issuer import CRLGenerator, create_crl, new_crl_from_db, new_crl_from_file
from .store import CertStore, Database, DBConfig

__version__ = "0.1.0"

__all__ = [
    # Core
    "CertificateRecord",
    "CertificateStatus",
    "CRLStoreError",
    "OCSPRecord",
    "RevocationReason",
    "RevokedEntry",
    # Issuer
    "CRLGenerator",
    "create_crl",
    "new_crl_from_db",
    "new_crl_from_file",
    # Store
    "CertStore",
    "Database",
    "DBConfig",
]
