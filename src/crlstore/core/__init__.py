"""Core functionality for crlstore."""

from .crypto import (
    check_key_matches_certificate,
    load_certificate_pem,
    load_private_key_pem,
    signature_hash_for,
)
from .errors import (
    CRLStoreError,
    UsageError,
    ConfigurationError,
    ParseError,
    CertificateParseError,
    PrivateKeyParseError,
    SerialParseError,
    StoreError,
    InsertionFailedError,
    RecordNotFoundError,
    IntegrityViolationError,
    AlreadyRevokedError,
    SigningError,
)
from .models import (
    CertificateRecord,
    CertificateStatus,
    OCSPRecord,
    RevocationReason,
    RevokedEntry,
    parse_serial,
    to_utc,
)

__all__ = [
    # Crypto
    "check_key_matches_certificate",
    "load_certificate_pem",
    "load_private_key_pem",
    "signature_hash_for",
    # Errors
    "CRLStoreError",
    "UsageError",
    "ConfigurationError",
    "ParseError",
    "CertificateParseError",
    "PrivateKeyParseError",
    "SerialParseError",
    "StoreError",
    "InsertionFailedError",
    "RecordNotFoundError",
    "IntegrityViolationError",
    "AlreadyRevokedError",
    "SigningError",
    # Models
    "CertificateRecord",
    "CertificateStatus",
    "OCSPRecord",
    "RevocationReason",
    "RevokedEntry",
    "parse_serial",
    "to_utc",
]
