"""Exception hierarchy for crlstore."""


class CRLStoreError(Exception):
    """Base exception for all crlstore errors.

    Every error carries a stable category tag that prefixes its message,
    e.g. ``certificate store error: failed to insert the certificate record``.
    """

    category = "unknown error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.category}: {self.message}"


# Usage errors
class UsageError(CRLStoreError):
    """Conflicting or missing command-line inputs."""

    category = "usage error"


# Configuration errors
class ConfigurationError(CRLStoreError):
    """Database configuration could not be loaded."""

    category = "configuration error"


# Parse errors
class ParseError(CRLStoreError):
    """Base exception for malformed input."""

    category = "parse error"


class CertificateParseError(ParseError):
    """Failed to parse the issuer certificate."""

    pass


class PrivateKeyParseError(ParseError):
    """Failed to parse the issuer private key, or it does not fit the certificate."""

    pass


class SerialParseError(ParseError):
    """A serial number is not a base-10 integer."""

    pass


# Store errors
class StoreError(CRLStoreError):
    """Base exception for certificate store errors."""

    category = "certificate store error"


class InsertionFailedError(StoreError):
    """An insert affected zero rows."""

    pass


class RecordNotFoundError(StoreError):
    """No row matched the given serial."""

    pass


class IntegrityViolationError(StoreError):
    """A write affected more than one row."""

    pass


class AlreadyRevokedError(StoreError):
    """The certificate was revoked before; revocation happens only once."""

    pass


# Signing errors
class SigningError(CRLStoreError):
    """The signing primitive rejected the key or the CRL content."""

    category = "signing error"
