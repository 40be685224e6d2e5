"""PEM parsing for issuer certificates and signing keys."""

import logging
from typing import Optional, Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, rsa

from .errors import CertificateParseError, PrivateKeyParseError

logger = logging.getLogger(__name__)

IssuerPrivateKey = Union[
    rsa.RSAPrivateKey,
    ec.EllipticCurvePrivateKey,
    dsa.DSAPrivateKey,
    ed25519.Ed25519PrivateKey,
    ed448.Ed448PrivateKey,
]

_SIGNING_KEY_TYPES = (
    rsa.RSAPrivateKey,
    ec.EllipticCurvePrivateKey,
    dsa.DSAPrivateKey,
    ed25519.Ed25519PrivateKey,
    ed448.Ed448PrivateKey,
)


def load_certificate_pem(data: bytes) -> x509.Certificate:
    """Load a PEM-encoded X.509 certificate.

    Args:
        data: PEM bytes

    Returns:
        Parsed certificate

    Raises:
        CertificateParseError: If the data is not a PEM certificate
    """
    try:
        return x509.load_pem_x509_certificate(data)
    except ValueError as e:
        logger.debug("Malformed certificate: %s", e)
        raise CertificateParseError(f"failed to parse issuer certificate: {e}") from e


def load_private_key_pem(data: bytes) -> IssuerPrivateKey:
    """Load an unencrypted PEM private key that can sign a CRL.

    Args:
        data: PEM bytes (PKCS#1, SEC1 or PKCS#8)

    Returns:
        Parsed private key

    Raises:
        PrivateKeyParseError: If the key is malformed, encrypted or cannot sign
    """
    try:
        key = serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError) as e:
        logger.debug("Malformed private key: %s", e)
        raise PrivateKeyParseError(f"failed to parse issuer key: {e}") from e
    except UnsupportedAlgorithm as e:
        logger.debug("Unsupported private key: %s", e)
        raise PrivateKeyParseError(f"unsupported issuer key: {e}") from e

    if not isinstance(key, _SIGNING_KEY_TYPES):
        raise PrivateKeyParseError(
            f"issuer key of type {type(key).__name__} cannot sign a CRL"
        )
    return key


def check_key_matches_certificate(
    private_key: IssuerPrivateKey, certificate: x509.Certificate
) -> None:
    """Check that a private key belongs to the certificate's public key.

    Raises:
        PrivateKeyParseError: If the key type or public key differs
    """
    cert_public = certificate.public_key()
    key_public = private_key.public_key()

    if not isinstance(key_public, _public_key_family(cert_public)):
        raise PrivateKeyParseError(
            "issuer key type does not match the issuer certificate"
        )

    spki = serialization.PublicFormat.SubjectPublicKeyInfo
    if key_public.public_bytes(serialization.Encoding.DER, spki) != cert_public.public_bytes(
        serialization.Encoding.DER, spki
    ):
        raise PrivateKeyParseError("issuer key does not match the issuer certificate")


def _public_key_family(public_key) -> tuple:
    for family in (
        rsa.RSAPublicKey,
        ec.EllipticCurvePublicKey,
        dsa.DSAPublicKey,
        ed25519.Ed25519PublicKey,
        ed448.Ed448PublicKey,
    ):
        if isinstance(public_key, family):
            return (family,)
    return (type(public_key),)


def signature_hash_for(private_key: IssuerPrivateKey) -> Optional[hashes.HashAlgorithm]:
    """Pick the CRL signature hash for a key.

    Ed25519 and Ed448 sign without a separate digest.
    """
    if isinstance(private_key, (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey)):
        return None
    return hashes.SHA256()
