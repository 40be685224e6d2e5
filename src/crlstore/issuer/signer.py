"""Signs X.509 certificate revocation lists."""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from ..core.crypto import IssuerPrivateKey, signature_hash_for
from ..core.errors import SigningError
from ..core.models import RevokedEntry, to_utc

logger = logging.getLogger(__name__)

_REASON_FLAGS = {
    1: x509.ReasonFlags.key_compromise,
    2: x509.ReasonFlags.ca_compromise,
    3: x509.ReasonFlags.affiliation_changed,
    4: x509.ReasonFlags.superseded,
    5: x509.ReasonFlags.cessation_of_operation,
    6: x509.ReasonFlags.certificate_hold,
    8: x509.ReasonFlags.remove_from_crl,
    9: x509.ReasonFlags.privilege_withdrawn,
    10: x509.ReasonFlags.aa_compromise,
}


def _revoked_certificate(entry: RevokedEntry) -> x509.RevokedCertificate:
    builder = (
        x509.RevokedCertificateBuilder()
        .serial_number(entry.serial_number)
        .revocation_date(entry.revocation_time)
    )
    # Reason 0 (unspecified) is left out, as RFC 5280 recommends.
    if entry.reason:
        flag = _REASON_FLAGS.get(entry.reason)
        if flag is None:
            logger.warning(
                "Unknown revocation reason %d for serial %d, omitting it",
                entry.reason,
                entry.serial_number,
            )
        else:
            builder = builder.add_extension(x509.CRLReason(flag), critical=False)
    return builder.build()


def create_crl(
    entries: Iterable[RevokedEntry],
    private_key: IssuerPrivateKey,
    issuer_cert: x509.Certificate,
    next_update: datetime,
    this_update: Optional[datetime] = None,
) -> bytes:
    """Build and sign a DER-encoded CRL.

    Args:
        entries: Revoked certificates to list, in order
        private_key: Issuer signing key
        issuer_cert: Issuer certificate; its subject becomes the CRL issuer
        next_update: When the CRL expires
        this_update: Generation time (default: now)

    Returns:
        DER-encoded CertificateList

    Raises:
        SigningError: If the key or any entry is rejected
    """
    this_update = to_utc(this_update) if this_update else datetime.now(timezone.utc)

    try:
        builder = (
            x509.CertificateRevocationListBuilder()
            .issuer_name(issuer_cert.subject)
            .last_update(this_update)
            .next_update(to_utc(next_update))
        )

        try:
            ski = issuer_cert.extensions.get_extension_for_class(x509.SubjectKeyIdentifier)
        except x509.ExtensionNotFound:
            pass
        else:
            builder = builder.add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_subject_key_identifier(ski.value),
                critical=False,
            )

        count = 0
        for entry in entries:
            builder = builder.add_revoked_certificate(_revoked_certificate(entry))
            count += 1

        crl = builder.sign(private_key=private_key, algorithm=signature_hash_for(private_key))
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        logger.debug("Error creating CRL: %s", e)
        raise SigningError(f"failed to create CRL: {e}") from e

    logger.debug("Signed CRL with %d entries, next update %s", count, next_update)
    return crl.public_bytes(serialization.Encoding.DER)
