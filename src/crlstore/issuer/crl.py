"""CRL generation from serial lists or the certificate database."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from ..core.crypto import (
    check_key_matches_certificate,
    load_certificate_pem,
    load_private_key_pem,
)
from ..core.errors import SerialParseError
from ..core.models import RevokedEntry, parse_serial
from ..store.certdb import CertStore
from ..store.db import Database
from .signer import create_crl

logger = logging.getLogger(__name__)

ONE_WEEK = timedelta(seconds=604800)


def resolve_next_update(
    expiry: timedelta, now: Optional[datetime] = None
) -> datetime:
    """Compute a CRL's nextUpdate.

    Args:
        expiry: CRL validity; zero means one week
        now: Reference time (default: now, UTC)
    """
    now = now or datetime.now(timezone.utc)
    if not expiry:
        return now + ONE_WEEK
    return now + expiry


def parse_serial_list(serial_list: bytes) -> list[int]:
    """Parse a text list of base-10 serial numbers, one per line.

    Blank lines are skipped. A single malformed line rejects the whole list
    so that bad input never turns into a bogus serial.

    Raises:
        SerialParseError: If the list is not text or a line is not a decimal integer
    """
    try:
        text = serial_list.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SerialParseError(f"serial list is not valid text: {e}") from e

    serials = []
    for lineno, line in enumerate(text.split("\n"), start=1):
        if not line.strip():
            continue
        try:
            serials.append(parse_serial(line))
        except ValueError as e:
            raise SerialParseError(f"line {lineno}: {e}") from e
    return serials


class CRLGenerator:
    """Generates signed CRLs for one issuer."""

    def __init__(
        self,
        issuer_cert_pem: bytes,
        issuer_key_pem: bytes,
        expiry: timedelta = timedelta(0),
    ):
        """Initialize CRL generator.

        Args:
            issuer_cert_pem: PEM-encoded issuer certificate
            issuer_key_pem: PEM-encoded issuer private key
            expiry: CRL validity (default: zero, meaning one week)

        Raises:
            ParseError: If the certificate or key is malformed or they do not match
        """
        self.issuer_cert = load_certificate_pem(issuer_cert_pem)
        self.issuer_key = load_private_key_pem(issuer_key_pem)
        check_key_matches_certificate(self.issuer_key, self.issuer_cert)
        self.expiry = expiry

    def generate(self, entries: Iterable[RevokedEntry]) -> bytes:
        """Sign a CRL listing ``entries``.

        Returns:
            DER-encoded CRL
        """
        now = datetime.now(timezone.utc)
        return create_crl(
            entries,
            self.issuer_key,
            self.issuer_cert,
            resolve_next_update(self.expiry, now),
            this_update=now,
        )

    def from_serial_list(self, serial_list: bytes) -> bytes:
        """Generate a CRL revoking every serial in a text list as of now.

        Args:
            serial_list: One decimal serial number per line

        Returns:
            DER-encoded CRL
        """
        now = datetime.now(timezone.utc)
        entries = [
            RevokedEntry(serial_number=serial, revocation_time=now)
            for serial in parse_serial_list(serial_list)
        ]
        logger.info("Generating CRL for %d serials from list", len(entries))
        return self.generate(entries)

    def from_store(self, store: CertStore) -> bytes:
        """Generate a CRL of every revoked certificate in the store.

        Each entry keeps its recorded revocation time and reason. The read is
        not a transaction: certificates revoked while it runs may be missed
        until the next CRL.

        Returns:
            DER-encoded CRL

        Raises:
            StoreError: If the query fails
            SerialParseError: If a stored serial is not a decimal integer
        """
        entries = []
        for record in store.get_revoked_certificates():
            try:
                entries.append(RevokedEntry.from_record(record))
            except ValueError as e:
                raise SerialParseError(f"stored certificate {record.serial!r}: {e}") from e
        logger.info("Generating CRL for %d revoked certificates from database", len(entries))
        return self.generate(entries)


def new_crl_from_file(
    serial_list: bytes,
    issuer_cert_pem: bytes,
    issuer_key_pem: bytes,
    expiry: timedelta = timedelta(0),
) -> bytes:
    """Generate a CRL from a newline-separated list of decimal serials."""
    return CRLGenerator(issuer_cert_pem, issuer_key_pem, expiry).from_serial_list(serial_list)


def new_crl_from_db(
    database: Database,
    issuer_cert_pem: bytes,
    issuer_key_pem: bytes,
    expiry: timedelta = timedelta(0),
) -> bytes:
    """Generate a CRL from the revoked certificates in ``database``."""
    return CRLGenerator(issuer_cert_pem, issuer_key_pem, expiry).from_store(CertStore(database))

