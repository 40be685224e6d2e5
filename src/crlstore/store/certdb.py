"""Certificate and OCSP response records."""

import logging
from datetime import datetime

from pydantic import ValidationError
from sqlalchemy import func, insert, select, update
from sqlalchemy.engine import RowMapping

from ..core.errors import (
    AlreadyRevokedError,
    InsertionFailedError,
    IntegrityViolationError,
    RecordNotFoundError,
    StoreError,
)
from ..core.models import (
    CertificateRecord,
    CertificateStatus,
    OCSPRecord,
    to_naive_utc,
)
from .db import Database
from .schema import certificates, ocsp_responses

logger = logging.getLogger(__name__)


def _check_single_row(rows: int, what: str) -> None:
    if rows != 1:
        logger.warning("%s affected %d rows", what, rows)
        raise IntegrityViolationError(f"{rows} rows are affected, should be 1 row")


def _certificate_from_row(row: RowMapping) -> CertificateRecord:
    """Build a record from a ``certificates`` row.

    Rows written by other tools may carry the zero time (year 1) instead of
    NULL for an unset revocation time, and NULL instead of 0 for the reason.
    """
    data = dict(row)
    revoked_at = data.get("revoked_at")
    if (
        data.get("status") == CertificateStatus.GOOD.value
        and revoked_at is not None
        and revoked_at.year <= 1
    ):
        data["revoked_at"] = None
    if data.get("reason") is None:
        data["reason"] = 0
    try:
        return CertificateRecord.model_validate(data)
    except ValidationError as e:
        raise StoreError(f"malformed certificate row {data.get('serial')!r}: {e}") from e


def _ocsp_from_row(row: RowMapping) -> OCSPRecord:
    data = dict(row)
    try:
        return OCSPRecord.model_validate(data)
    except ValidationError as e:
        raise StoreError(f"malformed OCSP row {data.get('serial')!r}: {e}") from e


class CertStore:
    """Typed access to the ``certificates`` and ``ocsp_responses`` tables.

    The two tables are updated independently. A certificate can be revoked
    while its cached OCSP response still says good; OCSP writers are
    expected to catch up from the certificate table within hours, so no
    cross-table transaction is attempted.

    Every write checks how many rows it touched. Zero rows and more than one
    row are reported as distinct errors instead of trusting the driver.
    """

    def __init__(self, database: Database):
        """Initialize the store.

        Args:
            database: Shared handle; the caller opens and closes it
        """
        self.db = database

    # Certificates

    def insert_certificate(self, record: CertificateRecord) -> None:
        """Insert a new certificate record.

        Raises:
            InsertionFailedError: If no row was written
            IntegrityViolationError: If more than one row was written
            StoreError: On any driver failure, e.g. a duplicate serial
        """
        rows = self.db.execute(
            insert(certificates).values(
                serial=record.serial,
                ca_label=record.ca_label,
                status=record.status.value,
                reason=record.reason,
                expiry=to_naive_utc(record.expiry),
                revoked_at=to_naive_utc(record.revoked_at) if record.revoked_at else None,
                pem=record.pem,
            )
        )
        if rows == 0:
            raise InsertionFailedError("failed to insert the certificate record")
        _check_single_row(rows, "certificate insert")
        logger.debug("Inserted certificate %s", record.serial)

    def get_certificate(self, serial: str) -> CertificateRecord:
        """Get the certificate record with the given serial.

        Raises:
            RecordNotFoundError: If no such certificate exists
        """
        row = self.db.fetch_one(
            select(certificates).where(certificates.c.serial == serial)
        )
        if row is None:
            raise RecordNotFoundError(f"certificate {serial} not found")
        return _certificate_from_row(row)

    def get_unexpired_certificates(self) -> list[CertificateRecord]:
        """Get every certificate whose expiry is after the database's current time."""
        rows = self.db.fetch_all(
            select(certificates).where(func.current_timestamp() < certificates.c.expiry)
        )
        return [_certificate_from_row(row) for row in rows]

    def get_revoked_certificates(self) -> list[CertificateRecord]:
        """Get every revoked certificate, expired or not."""
        rows = self.db.fetch_all(
            select(certificates).where(
                certificates.c.status == CertificateStatus.REVOKED.value
            )
        )
        return [_certificate_from_row(row) for row in rows]

    def get_all_certificates(self) -> list[CertificateRecord]:
        """Get every certificate record."""
        rows = self.db.fetch_all(select(certificates))
        return [_certificate_from_row(row) for row in rows]

    def revoke_certificate(self, serial: str, reason_code: int) -> None:
        """Mark a good certificate revoked as of the database's current time.

        Args:
            serial: Certificate serial number
            reason_code: RFC 5280 CRLReason code

        Raises:
            RecordNotFoundError: If the certificate does not exist
            AlreadyRevokedError: If the certificate is already revoked
            IntegrityViolationError: If more than one row matched
        """
        rows = self.db.execute(
            update(certificates)
            .where(certificates.c.serial == serial)
            .where(certificates.c.status == CertificateStatus.GOOD.value)
            .values(
                status=CertificateStatus.REVOKED.value,
                reason=reason_code,
                revoked_at=func.current_timestamp(),
            )
        )
        if rows == 0:
            # Either missing or revoked already; revocation happens only once.
            existing = self.db.fetch_one(
                select(certificates.c.status).where(certificates.c.serial == serial)
            )
            if existing is None:
                raise RecordNotFoundError(
                    "failed to revoke the certificate: certificate not found"
                )
            raise AlreadyRevokedError(f"certificate {serial} is already revoked")
        _check_single_row(rows, "certificate revoke")
        logger.debug("Revoked certificate %s (reason %d)", serial, reason_code)

    # OCSP responses

    def insert_ocsp(self, record: OCSPRecord) -> None:
        """Insert a new OCSP response record.

        Raises:
            InsertionFailedError: If no row was written
            IntegrityViolationError: If more than one row was written
            StoreError: On any driver failure, e.g. a duplicate serial
        """
        rows = self.db.execute(
            insert(ocsp_responses).values(
                serial=record.serial,
                body=record.body,
                expiry=to_naive_utc(record.expiry),
            )
        )
        if rows == 0:
            raise InsertionFailedError("failed to insert the OCSP record")
        _check_single_row(rows, "OCSP insert")
        logger.debug("Inserted OCSP response for %s", record.serial)

    def get_ocsp(self, serial: str) -> OCSPRecord:
        """Get the OCSP response record for a serial.

        Raises:
            RecordNotFoundError: If no response is cached for the serial
        """
        row = self.db.fetch_one(
            select(ocsp_responses).where(ocsp_responses.c.serial == serial)
        )
        if row is None:
            raise RecordNotFoundError(f"OCSP response for {serial} not found")
        return _ocsp_from_row(row)

    def get_unexpired_ocsps(self) -> list[OCSPRecord]:
        """Get every OCSP response whose expiry is after the database's current time."""
        rows = self.db.fetch_all(
            select(ocsp_responses).where(
                func.current_timestamp() < ocsp_responses.c.expiry
            )
        )
        return [_ocsp_from_row(row) for row in rows]

    def update_ocsp(self, serial: str, body: str, expiry: datetime) -> None:
        """Overwrite the body and expiry of an existing OCSP response.

        Raises:
            RecordNotFoundError: If the serial has no OCSP response yet
            IntegrityViolationError: If more than one row matched
        """
        rows = self._update_ocsp(serial, body, expiry)
        if rows == 0:
            raise RecordNotFoundError("failed to update the OCSP record")
        _check_single_row(rows, "OCSP update")

    def upsert_ocsp(self, serial: str, body: str, expiry: datetime) -> None:
        """Update the OCSP response for a serial, inserting it if missing.

        The update and the fallback insert are two statements. Two writers
        upserting the same new serial can both see zero updated rows and both
        insert; the loser gets a ``StoreError`` from the primary key. That
        race is accepted: the certificate table has no such race and OCSP
        writers periodically regenerate from it.

        Raises:
            StoreError: If either statement fails
        """
        rows = self._update_ocsp(serial, body, expiry)
        if rows == 0:
            logger.debug("No OCSP response for %s yet, inserting", serial)
            self.insert_ocsp(OCSPRecord(serial=serial, body=body, expiry=expiry))
            return
        _check_single_row(rows, "OCSP upsert")

    def _update_ocsp(self, serial: str, body: str, expiry: datetime) -> int:
        rows = self.db.execute(
            update(ocsp_responses)
            .where(ocsp_responses.c.serial == serial)
            .values(body=body, expiry=to_naive_utc(expiry))
        )
        if rows:
            logger.debug("Updated OCSP response for %s", serial)
        return rows
