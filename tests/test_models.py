"""Tests for core data models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from crlstore.core.models import (
    CertificateRecord,
    CertificateStatus,
    OCSPRecord,
    RevocationReason,
    RevokedEntry,
    parse_serial,
)


def test_naive_datetimes_are_utc():
    """Test naive timestamps are taken as UTC."""
    record = OCSPRecord(serial="1", body="b", expiry=datetime(2024, 5, 1, 12, 0))
    assert record.expiry == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_good_certificate_has_no_revocation_time():
    """Test revoked_at is unset iff status is good."""
    now = datetime.now(timezone.utc)

    with pytest.raises(ValidationError):
        CertificateRecord(serial="1", expiry=now, revoked_at=now)

    with pytest.raises(ValidationError):
        CertificateRecord(serial="1", expiry=now, status=CertificateStatus.REVOKED)

    record = CertificateRecord(
        serial="1", expiry=now, status="revoked", revoked_at=now, reason=2
    )
    assert record.is_revoked()
    assert record.reason == RevocationReason.CA_COMPROMISE


def test_revoked_entry_from_record():
    """Test a revoked record converts into a CRL entry."""
    revoked_at = datetime(2024, 1, 1, tzinfo=timezone(timedelta(hours=-5)))
    record = CertificateRecord(
        serial="123456789012345678901234567890",
        expiry=revoked_at + timedelta(days=30),
        status=CertificateStatus.REVOKED,
        revoked_at=revoked_at,
        reason=1,
    )

    entry = RevokedEntry.from_record(record)
    assert entry.serial_number == 123456789012345678901234567890
    assert entry.revocation_time == revoked_at
    assert entry.revocation_time.tzinfo == timezone.utc
    assert entry.reason == 1


def test_revoked_entry_from_good_record():
    """Test a good record is not a CRL entry."""
    record = CertificateRecord(serial="1", expiry=datetime.now(timezone.utc))
    with pytest.raises(ValueError):
        RevokedEntry.from_record(record)


@pytest.mark.parametrize("value", ["", " ", "abc", "-1", "+1", "1.0", "1e3", "١٢"])
def test_parse_serial_rejects(value):
    with pytest.raises(ValueError):
        parse_serial(value)


def test_parse_serial():
    assert parse_serial("0") == 0
    assert parse_serial("42\r") == 42
    assert parse_serial(" 340282366920938463463374607431768211456 ") == 2**128


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
