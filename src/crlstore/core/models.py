"""Core data models for crlstore."""

from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def to_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Naive datetimes are taken to already be in UTC, which is how the
    database stores them.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_naive_utc(value: datetime) -> datetime:
    """Return ``value`` as a naive UTC datetime, ready to be written to the database."""
    return to_utc(value).replace(tzinfo=None)


class CertificateStatus(str, Enum):
    """Certificate status codes."""

    GOOD = "good"
    REVOKED = "revoked"


class RevocationReason(IntEnum):
    """RFC 5280 CRLReason codes. Value 7 is not used."""

    UNSPECIFIED = 0
    KEY_COMPROMISE = 1
    CA_COMPROMISE = 2
    AFFILIATION_CHANGED = 3
    SUPERSEDED = 4
    CESSATION_OF_OPERATION = 5
    CERTIFICATE_HOLD = 6
    REMOVE_FROM_CRL = 8
    PRIVILEGE_WITHDRAWN = 9
    AA_COMPROMISE = 10


class CertificateRecord(BaseModel):
    """A certificate and the metadata recorded about it."""

    serial: str = Field(description="Certificate serial number")
    ca_label: str = Field(default="", description="Issuing authority or profile")
    status: CertificateStatus = Field(default=CertificateStatus.GOOD)
    reason: int = Field(default=0, description="Revocation reason code")
    expiry: datetime = Field(description="Certificate expiration (UTC)")
    revoked_at: Optional[datetime] = Field(
        default=None, description="Revocation time (UTC), unset while good"
    )
    pem: str = Field(default="", description="PEM-encoded certificate")

    @field_validator("expiry", "revoked_at", mode="after")
    @classmethod
    def normalize_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Normalize timestamps to aware UTC."""
        if v is None:
            return v
        return to_utc(v)

    @model_validator(mode="after")
    def check_revocation_fields(self) -> "CertificateRecord":
        """A good certificate has no revocation time, a revoked one always has one."""
        if self.status == CertificateStatus.GOOD and self.revoked_at is not None:
            raise ValueError("revoked_at must be unset while status is good")
        if self.status == CertificateStatus.REVOKED and self.revoked_at is None:
            raise ValueError("revoked_at must be set once status is revoked")
        return self

    def is_revoked(self) -> bool:
        """Check if the certificate is revoked."""
        return self.status == CertificateStatus.REVOKED


class OCSPRecord(BaseModel):
    """A cached OCSP response body for one certificate."""

    serial: str = Field(description="Certificate serial number")
    body: str = Field(description="Encoded OCSP response")
    expiry: datetime = Field(description="End of the response validity window (UTC)")

    @field_validator("expiry", mode="after")
    @classmethod
    def normalize_utc(cls, v: datetime) -> datetime:
        return to_utc(v)


class RevokedEntry(BaseModel):
    """One revoked certificate as listed in a CRL."""

    serial_number: int = Field(description="Certificate serial number")
    revocation_time: datetime = Field(description="When the certificate was revoked")
    reason: Optional[int] = Field(default=None, description="CRLReason code, if known")

    @field_validator("revocation_time", mode="after")
    @classmethod
    def normalize_utc(cls, v: datetime) -> datetime:
        return to_utc(v)

    @classmethod
    def from_record(cls, record: CertificateRecord) -> "RevokedEntry":
        """Build an entry from a revoked certificate record.

        Raises:
            ValueError: If the record is not revoked or its serial is not decimal
        """
        if not record.is_revoked():
            raise ValueError(f"certificate {record.serial} is not revoked")
        return cls(
            serial_number=parse_serial(record.serial),
            revocation_time=record.revoked_at,
            reason=record.reason,
        )


def parse_serial(value: Any) -> int:
    """Parse a base-10 serial number.

    Only ASCII digits are accepted; signs, underscores and whitespace inside
    the number are rejected.

    Raises:
        ValueError: If ``value`` is not a base-10 integer
    """
    text = str(value).strip()
    if not text or not text.isascii() or not text.isdigit():
        raise ValueError(f"invalid serial number {value!r}")
    return int(text, 10)
