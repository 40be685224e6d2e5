"""Relational layout of the certificate and OCSP tables.

The record store never issues DDL. ``migrate`` exists for tests and for
bootstrapping a fresh database when no external migration tool is used.
"""

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, Text

metadata = MetaData()

certificates = Table(
    "certificates",
    metadata,
    Column("serial", String(128), primary_key=True),
    Column("ca_label", String(128)),
    Column("status", String(128), nullable=False, default="good"),
    Column("reason", Integer, default=0),
    Column("expiry", DateTime),
    Column("revoked_at", DateTime),
    Column("pem", Text, nullable=False),
)

ocsp_responses = Table(
    "ocsp_responses",
    metadata,
    Column("serial", String(128), primary_key=True),
    Column("body", Text, nullable=False),
    Column("expiry", DateTime),
)


def migrate(database) -> None:
    """Create any missing tables on ``database``."""
    metadata.create_all(database.engine)
