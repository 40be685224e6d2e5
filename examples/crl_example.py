#!/usr/bin/env python3
"""CRL (Certificate Revocation List) Example - Revoke certificates and publish a CRL."""

from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from crlstore import CertificateRecord, CertStore, Database, RevocationReason
from crlstore.issuer import new_crl_from_db, new_crl_from_file
from crlstore.store import migrate


def make_ca() -> tuple[bytes, bytes]:
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "Example CA")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=365))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    key_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    return cert.public_bytes(serialization.Encoding.PEM), key_pem


def main():
    print("=== CRL (Certificate Revocation List) Example ===\n")

    ca_pem, ca_key_pem = make_ca()

    # CA keeps its certificate records in a database
    with Database.from_url("sqlite://") as db:
        migrate(db)
        store = CertStore(db)

        print("1. Recording issued certificates...")
        expiry = datetime.now(timezone.utc) + timedelta(days=90)
        for serial in ("1001", "1002", "1003"):
            store.insert_certificate(
                CertificateRecord(serial=serial, ca_label="default", expiry=expiry, pem="...")
            )
        print(f"   ✓ {len(store.get_unexpired_certificates())} unexpired certificates\n")

        print("2. Revoking certificates...")
        store.revoke_certificate("1001", RevocationReason.KEY_COMPROMISE)
        store.revoke_certificate("1003", RevocationReason.SUPERSEDED)
        print(f"   ✓ Revoked {len(store.get_revoked_certificates())} certificates\n")

        print("3. Generating CRL from the database...")
        crl = x509.load_der_x509_crl(new_crl_from_db(db, ca_pem, ca_key_pem))
        print(f"   ✓ This Update: {crl.last_update_utc}")
        print(f"   ✓ Next Update: {crl.next_update_utc}")
        print(f"   ✓ Revoked Count: {len(crl)}\n")

    print("4. Generating CRL from a serial list...")
    crl = x509.load_der_x509_crl(
        new_crl_from_file(b"2001\n2002\n", ca_pem, ca_key_pem, timedelta(hours=24))
    )
    for entry in crl:
        print(f"   • {entry.serial_number}: revoked {entry.revocation_date_utc}")


if __name__ == "__main__":
    main()
