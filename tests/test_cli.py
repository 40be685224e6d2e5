"""Tests for the crlstore-gencrl command."""

import io
import json
import sys
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509

from crlstore.cli import main, parse_duration
from crlstore.core.errors import UsageError
from crlstore.core.models import CertificateRecord
from crlstore.store import CertStore, Database, migrate


@pytest.fixture
def ca_files(tmp_path, issuer):
    cert_pem, key_pem = issuer
    cert_path = tmp_path / "ca.pem"
    key_path = tmp_path / "ca-key.pem"
    cert_path.write_bytes(cert_pem)
    key_path.write_bytes(key_pem)
    return str(cert_path), str(key_path)


@pytest.fixture
def db_config(tmp_path):
    db_file = tmp_path / "certs.db"
    config_path = tmp_path / "db-config.json"
    config_path.write_text(json.dumps({"driver": "sqlite3", "data_source": str(db_file)}))

    with Database.from_url(f"sqlite:///{db_file}") as db:
        migrate(db)
        store = CertStore(db)
        expiry = datetime.now(timezone.utc) + timedelta(days=30)
        for serial in ("100", "200"):
            store.insert_certificate(
                CertificateRecord(serial=serial, ca_label="default", expiry=expiry, pem="pem")
            )
        store.revoke_certificate("200", 5)
    return str(config_path)


def test_gencrl_from_serial_list(tmp_path, ca_files, capsysbinary):
    """Test a CRL is written to stdout from a serial list file."""
    ca, ca_key = ca_files
    serial_list = tmp_path / "serials"
    serial_list.write_text("10\n20\n30\n")

    assert main(["-ca", ca, "-ca-key", ca_key, str(serial_list)]) == 0

    crl = x509.load_der_x509_crl(capsysbinary.readouterr().out)
    assert sorted(entry.serial_number for entry in crl) == [10, 20, 30]


def test_gencrl_from_stdin(ca_files, capsysbinary, monkeypatch):
    """Test '-' reads the serial list from stdin."""
    ca, ca_key = ca_files
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"7\n\n8\n")))

    assert main(["-ca", ca, "-ca-key", ca_key, "-crl-expiry", "24h", "-"]) == 0

    crl = x509.load_der_x509_crl(capsysbinary.readouterr().out)
    assert len(crl) == 2
    assert crl.next_update_utc - crl.last_update_utc == timedelta(hours=24)


def test_gencrl_from_db(ca_files, db_config, capsysbinary):
    """Test a CRL is built from the revoked certificates in the database."""
    ca, ca_key = ca_files

    assert main(["-ca", ca, "-ca-key", ca_key, "-db-config", db_config]) == 0

    crl = x509.load_der_x509_crl(capsysbinary.readouterr().out)
    assert [entry.serial_number for entry in crl] == [200]


@pytest.mark.parametrize(
    "extra, message",
    [
        ([], "Need to provide either DB config file"),
        (["-db-config", "db.json", "serials"], "Only provide either DB config file"),
        (["a", "b"], "Provided too many arguments"),
    ],
)
def test_gencrl_source_usage_errors(ca_files, capsysbinary, extra, message):
    ca, ca_key = ca_files

    assert main(["-ca", ca, "-ca-key", ca_key] + extra) == 2

    captured = capsysbinary.readouterr()
    assert captured.out == b""
    assert message.encode() in captured.err


def test_gencrl_missing_ca(capsysbinary):
    assert main(["-ca-key", "key.pem", "serials"]) == 2
    assert b"Need a CA certificate" in capsysbinary.readouterr().err


def test_gencrl_missing_ca_key(capsysbinary):
    assert main(["-ca", "ca.pem", "serials"]) == 2
    assert b"Need a CA key" in capsysbinary.readouterr().err


def test_gencrl_malformed_serial(tmp_path, ca_files, capsysbinary):
    """Test a malformed serial list fails without writing a CRL."""
    ca, ca_key = ca_files
    serial_list = tmp_path / "serials"
    serial_list.write_text("10\nbogus\n")

    assert main(["-ca", ca, "-ca-key", ca_key, str(serial_list)]) == 1

    captured = capsysbinary.readouterr()
    assert captured.out == b""
    assert b"parse error: line 2" in captured.err


def test_gencrl_bad_key(tmp_path, ca_files, capsysbinary):
    ca, _ = ca_files
    bad_key = tmp_path / "bad-key.pem"
    bad_key.write_text("garbage")
    serial_list = tmp_path / "serials"
    serial_list.write_text("1\n")

    assert main(["-ca", ca, "-ca-key", str(bad_key), str(serial_list)]) == 1
    assert capsysbinary.readouterr().out == b""


def test_parse_duration():
    assert parse_duration("0") == timedelta(0)
    assert parse_duration("90") == timedelta(seconds=90)
    assert parse_duration("24h") == timedelta(hours=24)
    assert parse_duration("1h30m") == timedelta(hours=1, minutes=30)
    assert parse_duration("1.5h") == timedelta(minutes=90)
    assert parse_duration("500ms") == timedelta(milliseconds=500)

    for bad in ("", "h", "1d", "1h-", "abc"):
        with pytest.raises(UsageError):
            parse_duration(bad)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
