"""crlstore-gencrl -- generate a new Certificate Revocation List.

If -db-config is provided, the revoked certificates are read from that
database. Otherwise a text file with one serial number per line is required
('-' reads it from stdin). The DER-encoded CRL is written to stdout.
"""

import argparse
import logging
import re
import sys
from datetime import timedelta
from typing import Optional, Sequence

from .core.errors import CRLStoreError, UsageError
from .issuer.crl import new_crl_from_db, new_crl_from_file
from .store.db import Database

logger = logging.getLogger(__name__)

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ms|h|m|s)")
_DURATION_UNITS = {
    "h": timedelta(hours=1),
    "m": timedelta(minutes=1),
    "s": timedelta(seconds=1),
    "ms": timedelta(milliseconds=1),
}


def parse_duration(value: str) -> timedelta:
    """Parse a duration such as ``24h``, ``1h30m``, ``90s`` or bare seconds.

    Raises:
        UsageError: If the value is not a duration
    """
    value = value.strip()
    if re.fullmatch(r"\d+", value):
        return timedelta(seconds=int(value))

    total = timedelta(0)
    pos = 0
    for match in _DURATION_PART.finditer(value):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if not value or pos != len(value):
        raise UsageError(f"invalid duration {value!r}")
    return total


def read_input(path: str) -> bytes:
    """Read a file, or stdin when ``path`` is ``-``."""
    if path == "-":
        return sys.stdin.buffer.read()
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise UsageError(f"cannot read {path}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="crlstore-gencrl",
        description=__doc__.strip(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    p.add_argument("-ca", dest="ca", help="Issuer certificate (PEM)", metavar="FN")
    p.add_argument("-ca-key", dest="ca_key", help="Issuer private key (PEM)", metavar="FN")
    p.add_argument(
        "-crl-expiry",
        dest="crl_expiry",
        default="0",
        help="CRL validity, e.g. 24h. Default: one week",
        metavar="DURATION",
    )
    p.add_argument("-db-config", dest="db_config", help="Database config file", metavar="FN")
    p.add_argument(
        "-loglevel",
        dest="loglevel",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Log level written to stderr",
    )
    p.add_argument("serial_list", nargs="*", help="Serial list file, '-' for stdin")
    return p


def check_args(args: argparse.Namespace) -> None:
    """Validate the combination of revocation sources and issuer files.

    Raises:
        UsageError: If the inputs conflict or are incomplete
    """
    if args.db_config and args.serial_list:
        raise UsageError("Only provide either DB config file (with -db-config) or serial list")
    if not args.db_config and not args.serial_list:
        raise UsageError("Need to provide either DB config file (with -db-config) or serial list")
    if len(args.serial_list) > 1:
        raise UsageError("Provided too many arguments, only expected one")
    if not args.ca:
        raise UsageError("Need a CA certificate (provide one with -ca)")
    if not args.ca_key:
        raise UsageError("Need a CA key (provide one with -ca-key)")


def gencrl(args: argparse.Namespace) -> bytes:
    """Generate the CRL described by parsed command-line arguments."""
    check_args(args)
    expiry = parse_duration(args.crl_expiry)

    cert_pem = read_input(args.ca)
    key_pem = read_input(args.ca_key)

    if not args.db_config:
        return new_crl_from_file(read_input(args.serial_list[0]), cert_pem, key_pem, expiry)

    with Database.from_config(args.db_config) as db:
        return new_crl_from_db(db, cert_pem, key_pem, expiry)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.loglevel.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        crl = gencrl(args)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(e, file=sys.stderr)
        return 2
    except CRLStoreError as e:
        logger.debug("CRL generation failed", exc_info=True)
        print(e, file=sys.stderr)
        return 1

    sys.stdout.buffer.write(crl)
    sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
