"""CRL assembly and signing for certificate authorities."""

from .crl import CRLGenerator, new_crl_from_db, new_crl_from_file
from .signer import create_crl

__all__ = ["CRLGenerator", "create_crl", "new_crl_from_db", "new_crl_from_file"]
