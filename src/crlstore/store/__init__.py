"""Certificate and OCSP record storage."""

from .certdb import CertStore
from .config import DBConfig
from .db import Database
from .schema import migrate

__all__ = ["CertStore", "DBConfig", "Database", "migrate"]
