"""
relay-store — certificate and public key persistence for Relaynet nodes.

    from relay_store import SQLCertificateStore, SQLPublicKeyStore
"""

__version__ = "0.1.0"

from relay_store.core import (
    CertificateStore,
    CertificationPath,
    PublicKeyStore,
    SessionKey,
    UnimplementedCapabilityError,
)
from relay_store.store import (
    ExpirySweeper,
    MemoryCertificateStore,
    MemoryPublicKeyStore,
    SQLCertificateStore,
    SQLPublicKeyStore,
    create_tables,
    get_async_engine,
)

__all__ = [
    "CertificateStore", "PublicKeyStore", "UnimplementedCapabilityError",
    "CertificationPath", "SessionKey",
    "SQLCertificateStore", "SQLPublicKeyStore",
    "MemoryCertificateStore", "MemoryPublicKeyStore",
    "ExpirySweeper", "get_async_engine", "create_tables",
]
