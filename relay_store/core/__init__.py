"""
relay-store core vocabulary.

    from relay_store.core import (
        # Contracts
        CertificateStore, PublicKeyStore, UnimplementedCapabilityError,
        # PKI value types
        CertificationPath, SessionKey, SessionPublicKeyData,
        InvalidCertificationPathError,
        get_id_from_identity_key, serialize_public_key, deserialize_public_key,
    )
"""

from relay_store.core.contracts import (
    CertificateStore,
    PublicKeyStore,
    UnimplementedCapabilityError,
)
from relay_store.core.pki import (
    CertificationPath,
    InvalidCertificationPathError,
    SessionKey,
    SessionPublicKeyData,
    deserialize_public_key,
    get_id_from_identity_key,
    serialize_public_key,
)

__all__ = [
    "CertificateStore", "PublicKeyStore", "UnimplementedCapabilityError",
    "CertificationPath", "InvalidCertificationPathError",
    "SessionKey", "SessionPublicKeyData",
    "get_id_from_identity_key", "serialize_public_key", "deserialize_public_key",
]
