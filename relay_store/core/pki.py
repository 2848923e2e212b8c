"""
relay-store PKI value types.

The stores never validate certificates or generate keys. They only need
enough of the PKI vocabulary to turn objects into bytes and back, and to
derive the identifiers records are indexed under:

    CertificationPath     — leaf certificate plus the chain up to a root
    SessionKey            — a peer's short-lived key exchange public key
    SessionPublicKeyData  — the serialized form of a SessionKey

Identifiers are "0" followed by the hex SHA-256 digest of the DER
SubjectPublicKeyInfo of the identity key.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization


class InvalidCertificationPathError(ValueError):
    """Raised when a serialized certification path cannot be decoded."""


# ─────────────────────────────────────────────────────────────
# Keys and identifiers
# ─────────────────────────────────────────────────────────────

def serialize_public_key(public_key: Any) -> bytes:
    """Return the DER SubjectPublicKeyInfo encoding of a public key."""
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def deserialize_public_key(key_der: bytes) -> Any:
    return serialization.load_der_public_key(bytes(key_der))


def get_id_from_identity_key(public_key: Any) -> str:
    """Derive the node id of the owner of an identity key."""
    digest = hashlib.sha256(serialize_public_key(public_key)).hexdigest()
    return f"0{digest}"


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ─────────────────────────────────────────────────────────────
# Certification paths
# ─────────────────────────────────────────────────────────────

@dataclass(eq=False, repr=False)
class CertificationPath:
    """A leaf certificate and the intermediates needed to validate it.

    The serialization is a PEM bundle with the leaf first, followed by
    the certificate authorities in the order given.
    """
    leaf_certificate: x509.Certificate
    certificate_authorities: list[x509.Certificate] = field(default_factory=list)

    @property
    def subject_id(self) -> str:
        return get_id_from_identity_key(self.leaf_certificate.public_key())

    @property
    def expiry_date(self) -> datetime:
        return as_utc(self.leaf_certificate.not_valid_after_utc)

    def serialize(self) -> bytes:
        certificates = [self.leaf_certificate, *self.certificate_authorities]
        return b"".join(
            c.public_bytes(serialization.Encoding.PEM) for c in certificates
        )

    @classmethod
    def deserialize(cls, data: bytes) -> CertificationPath:
        try:
            certificates = x509.load_pem_x509_certificates(bytes(data))
        except ValueError as exc:
            raise InvalidCertificationPathError(
                f"Serialized certification path is malformed: {exc}"
            ) from exc
        if not certificates:
            raise InvalidCertificationPathError(
                "Serialized certification path is empty"
            )
        return cls(certificates[0], certificates[1:])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CertificationPath):
            return NotImplemented
        return self.serialize() == other.serialize()

    def __repr__(self) -> str:
        return (
            f"<CertificationPath subject={self.subject_id:.9}... "
            f"expiry={self.expiry_date.isoformat()} "
            f"cas={len(self.certificate_authorities)}>"
        )


# ─────────────────────────────────────────────────────────────
# Session keys
# ─────────────────────────────────────────────────────────────

@dataclass
class SessionKey:
    """A peer's session public key.

    creation_time is None for keys that have not been stored yet; keys
    read back from a store always carry it.
    """
    key_id: bytes
    public_key: Any
    creation_time: Optional[datetime] = None


@dataclass(frozen=True)
class SessionPublicKeyData:
    public_key_id: bytes
    public_key_der: bytes
    public_key_creation_time: datetime
