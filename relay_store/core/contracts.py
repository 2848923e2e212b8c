"""
relay-store capability contracts.

The two abstract stores every backend implements. Public methods deal in
PKI objects (CertificationPath, SessionKey, public keys); the protected
hooks a backend overrides deal only in bytes, strings and datetimes, so
a backend never needs to know how certificates are encoded.

    CertificateStore  — certification paths, indexed by subject + issuer
    PublicKeyStore    — identity keys and session keys, indexed by peer
"""

from __future__ import annotations

import abc
from datetime import datetime
from typing import Any, Optional, Sequence

from relay_store.core.pki import (
    CertificationPath,
    SessionKey,
    SessionPublicKeyData,
    deserialize_public_key,
    get_id_from_identity_key,
    serialize_public_key,
)


class UnimplementedCapabilityError(NotImplementedError):
    """Raised by a store that deliberately does not support an operation."""

    MESSAGE = "Method not yet implemented"

    def __init__(self) -> None:
        super().__init__(self.MESSAGE)


# ─────────────────────────────────────────────────────────────
# Certificate store
# ─────────────────────────────────────────────────────────────

class CertificateStore(abc.ABC):
    """Persist certification paths and look them up by subject and issuer.

    Only unexpired paths are ever returned. When two paths share a
    subject and an expiry date, the one saved last wins.
    """

    async def save(self, path: CertificationPath, issuer_id: str) -> None:
        await self._save_data(
            path.serialize(),
            path.subject_id,
            path.expiry_date,
            issuer_id,
        )

    async def retrieve_latest(
        self,
        subject_id: str,
        issuer_id: str,
    ) -> CertificationPath | None:
        """Return the valid path that expires last, or None."""
        serialization = await self._retrieve_latest_serialization(subject_id, issuer_id)
        if serialization is None:
            return None
        return CertificationPath.deserialize(serialization)

    async def retrieve_all(
        self,
        subject_id: str,
        issuer_id: str,
    ) -> list[CertificationPath]:
        serializations = await self._retrieve_all_serializations(subject_id, issuer_id)
        return [CertificationPath.deserialize(s) for s in serializations]

    @abc.abstractmethod
    async def delete_expired(self) -> int:
        """Purge expired paths. Returns how many records were removed."""

    @abc.abstractmethod
    async def _save_data(
        self,
        path_serialized: bytes,
        subject_id: str,
        expiry_date: datetime,
        issuer_id: str,
    ) -> None: ...

    @abc.abstractmethod
    async def _retrieve_latest_serialization(
        self,
        subject_id: str,
        issuer_id: str,
    ) -> bytes | None: ...

    @abc.abstractmethod
    async def _retrieve_all_serializations(
        self,
        subject_id: str,
        issuer_id: str,
    ) -> Sequence[bytes]: ...


# ─────────────────────────────────────────────────────────────
# Public key store
# ─────────────────────────────────────────────────────────────

class PublicKeyStore(abc.ABC):
    """Persist peers' identity keys and their latest session keys.

    Identity keys are long-lived and never expire. Only one session key
    is kept per peer; saving a new one discards the previous one.

    The identity key hooks are optional: a backend that leaves them alone
    raises UnimplementedCapabilityError for identity key operations.
    """

    # ── Identity keys ─────────────────────────────────────────

    async def save_identity_key(self, public_key: Any) -> str:
        """Store an identity key under the peer id derived from it.

        Returns the peer id.
        """
        peer_id = get_id_from_identity_key(public_key)
        await self._save_identity_key_serialized(serialize_public_key(public_key), peer_id)
        return peer_id

    async def retrieve_identity_key(self, peer_id: str) -> Any | None:
        key_der = await self._retrieve_identity_key_serialized(peer_id)
        if key_der is None:
            return None
        return deserialize_public_key(key_der)

    async def _save_identity_key_serialized(self, key_der: bytes, peer_id: str) -> None:
        raise UnimplementedCapabilityError()

    async def _retrieve_identity_key_serialized(self, peer_id: str) -> Optional[bytes]:
        raise UnimplementedCapabilityError()

    # ── Session keys ──────────────────────────────────────────

    async def save_session_key(
        self,
        session_key: SessionKey,
        peer_id: str,
        creation_time: datetime,
    ) -> None:
        key_data = SessionPublicKeyData(
            public_key_id=bytes(session_key.key_id),
            public_key_der=serialize_public_key(session_key.public_key),
            public_key_creation_time=creation_time,
        )
        await self._save_session_key_data(key_data, peer_id)

    async def retrieve_last_session_key(self, peer_id: str) -> SessionKey | None:
        key_data = await self._retrieve_session_key_data(peer_id)
        if key_data is None:
            return None
        return SessionKey(
            key_id=key_data.public_key_id,
            public_key=deserialize_public_key(key_data.public_key_der),
            creation_time=key_data.public_key_creation_time,
        )

    @abc.abstractmethod
    async def _save_session_key_data(
        self,
        key_data: SessionPublicKeyData,
        peer_id: str,
    ) -> None: ...

    @abc.abstractmethod
    async def _retrieve_session_key_data(
        self,
        peer_id: str,
    ) -> SessionPublicKeyData | None: ...
