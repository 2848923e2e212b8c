"""
relay-store in-memory stores.

Real store implementations backed by Python dicts. No database required.
Used for demos and for tests of code that depends on the contracts
rather than on a particular backend.

Semantics match the SQL stores exactly: the same keys, the same expiry
rules, the same not-found results.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Sequence

from relay_store.core.contracts import CertificateStore, PublicKeyStore
from relay_store.core.pki import SessionPublicKeyData, as_utc
from relay_store.store.models import SESSION_KEY_TTL


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryCertificateStore(CertificateStore):
    def __init__(self):
        # (subject_id, expiry_date) → (issuer_id, path_serialized)
        self.records: dict[tuple[str, datetime], tuple[str, bytes]] = {}

    async def delete_expired(self) -> int:
        now = _now()
        expired = [k for k in self.records if k[1] <= now]
        for k in expired:
            del self.records[k]
        return len(expired)

    async def _save_data(self, path_serialized, subject_id, expiry_date, issuer_id) -> None:
        self.records[(subject_id, as_utc(expiry_date))] = (issuer_id, bytes(path_serialized))

    def _valid(self, subject_id: str, issuer_id: str) -> list[tuple[datetime, bytes]]:
        now = _now()
        return [
            (expiry, path)
            for (subject, expiry), (issuer, path) in self.records.items()
            if subject == subject_id and issuer == issuer_id and expiry > now
        ]

    async def _retrieve_latest_serialization(self, subject_id, issuer_id) -> bytes | None:
        valid = self._valid(subject_id, issuer_id)
        if not valid:
            return None
        return max(valid, key=lambda item: item[0])[1]

    async def _retrieve_all_serializations(self, subject_id, issuer_id) -> Sequence[bytes]:
        return [path for _, path in self._valid(subject_id, issuer_id)]


class MemoryPublicKeyStore(PublicKeyStore):
    def __init__(self):
        self.identity_keys: dict[str, bytes]                = {}   # peer_id → DER
        self.session_keys:  dict[str, SessionPublicKeyData] = {}   # peer_id → latest

    async def _save_identity_key_serialized(self, key_der, peer_id) -> None:
        self.identity_keys[peer_id] = bytes(key_der)

    async def _retrieve_identity_key_serialized(self, peer_id) -> bytes | None:
        return self.identity_keys.get(peer_id)

    async def _save_session_key_data(self, key_data, peer_id) -> None:
        self.session_keys[peer_id] = replace(
            key_data,
            public_key_creation_time=as_utc(key_data.public_key_creation_time),
        )

    async def _retrieve_session_key_data(self, peer_id) -> SessionPublicKeyData | None:
        key_data = self.session_keys.get(peer_id)
        if key_data is None or self._is_expired(key_data):
            return None
        return key_data

    async def delete_expired(self) -> int:
        expired = [p for p, k in self.session_keys.items() if self._is_expired(k)]
        for peer_id in expired:
            del self.session_keys[peer_id]
        return len(expired)

    @staticmethod
    def _is_expired(key_data: SessionPublicKeyData) -> bool:
        return key_data.public_key_creation_time + SESSION_KEY_TTL <= _now()
