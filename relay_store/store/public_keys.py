"""
SQL-backed public key store.

Identity keys and session keys live in separate tables keyed on the
peer id. Session keys older than SESSION_KEY_TTL are treated as absent.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncEngine

from relay_store.core.contracts import PublicKeyStore
from relay_store.core.pki import SessionPublicKeyData
from relay_store.store.models import (
    DBIdentityPublicKey,
    DBSessionPublicKey,
    expired_before,
)
from relay_store.store.session import make_session_factory, session_scope
from relay_store.store.upsert import upsert


class SQLPublicKeyStore(PublicKeyStore):
    """Public key store over a borrowed async engine."""

    def __init__(self, engine: AsyncEngine):
        self._sessions = make_session_factory(engine)

    # ── Identity keys ─────────────────────────────────────────

    async def _save_identity_key_serialized(self, key_der: bytes, peer_id: str) -> None:
        async with session_scope(self._sessions) as session:
            await upsert(
                session,
                DBIdentityPublicKey,
                {"peer_id": peer_id, "key_der": bytes(key_der)},
                key=("peer_id",),
            )

    async def _retrieve_identity_key_serialized(self, peer_id: str) -> bytes | None:
        async with session_scope(self._sessions) as session:
            result = await session.execute(
                select(DBIdentityPublicKey.key_der)
                .where(DBIdentityPublicKey.peer_id == peer_id)
            )
            return result.scalar_one_or_none()

    # ── Session keys ──────────────────────────────────────────

    async def _save_session_key_data(
        self,
        key_data: SessionPublicKeyData,
        peer_id: str,
    ) -> None:
        async with session_scope(self._sessions) as session:
            await upsert(
                session,
                DBSessionPublicKey,
                {
                    "peer_id":       peer_id,
                    "key_id":        bytes(key_data.public_key_id),
                    "key_der":       bytes(key_data.public_key_der),
                    "creation_date": key_data.public_key_creation_time,
                },
                key=("peer_id",),
            )

    async def _retrieve_session_key_data(
        self,
        peer_id: str,
    ) -> SessionPublicKeyData | None:
        async with session_scope(self._sessions) as session:
            result = await session.execute(
                select(DBSessionPublicKey)
                .where(DBSessionPublicKey.peer_id == peer_id)
                .where(DBSessionPublicKey.creation_date > self._cutoff())
            )
            record = result.scalar_one_or_none()

        if record is None:
            return None
        return SessionPublicKeyData(
            public_key_id=bytes(record.key_id),
            public_key_der=bytes(record.key_der),
            public_key_creation_time=record.creation_date,
        )

    async def delete_expired(self) -> int:
        """Purge session keys past their retention window. Identity keys never expire."""
        async with session_scope(self._sessions) as session:
            result = await session.execute(
                delete(DBSessionPublicKey)
                .where(DBSessionPublicKey.creation_date <= self._cutoff())
            )
        return result.rowcount

    @staticmethod
    def _cutoff() -> datetime:
        return expired_before(
            DBSessionPublicKey.__table__.c.creation_date,
            datetime.now(timezone.utc),
        )
