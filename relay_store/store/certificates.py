"""
SQL-backed certification path store.

One row per (subject_id, expiry_date). Reads only ever see rows whose
expiry_date is still in the future; delete_expired() physically removes
the rest.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncEngine

from relay_store.core.contracts import CertificateStore
from relay_store.store.models import DBCertificationPath, expired_before
from relay_store.store.session import make_session_factory, session_scope
from relay_store.store.upsert import upsert


class SQLCertificateStore(CertificateStore):
    """Certificate store over a borrowed async engine.

    Any number of stores may share one engine. The engine's lifecycle
    stays with the caller.
    """

    def __init__(self, engine: AsyncEngine):
        self._sessions = make_session_factory(engine)

    async def delete_expired(self) -> int:
        cutoff = self._cutoff()
        async with session_scope(self._sessions) as session:
            result = await session.execute(
                delete(DBCertificationPath)
                .where(DBCertificationPath.expiry_date <= cutoff)
            )
        return result.rowcount

    async def _save_data(
        self,
        path_serialized: bytes,
        subject_id: str,
        expiry_date: datetime,
        issuer_id: str,
    ) -> None:
        async with session_scope(self._sessions) as session:
            await upsert(
                session,
                DBCertificationPath,
                {
                    "subject_id":      subject_id,
                    "expiry_date":     expiry_date,
                    "issuer_id":       issuer_id,
                    "path_serialized": bytes(path_serialized),
                },
                key=("subject_id", "expiry_date"),
            )

    async def _retrieve_latest_serialization(
        self,
        subject_id: str,
        issuer_id: str,
    ) -> bytes | None:
        stmt = (
            self._valid_paths(subject_id, issuer_id)
            .order_by(DBCertificationPath.expiry_date.desc())
            .limit(1)
        )
        async with session_scope(self._sessions) as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def _retrieve_all_serializations(
        self,
        subject_id: str,
        issuer_id: str,
    ) -> Sequence[bytes]:
        async with session_scope(self._sessions) as session:
            result = await session.execute(self._valid_paths(subject_id, issuer_id))
            return list(result.scalars().all())

    # ── Helpers ───────────────────────────────────────────────

    @staticmethod
    def _cutoff() -> datetime:
        return expired_before(
            DBCertificationPath.__table__.c.expiry_date,
            datetime.now(timezone.utc),
        )

    def _valid_paths(self, subject_id: str, issuer_id: str):
        return (
            select(DBCertificationPath.path_serialized)
            .where(DBCertificationPath.subject_id == subject_id)
            .where(DBCertificationPath.issuer_id == issuer_id)
            .where(DBCertificationPath.expiry_date > self._cutoff())
        )
