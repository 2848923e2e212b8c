"""
relay-store database schema.

Table design principles:

  1. One table per record kind. The three record kinds are fixed shapes
     with nothing in common, so there is no shared base beyond the
     declarative Base.

  2. Natural keys, no surrogate ids. Every write is an upsert keyed on
     the record's natural key, which is also its primary key, so
     concurrent upserts cannot produce duplicates.

  3. All times in UTC. Values are normalised to UTC on the way in and
     come back timezone aware, whatever the dialect stores.

  4. Expiry is declared on the column that drives it, via
     info={"ttl": timedelta}. A record expires at column value + ttl.
     Neither Postgres nor SQLite deletes rows by itself, so the stores
     filter expired rows on read and delete them in delete_expired().

Schema overview:

  certification_paths    — leaf certificate + chain, per (subject, expiry)
  identity_public_keys   — long-lived identity key, one per peer
  session_public_keys    — latest session key, one per peer, 30 day TTL
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    LargeBinary,
    Text,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


SESSION_KEY_TTL = timedelta(days=30)


# ─────────────────────────────────────────────────────────────
# Base
# ─────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


class UTCDateTime(TypeDecorator):
    """TIMESTAMP WITH TIME ZONE that always round-trips as aware UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def ttl_of(column) -> timedelta | None:
    """Return the expiry offset declared on a column, or None."""
    return column.info.get("ttl")


def expired_before(column, now: datetime) -> datetime:
    """Reference value at or below which a row in column has expired."""
    return now - ttl_of(column)


# ─────────────────────────────────────────────────────────────
# Certification paths
# ─────────────────────────────────────────────────────────────

class DBCertificationPath(Base):
    """A serialized certification path.

    subject_id      — id of the leaf certificate's subject
    issuer_id       — id the caller indexed the path under
    path_serialized — leaf certificate followed by its chain
    expiry_date     — leaf expiry; the record is invisible from then on

    Saving a second path for the same subject with the same expiry
    replaces the first, even if the issuer differs.
    """
    __tablename__ = "certification_paths"

    subject_id      = Column(Text, primary_key=True)
    expiry_date     = Column(
        UTCDateTime,
        primary_key=True,
        info={"ttl": timedelta(0)},
    )
    issuer_id       = Column(Text, nullable=False)
    path_serialized = Column(LargeBinary, nullable=False)

    __table_args__ = (
        Index("ix_certification_paths_subject_issuer", "subject_id", "issuer_id"),
        Index("ix_certification_paths_expiry", "expiry_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<DBCertificationPath subject={self.subject_id!s:.9}... "
            f"issuer={self.issuer_id!s:.9}... expiry={self.expiry_date}>"
        )


# ─────────────────────────────────────────────────────────────
# Public keys
# ─────────────────────────────────────────────────────────────

class DBIdentityPublicKey(Base):
    """A peer's identity public key (DER SubjectPublicKeyInfo). Never expires."""
    __tablename__ = "identity_public_keys"

    peer_id = Column(Text, primary_key=True)
    key_der = Column(LargeBinary, nullable=False)

    def __repr__(self) -> str:
        return f"<DBIdentityPublicKey peer={self.peer_id!s:.9}...>"


class DBSessionPublicKey(Base):
    """The latest session public key received from a peer.

    There is only ever one row per peer, so the stored key is the latest
    by construction. It expires SESSION_KEY_TTL after creation_date.
    """
    __tablename__ = "session_public_keys"

    peer_id       = Column(Text, primary_key=True)
    key_id        = Column(LargeBinary, nullable=False)
    key_der       = Column(LargeBinary, nullable=False)
    creation_date = Column(
        UTCDateTime,
        nullable=False,
        info={"ttl": SESSION_KEY_TTL},
    )

    __table_args__ = (
        Index("ix_session_public_keys_creation", "creation_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<DBSessionPublicKey peer={self.peer_id!s:.9}... "
            f"key_id={bytes(self.key_id).hex()} created={self.creation_date}>"
        )
