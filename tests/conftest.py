"""
Shared fixtures for relay-store tests.

Every test that touches the database gets a fresh in-memory SQLite
engine, so no Postgres is needed and tests never see each other's rows.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from relay_store.core.pki import CertificationPath, get_id_from_identity_key
from relay_store.store.session import create_tables


def generate_key_pair():
    return ec.generate_private_key(ec.SECP256R1())


def _common_name(key) -> str:
    # X.509 caps CN at 64 characters; node ids are 65
    return get_id_from_identity_key(key.public_key())[:64]


def issue_certificate(
    subject_key,
    issuer_key=None,
    *,
    not_after: datetime,
    not_before: datetime | None = None,
    issuer_certificate: x509.Certificate | None = None,
) -> x509.Certificate:
    """Issue a certificate for subject_key. Self-issued when issuer_key is None."""
    issuer_key = issuer_key or subject_key
    subject_name = x509.Name([
        x509.NameAttribute(NameOID.COMMON_NAME, _common_name(subject_key)),
    ])
    if issuer_certificate is not None:
        issuer_name = issuer_certificate.subject
    elif issuer_key is subject_key:
        issuer_name = subject_name
    else:
        issuer_name = x509.Name([
            x509.NameAttribute(NameOID.COMMON_NAME, _common_name(issuer_key)),
        ])
    not_before = not_before or (not_after - timedelta(days=2))
    return (
        x509.CertificateBuilder()
        .subject_name(subject_name)
        .issuer_name(issuer_name)
        .public_key(subject_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .sign(issuer_key, hashes.SHA256())
    )


# ─────────────────────────────────────────────────────────────
# Keys and certificates
# ─────────────────────────────────────────────────────────────

@pytest.fixture(scope="module")
def issuer_key():
    return generate_key_pair()


@pytest.fixture(scope="module")
def issuer_certificate(issuer_key):
    return issue_certificate(
        issuer_key,
        not_after=datetime.now(timezone.utc) + timedelta(days=1),
    )


@pytest.fixture(scope="module")
def issuer_id(issuer_key):
    return get_id_from_identity_key(issuer_key.public_key())


@pytest.fixture(scope="module")
def subject_key():
    return generate_key_pair()


@pytest.fixture(scope="module")
def subject_id(subject_key):
    return get_id_from_identity_key(subject_key.public_key())


@pytest.fixture(scope="module")
def valid_path(subject_key, issuer_key, issuer_certificate):
    certificate = issue_certificate(
        subject_key,
        issuer_key,
        issuer_certificate=issuer_certificate,
        not_after=issuer_certificate.not_valid_after_utc,
    )
    return CertificationPath(certificate, [issuer_certificate])


@pytest.fixture(scope="module")
def expired_path(subject_key, issuer_key, issuer_certificate):
    now = datetime.now(timezone.utc)
    certificate = issue_certificate(
        subject_key,
        issuer_key,
        issuer_certificate=issuer_certificate,
        not_before=now - timedelta(minutes=2),
        not_after=now - timedelta(minutes=1),
    )
    return CertificationPath(certificate, [])


# ─────────────────────────────────────────────────────────────
# Database
# ─────────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()
