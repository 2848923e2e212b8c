"""
relay-store persistence layer.

The store package manages all database access. Nothing outside this
package writes SQL directly.

    from relay_store.store import (
        SQLCertificateStore, SQLPublicKeyStore,
        get_async_engine, create_tables,
    )

    engine = get_async_engine()
    await create_tables(engine)
    certificates = SQLCertificateStore(engine)
    public_keys  = SQLPublicKeyStore(engine)

The caller owns the engine. Stores borrow it and never dispose of it.
"""

from relay_store.store.certificates import SQLCertificateStore
from relay_store.store.memory import MemoryCertificateStore, MemoryPublicKeyStore
from relay_store.store.models import SESSION_KEY_TTL
from relay_store.store.public_keys import SQLPublicKeyStore
from relay_store.store.session import (
    create_tables,
    drop_tables,
    get_async_engine,
    get_db_url,
)
from relay_store.store.sweeper import ExpirySweeper

__all__ = [
    "SQLCertificateStore", "SQLPublicKeyStore",
    "MemoryCertificateStore", "MemoryPublicKeyStore",
    "ExpirySweeper", "SESSION_KEY_TTL",
    "get_async_engine", "get_db_url", "create_tables", "drop_tables",
]
