"""Async database engine and session factory.

The pool is the only shared mutable resource in the service. Tenant-scoped
work acquires connections exclusively through ``imprint.core.tenancy``.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from imprint.core.config import Settings, get_settings

settings = get_settings()


def create_engine_from_settings(cfg: Settings) -> AsyncEngine:
    connect_args: dict = {"timeout": cfg.db_connect_timeout}
    if cfg.is_production:
        connect_args["ssl"] = "require"

    eng = create_async_engine(
        cfg.database_url,
        echo=cfg.echo_sql,
        pool_size=cfg.db_pool_size,
        max_overflow=cfg.db_max_overflow,
        pool_timeout=cfg.db_connect_timeout,
        pool_recycle=cfg.db_idle_timeout,
        pool_pre_ping=True,
        connect_args=connect_args,
    )
    if eng.dialect.name == "postgresql":
        _restrict_pooled_connections(eng, cfg.db_tenant_role)
    return eng


def _restrict_pooled_connections(eng: AsyncEngine, role: str) -> None:
    """Run every physical connection as the restricted role.

    Queries issued outside a tenant scope therefore match no row-level
    security policy and see zero tenant rows.
    """

    @event.listens_for(eng.sync_engine, "connect")
    def _set_role(dbapi_connection, _connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute(f"SET ROLE {role}")
        cursor.close()


engine = create_engine_from_settings(settings)

async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async DB session."""
    async with async_session_factory() as session:
        yield session


async def check_database() -> None:
    """Round-trip ``SELECT 1``. Raises on connectivity failure."""
    async with async_session_factory() as session:
        await session.execute(text("SELECT 1"))
