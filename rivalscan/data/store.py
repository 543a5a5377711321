"""Report persistence on SQLAlchemy (asyncpg in production, aiosqlite in tests)."""

import logging
import uuid

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from rivalscan.models.db import Base, BusinessRecord, ReportRow
from rivalscan.models.report import ReportRecord

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO NOTHING
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def business_key(name: str, city: str) -> str:
    return f"{name}-{city}"


async def init_db(engine: AsyncEngine) -> None:
    """Create tables if missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


class SqlReportStore:
    """Stores each finished report as one JSON blob under its business.

    Usage:
        store = SqlReportStore(async_sessionmaker(engine, expire_on_commit=False))
        report_id = await store.save(report)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _ensure_business(self, session: AsyncSession, key: str, name: str, city: str) -> None:
        """Insert the business row unless it exists. Safe under concurrent saves."""
        dialect = session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise ValueError(f"Unsupported database dialect for report storage: {dialect}")

        stmt = (
            insert(BusinessRecord)
            .values(id=key, name=name, city=city)
            .on_conflict_do_nothing(index_elements=[BusinessRecord.id])
        )
        await session.execute(stmt)

    async def save(self, report: ReportRecord) -> str:
        target = report.target
        key = business_key(target.name, target.city)

        async with self.session_factory() as session:
            await self._ensure_business(session, key, target.name, target.city)

            report_id = uuid.uuid4()
            session.add(ReportRow(id=report_id, business_id=key, data=report.to_dict()))
            await session.commit()

        logger.info("Saved report %s for %s", report_id, key)
        return str(report_id)

    async def get(self, report_id: str) -> dict | None:
        try:
            row_id = uuid.UUID(report_id)
        except ValueError:
            return None

        async with self.session_factory() as session:
            row = await session.get(ReportRow, row_id)
            return row.data if row is not None else None
