"""FastAPI dependency injection."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from rivalscan.config import settings
from rivalscan.data.analyzer import CompetitorAnalyzer, build_assembler
from rivalscan.data.commentary import CommentaryClient
from rivalscan.data.places import GooglePlacesClient
from rivalscan.data.store import SqlReportStore

engine = create_async_engine(settings.database_url, echo=settings.debug)
async_session = async_sessionmaker(engine, expire_on_commit=False)


def get_store() -> SqlReportStore:
    return SqlReportStore(async_session)


def get_analyzer(store: SqlReportStore = Depends(get_store)) -> CompetitorAnalyzer:
    return CompetitorAnalyzer(
        GooglePlacesClient(),
        build_assembler(CommentaryClient()),
        store,
    )
