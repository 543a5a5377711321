"""SQLAlchemy ORM models for report persistence."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, String, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class BusinessRecord(Base):
    __tablename__ = "businesses"

    # "{name}-{city}"
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    name: Mapped[str] = mapped_column(String(255))
    city: Mapped[str] = mapped_column(String(255))

    reports: Mapped[list["ReportRow"]] = relationship(back_populates="business")


class ReportRow(Base):
    __tablename__ = "reports"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    business_id: Mapped[str] = mapped_column(ForeignKey("businesses.id"))

    # Full report blob (ReportRecord.to_dict())
    data: Mapped[dict] = mapped_column(JSON)

    business: Mapped["BusinessRecord"] = relationship(back_populates="reports")
