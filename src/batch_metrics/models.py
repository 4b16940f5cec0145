"""SQLAlchemy models for persisted job execution contexts."""
from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Base(DeclarativeBase):
    pass


class ExecutionContextEntry(Base):
    __tablename__ = "job_execution_context"
    __table_args__ = (Index("ix_job_execution_context_instance", "job_instance_key"),)

    job_instance_key: Mapped[str] = mapped_column(String(255), primary_key=True)
    entry_key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value_type: Mapped[str] = mapped_column(String(16), nullable=False)
    value: Mapped[Any] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )


__all__ = ["Base", "ExecutionContextEntry"]
