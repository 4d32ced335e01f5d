from sqlmodel import SQLModel, Field
from sqlalchemy import Boolean, Column, DateTime, Integer, String
from typing import Optional
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Floor(SQLModel, table=True):
    __tablename__ = "floors"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    name: str = Field(
        sa_column=Column(String(100), nullable=False, unique=True)
    )

    sort_order: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0)
    )

    # System floors (e.g. "Unassigned") are managed by migrations only
    is_system: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False)
    )
    active: bool = Field(
        default=True,
        sa_column=Column(Boolean, nullable=False, default=True)
    )

    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, onupdate=_utcnow)
    )
