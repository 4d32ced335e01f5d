# helpdesk/models/audit.py

from sqlmodel import SQLModel, Field
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from typing import Any, Dict, Optional
from datetime import datetime, timezone


class AuditLog(SQLModel, table=True):
    """Append-only record of a privileged action. Rows are never updated or deleted."""

    __tablename__ = "audit_logs"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    # Null only for system-initiated actions (seeding)
    actor_id: Optional[int] = Field(
        default=None,
        sa_column=Column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    )

    # Convention-coded, e.g. "FLOOR_CREATED"
    action: str = Field(sa_column=Column(String(64), nullable=False, index=True))

    # Soft polymorphic reference; no foreign key on purpose
    target_type: str = Field(sa_column=Column(String(32), nullable=False))
    target_id: Optional[int] = Field(default=None, sa_column=Column(Integer, nullable=True))

    # Free-form payload, e.g. {"old": {...}, "new": {...}}; the recorder never interprets it
    details: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    )

    ip_address: Optional[str] = Field(default=None, sa_column=Column(String(45), nullable=True))

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
