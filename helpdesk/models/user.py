# helpdesk/models/user.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy import Enum as SAEnum
from datetime import datetime, timezone
from typing import Optional

from helpdesk.models.enums import UserRole, UserStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    # case-sensitive, compared with plain equality
    username: str = Field(
        sa_column=Column(String(50), nullable=False, unique=True, index=True)
    )
    email: str = Field(
        sa_column=Column(String(255), nullable=False, unique=True)
    )
    password_hash: str = Field(
        sa_column=Column(String(255), nullable=False)
    )

    role: UserRole = Field(
        sa_column=Column(
            SAEnum(UserRole, name="user_role", values_callable=_enum_values),
            nullable=False,
        )
    )
    status: UserStatus = Field(
        default=UserStatus.Active,
        sa_column=Column(
            SAEnum(UserStatus, name="user_status", values_callable=_enum_values),
            nullable=False,
            default=UserStatus.Active,
        )
    )

    # department accounts are attached to the department they answer for
    department_id: Optional[int] = Field(
        default=None,
        sa_column=Column(ForeignKey("departments.id"), nullable=True)
    )

    # --- Login bookkeeping ---
    login_attempts: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0)
    )
    last_login_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, onupdate=_utcnow)
    )
