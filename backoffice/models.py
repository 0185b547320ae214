from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, DateTime, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class UserRole(str, Enum):
    ADMIN = 'ADMIN'
    SELLER = 'SELLER'
    STOCK_MANAGER = 'STOCK_MANAGER'


class OrderStatus(str, Enum):
    PENDING = 'pending'
    PARTIALLY_DELIVERED = 'partially_delivered'
    DELIVERED = 'delivered'
    COMPLETED = 'completed'
    CANCELED = 'canceled'


class OrderType(str, Enum):
    WHOLESALE = 'WHOLESALE'
    RETAIL = 'RETAIL'


class DiscountMode(str, Enum):
    VALUE = 'value'
    PERCENT = 'percent'


class EventType(str, Enum):
    VISIT = 'VISIT'
    DELIVERY = 'DELIVERY'
    OTHER = 'OTHER'


class StorageEntry(Base):
    __tablename__ = 'storage_entries'

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[object] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class WebSession(Base):
    __tablename__ = 'web_sessions'
    __table_args__ = (
        UniqueConstraint('session_token', name='web_sessions_session_token_key'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_token: Mapped[str] = mapped_column(String(128), nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    ip: Mapped[str | None] = mapped_column(String(64))
    user_agent: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_seen_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
