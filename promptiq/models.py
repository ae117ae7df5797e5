# promptiq/models.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TIMESTAMP,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base
from .plans import DEFAULT_PLAN, plan_limit


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; everything stored here is UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """
    One row per authenticated account; ``uid`` comes from the identity provider.
    generations_limit always mirrors PLANS[plan]["limit"].
    """
    __tablename__ = "users"

    uid: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(String, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False, default="")

    plan: Mapped[str] = mapped_column(String(32), nullable=False, default=DEFAULT_PLAN)
    generations_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    generations_limit: Mapped[int] = mapped_column(
        Integer, nullable=False, default=plan_limit(DEFAULT_PLAN)
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    payment_history: Mapped[List["PaymentRecord"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PaymentRecord.id",
    )


class PaymentRecord(Base):
    """Append-only; rows are never updated or removed by the application."""
    __tablename__ = "payment_records"

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    user_uid: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("users.uid", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    # Stripe checkout session id
    order_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    plan: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="success")
    date: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utcnow, nullable=False)

    user: Mapped["User"] = relationship(back_populates="payment_history")


class Prompt(Base):
    """
    A generated (version 1) or refined (version 2, parent_id set) prompt.
    Immutable once written; only deletion is allowed.
    """
    __tablename__ = "prompts"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(128), index=True, nullable=False)

    input_text: Mapped[str] = mapped_column(Text, nullable=False)
    output_text: Mapped[str] = mapped_column(Text, nullable=False)
    framework: Mapped[str] = mapped_column(String(32), nullable=False)
    quality_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    parent_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    tokens_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, nullable=False
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "input_text": self.input_text,
            "output_text": self.output_text,
            "framework": self.framework,
            "quality_score": self.quality_score,
            "version": self.version,
            "parent_id": self.parent_id,
            "tokens_used": self.tokens_used,
            "created_at": as_utc(self.created_at).isoformat(),
        }


class SharedLink(Base):
    __tablename__ = "shared_links"

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(16), unique=True, index=True, nullable=False)
    prompt_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("prompts.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class WaitlistEntry(Base):
    __tablename__ = "waitlist"

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    source: Mapped[str] = mapped_column(String(64), nullable=False, default="unknown")
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, nullable=False
    )
    notified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


Index("ix_prompts_user_created", Prompt.user_id, Prompt.created_at)
