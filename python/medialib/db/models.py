"""SQLAlchemy ORM models for medialib.

Defines all database tables using SQLAlchemy 2.x declarative patterns.
Column types are the generic SQLAlchemy ones so the same models run on
PostgreSQL (production) and SQLite (local runs and tests).
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Well-known item that detached UserData is attached to once its own item is
# deleted. Seeded by migration 0001 and by ensure_placeholder_item().
PLACEHOLDER_ID = UUID("00000000-0000-0000-0000-000000000001")
PLACEHOLDER_TYPE = "PLACEHOLDER"
PLACEHOLDER_NAME = (
    "This is a placeholder item for UserData that has been detached from its original item"
)

DEFAULT_CUSTOM_DATA_KEY = "default"


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# =============================================================================
# Models
# =============================================================================


class User(Base):
    """User account model. Only the id matters to the persistence core."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    username: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (UniqueConstraint("username", name="uq_users_username"),)

    # Relationships
    user_data: Mapped[list["UserData"]] = relationship(
        "UserData", back_populates="user", passive_deletes=True
    )


class Item(Base):
    """Media item. The row with PLACEHOLDER_ID never represents real media."""

    __tablename__ = "items"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    type: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (CheckConstraint("type <> ''", name="ck_items_type_nonempty"),)

    # No ORM cascade: UserData is detached or deleted explicitly by
    # medialib.services.items.delete_items.
    user_data: Mapped[list["UserData"]] = relationship(
        "UserData", back_populates="item", passive_deletes="all"
    )


class UserData(Base):
    """Per-user playback state for an item.

    custom_data_key distinguishes several slots for the same user/item pair.
    retention_date is set when the row is detached to the placeholder item.
    """

    __tablename__ = "user_data"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    item_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("items.id", ondelete="RESTRICT"),
        nullable=False,
    )
    custom_data_key: Mapped[str] = mapped_column(
        Text, nullable=False, default=DEFAULT_CUSTOM_DATA_KEY
    )
    play_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    playback_position_ticks: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    last_played_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    played: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_favorite: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    retention_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint(
            "user_id", "item_id", "custom_data_key", name="uq_user_data_user_item_key"
        ),
        CheckConstraint("play_count >= 0", name="ck_user_data_play_count"),
        Index("ix_user_data_item_id", "item_id"),
        Index("ix_user_data_retention_date", "retention_date"),
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="user_data")
    item: Mapped["Item"] = relationship("Item", back_populates="user_data")
