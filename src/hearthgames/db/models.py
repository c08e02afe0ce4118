"""SQLAlchemy ORM models for the Hearth Games database.

Tables: people, game_templates, events, event_games, rounds. Round teams and
placements are JSON columns; they are decoded into structured models by the
repository and never leave this package as raw JSON.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.sqlite import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class PersonRow(Base):
    __tablename__ = "people"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    sex: Mapped[str | None] = mapped_column(String(10), nullable=True)
    spouse_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weight: Mapped[int | None] = mapped_column(Integer, nullable=True)
    athletic_ability: Mapped[int | None] = mapped_column(Integer, nullable=True)
    height: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))


class GameTemplateRow(Base):
    __tablename__ = "game_templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    group_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    default_team_count: Mapped[int] = mapped_column(Integer, default=2)
    default_players_per_team: Mapped[int] = mapped_column(Integer, default=2)
    default_rounds_per_game: Mapped[int] = mapped_column(Integer, default=1)
    default_team_type: Mapped[str] = mapped_column(String(20), default="any")
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))


class EventRow(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="available")
    participant_ids: Mapped[list] = mapped_column(JSON, default=list)
    current_game_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))
    last_modified_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    games: Mapped[list[EventGameRow]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="EventGameRow.order_index",
    )


class EventGameRow(Base):
    __tablename__ = "event_games"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    event_id: Mapped[str] = mapped_column(
        ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    template_id: Mapped[str] = mapped_column(String(36), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="notStarted")
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    override_team_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    override_players_per_team: Mapped[int | None] = mapped_column(Integer, nullable=True)
    override_rounds_per_game: Mapped[int | None] = mapped_column(Integer, nullable=True)
    override_team_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    override_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)

    event: Mapped[EventRow] = relationship(back_populates="games")
    rounds: Mapped[list[RoundRow]] = relationship(
        back_populates="game",
        cascade="all, delete-orphan",
        order_by="RoundRow.round_index",
    )

    __table_args__ = (Index("ix_event_games_event_id", "event_id"),)


class RoundRow(Base):
    __tablename__ = "rounds"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    event_game_id: Mapped[str] = mapped_column(
        ForeignKey("event_games.id", ondelete="CASCADE"), nullable=False
    )
    round_index: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    teams: Mapped[list] = mapped_column(JSON, default=list)
    placements: Mapped[dict] = mapped_column(JSON, default=dict)
    result_type: Mapped[str | None] = mapped_column(String(10), nullable=True)
    winning_team_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    game: Mapped[EventGameRow] = relationship(back_populates="rounds")

    __table_args__ = (Index("ix_rounds_event_game_id", "event_game_id"),)
