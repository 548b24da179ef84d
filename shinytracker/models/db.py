"""
SQLAlchemy ORM models for the remote authority's storage.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class ShinyHuntDB(Base):
    """
    A shiny hunt stored in the database.

    The id is the server-assigned identifier clients sync against.
    """

    __tablename__ = "shiny_hunts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    species_name: Mapped[str] = mapped_column(String(100), index=True)
    game: Mapped[str] = mapped_column(String(100))
    sprite_url: Mapped[str] = mapped_column(Text, default="")
    types: Mapped[list[Any]] = mapped_column(JSON, default=list)

    encounter_count: Mapped[int] = mapped_column(Integer, default=0)
    target_count: Mapped[int | None] = mapped_column(Integer, nullable=True)

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<ShinyHuntDB(id={self.id}, species={self.species_name}, game={self.game})>"
