"""Voyage: a scheduled sailing between two ports on one vessel.

scheduled_arrival is always later than scheduled_departure; the rule is
enforced by the request validation, not by a table constraint.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from voyage_planner.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


voyage_unit_types = Table(
    "voyage_unit_types",
    Base.metadata,
    Column("voyage_id", String(36), ForeignKey("voyages.id", ondelete="CASCADE"), primary_key=True),
    Column("unit_type_id", String(36), ForeignKey("unit_types.id"), primary_key=True),
)


class Voyage(Base):
    __tablename__ = "voyages"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # ── Schedule ──────────────────────────────────────────────
    scheduled_departure: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    scheduled_arrival: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    # ── Route ─────────────────────────────────────────────────
    port_of_loading: Mapped[str] = mapped_column(String(255), nullable=False)
    port_of_discharge: Mapped[str] = mapped_column(String(255), nullable=False)

    # ── Vessel FK ─────────────────────────────────────────────
    vessel_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("vessels.id"), nullable=False, index=True
    )

    # ── Metadata ──────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    # ── Relationships ─────────────────────────────────────────
    vessel = relationship("Vessel", lazy="selectin")
    unit_types = relationship(
        "UnitType", secondary=voyage_unit_types, lazy="selectin"
    )
