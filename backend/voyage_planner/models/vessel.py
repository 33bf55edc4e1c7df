"""Vessel: a ship that voyages are scheduled on.

Reference data: seeded by the management CLI and only read by the API.
"""

import uuid

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from voyage_planner.database import Base


class Vessel(Base):
    __tablename__ = "vessels"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

