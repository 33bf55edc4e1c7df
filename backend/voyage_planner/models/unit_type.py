"""UnitType: a category of cargo unit (trailer class, container size, …).

Linked many-to-many to Voyage through the ``voyage_unit_types`` table.
"""

import uuid

from sqlalchemy import Float, String
from sqlalchemy.orm import Mapped, mapped_column

from voyage_planner.database import Base


class UnitType(Base):
    __tablename__ = "unit_types"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    default_length: Mapped[float] = mapped_column(Float, nullable=False)
