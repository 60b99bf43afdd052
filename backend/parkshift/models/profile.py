"""Local profile for identities managed by the hosted auth provider."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parkshift.db.base import Base
from parkshift.models.mixins import TimestampMixin


if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from parkshift.models.parking_space import ParkingSpace
    from parkshift.models.vehicle import Vehicle


class Profile(TimestampMixin, Base):
    """A marketplace user; owners and renters share the same record."""

    __tablename__ = "profiles"

    # Same id as the auth provider's user; never generated locally in production.
    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(120))
    last_name: Mapped[str | None] = mapped_column(String(120))
    phone: Mapped[str | None] = mapped_column(String(32))
    stripe_account_id: Mapped[str | None] = mapped_column(String(255))

    spaces: Mapped[list["ParkingSpace"]] = relationship(
        "ParkingSpace", back_populates="owner", cascade="all, delete-orphan"
    )
    vehicles: Mapped[list["Vehicle"]] = relationship(
        "Vehicle", back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)
