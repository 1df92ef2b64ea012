"""The one table this service owns.

WHAT: A tracked test phone or tablet, identified by its unique ``name``.
WHEN: Rows are only inserted by the seed step; the API just flips them between
``Available`` and ``Checked Out``.
HOW: ``borrower`` and ``checked_out_date`` are set together on checkout and
cleared together on checkin.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Text

from ..core.device_status import STATUS_AVAILABLE, STATUS_CHOICES
from ..db.session import Base


class Device(Base):
    __tablename__ = "devices"
    __table_args__ = (
        CheckConstraint(
            "status IN (" + ", ".join(f"'{choice}'" for choice in STATUS_CHOICES) + ")",
            name="ck_devices_status",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False, unique=True)
    borrower = Column(Text, nullable=True)
    checked_out_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(Text, nullable=False, default=STATUS_AVAILABLE, server_default=STATUS_AVAILABLE)

    def __repr__(self) -> str:
        return f"Device(id={self.id!r}, name={self.name!r}, status={self.status!r})"
