from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_serializer


class DeviceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    borrower: Optional[str] = None
    checked_out_date: Optional[datetime] = None
    status: str

    @field_serializer("checked_out_date")
    def serialize_checked_out_date(self, value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        # SQLite hands back naive values; they were written as UTC.
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    device: Optional[str] = None
    borrower: Optional[str] = None


class CheckinRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    device: Optional[str] = None


class ActionResult(BaseModel):
    success: bool = True
    message: str
