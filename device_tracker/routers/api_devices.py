"""JSON endpoints behind the device page.

WHAT: List devices, check one out, check one in.
WHEN: The page calls ``/api/devices`` on load and on every poll, and the two
POST routes when someone presses a button.
HOW: The raw body is parsed as JSON whatever the ``Content-Type`` says, so
``curl -d`` and plain-text posts behave like the page's fetch calls. Empty
fields raise ``ValidationError`` (400) and an unmatched name raises
``NotFoundError`` (404). Database failures surface from the store as
``InfrastructureError`` (500).
"""

from __future__ import annotations

from typing import TypeVar

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ..core.errors import NotFoundError, ValidationError
from ..crud.devices import checkin_device, checkout_device, list_devices
from ..db.session import get_db
from ..schemas.device import ActionResult, CheckinRequest, CheckoutRequest, DeviceOut

router = APIRouter(prefix="/api", tags=["devices"])

PayloadT = TypeVar("PayloadT", bound=BaseModel)


async def _read_json_body(request: Request, model: type[PayloadT]) -> PayloadT:
    raw = await request.body()
    try:
        return model.model_validate_json(raw)
    except PydanticValidationError as exc:
        if any(error["type"] == "json_invalid" for error in exc.errors()):
            raise ValidationError("Invalid JSON body") from exc
        raise ValidationError() from exc


async def checkout_payload(request: Request) -> CheckoutRequest:
    return await _read_json_body(request, CheckoutRequest)


async def checkin_payload(request: Request) -> CheckinRequest:
    return await _read_json_body(request, CheckinRequest)


@router.get("/devices", response_model=list[DeviceOut])
def api_list(db: Session = Depends(get_db)):
    return list_devices(db)


@router.post("/checkout", response_model=ActionResult)
def api_checkout(payload: CheckoutRequest = Depends(checkout_payload), db: Session = Depends(get_db)):
    if not payload.device or not payload.borrower:
        raise ValidationError("Device and borrower are required")
    if checkout_device(db, payload.device, payload.borrower) == 0:
        raise NotFoundError("Device not found")
    return ActionResult(message="Device checked out successfully")


@router.post("/checkin", response_model=ActionResult)
def api_checkin(payload: CheckinRequest = Depends(checkin_payload), db: Session = Depends(get_db)):
    if not payload.device:
        raise ValidationError("Device is required")
    if checkin_device(db, payload.device) == 0:
        raise NotFoundError("Device not found")
    return ActionResult(message="Device checked in successfully")
