"""
Request schemas (pydantic).

Every write route validates its JSON body against one of these models before
touching the store. Models that mirror free-form documents (events, users,
notifications) keep unknown fields; the rest ignore them.
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, RootModel, StringConstraints, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

TicketStatus = Literal["pending", "confirmed", "canceled"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]

M = TypeVar("M", bound=BaseModel)


def is_iso_datetime(s: str) -> bool:
    """Accept ISO 8601 date or datetime strings."""
    if not isinstance(s, str) or not s.strip():
        return False
    try:
        datetime.fromisoformat(s.strip().replace("Z", "+00:00"))
        return True
    except ValueError:
        return False


def parse_body(model: Type[M], data: Any, message: str = "Validation failed.") -> M:
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        details = [
            {"field": ".".join(str(p) for p in err["loc"]) or "body", "message": err["msg"]}
            for err in exc.errors()
        ]
        raise ValidationError(message, details=details)


def document(model: BaseModel) -> Dict[str, Any]:
    """Fields the client actually sent, ready to be written."""
    data = model.model_dump(mode="json", exclude_unset=True)
    data.update(model.model_extra or {})
    return data


# -------------------------
# Events
# -------------------------
class Organizer(BaseModel):
    model_config = ConfigDict(extra="allow")

    organizerId: NonEmptyStr


class EventIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: NonEmptyStr
    date: str
    time: NonEmptyStr
    location: NonEmptyStr
    price: Dict[str, Any]
    description: NonEmptyStr
    agenda: List[Any]
    images: List[Any]
    ticketsLeft: int = Field(ge=0)
    category: NonEmptyStr
    totalCapacityNeeded: int = Field(ge=0)
    organizer: Optional[Organizer] = None

    @field_validator("date")
    @classmethod
    def _iso_date(cls, v: str) -> str:
        if not is_iso_datetime(v):
            raise ValueError("date must be ISO 8601 (e.g. 2026-01-01 or 2026-01-01T10:00:00+00:00)")
        return v.strip()


class EventBatchIn(BaseModel):
    events: List[EventIn] = Field(min_length=1)


class ToggleFavoriteIn(BaseModel):
    userId: NonEmptyStr


# -------------------------
# Users
# -------------------------
class UserIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    userId: Optional[NonEmptyStr] = None
    name: NonEmptyStr
    email: EmailStr
    avatarUrl: Optional[str] = None


class UserBatchIn(BaseModel):
    users: List[UserIn] = Field(min_length=1)


class UserUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[NonEmptyStr] = None
    email: Optional[EmailStr] = None
    avatarUrl: Optional[str] = None

    @model_validator(mode="after")
    def _not_empty(self):
        if not self.model_fields_set and not self.model_extra:
            raise ValueError("at least one field is required")
        return self


# -------------------------
# Tickets
# -------------------------
class TicketPurchase(BaseModel):
    eventId: NonEmptyStr
    userId: NonEmptyStr
    ticketType: NonEmptyStr
    quantity: int = Field(gt=0)
    totalPrice: float = Field(gt=0)
    seat: Optional[str] = None
    barcode: Optional[str] = None
    qrcode: Optional[str] = None


class TicketStatusIn(BaseModel):
    status: TicketStatus


# -------------------------
# Payments & attendance
# -------------------------
class PaymentIn(BaseModel):
    paymentId: Optional[NonEmptyStr] = None
    userId: NonEmptyStr
    eventId: NonEmptyStr
    amount: float = Field(ge=0)
    status: PaymentStatus = "pending"
    paymentType: NonEmptyStr


class PaymentUpdate(BaseModel):
    amount: Optional[float] = Field(default=None, ge=0)
    status: Optional[PaymentStatus] = None
    paymentType: Optional[NonEmptyStr] = None

    @model_validator(mode="after")
    def _not_empty(self):
        if not self.model_fields_set:
            raise ValueError("at least one of amount, status, paymentType is required")
        return self


class AttendanceIn(BaseModel):
    attendanceId: Optional[NonEmptyStr] = None
    eventId: NonEmptyStr
    userId: NonEmptyStr
    attendanceStatus: NonEmptyStr
    paymentStatus: Optional[str] = None


class AttendanceUpdate(BaseModel):
    attendanceStatus: Optional[NonEmptyStr] = None
    paymentStatus: Optional[str] = None

    @model_validator(mode="after")
    def _not_empty(self):
        if not self.model_fields_set:
            raise ValueError("at least one of attendanceStatus, paymentStatus is required")
        return self


# -------------------------
# Notifications, verification, livestreams
# -------------------------
class NotificationIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    notification_id: NonEmptyStr


class NotificationBatchIn(RootModel[List[NotificationIn]]):
    pass


class VerificationIn(BaseModel):
    email: EmailStr
    verificationCode: NonEmptyStr

    @field_validator("verificationCode", mode="before")
    @classmethod
    def _code_as_text(cls, v):
        return str(v) if isinstance(v, int) and not isinstance(v, bool) else v


class LivestreamStartIn(BaseModel):
    playback_policy: Literal["public", "signed"] = "public"
