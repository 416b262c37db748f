"""
Pydantic Schemas for Request/Response Validation

All bodies use camelCase keys on the wire. Money values are fixed-point
decimals serialized as strings with two fractional digits ("19.00").

Author: Your Name
Version: 1.0.0
"""

import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer, StrictInt, field_validator
from pydantic.alias_generators import to_camel


Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: f"{v:.2f}", return_type=str, when_used="json"),
]


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]

USERNAME_PATTERN = re.compile(r"^[a-z0-9_.-]+$")


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, readable from ORM objects."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# AUTH SCHEMAS
# =============================================================================

class RegisterRequest(CamelModel):
    """Request schema for creating an account."""
    username: str = Field(..., min_length=3, max_length=50, examples=["jane_doe"])
    password: str = Field(..., min_length=8, max_length=128, examples=["correct horse"])
    display_name: Optional[str] = Field(None, max_length=100, examples=["Jane"])

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip().lower()
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username may only contain letters, digits, '_', '.' and '-'")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        # bcrypt only looks at the first 72 bytes
        if len(v.encode()) > 72:
            raise ValueError("Password must be at most 72 bytes")
        return v

    @field_validator("display_name")
    @classmethod
    def blank_display_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


class LoginRequest(CamelModel):
    """Request schema for logging in."""
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        return v.strip().lower()


class UserProfile(CamelModel):
    """Public profile of a user. Never includes the password hash."""
    id: int
    username: str
    display_name: Optional[str] = None
    created_at: UtcDatetime


# =============================================================================
# MENU SCHEMAS
# =============================================================================

class MenuItemResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Money
    image_url: Optional[str] = None


class MenuItemSeed(CamelModel):
    """One entry of a seed-menu JSON file."""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = None


# =============================================================================
# ORDER SCHEMAS
# =============================================================================

class OrderLineCreate(CamelModel):
    """Single line in an order request. Prices are never accepted from clients."""
    menu_item_id: StrictInt = Field(..., examples=[1])
    quantity: StrictInt = Field(..., examples=[2])


class OrderCreate(CamelModel):
    """Request schema for creating a new order."""
    lines: List[OrderLineCreate]


class OrderLineResponse(CamelModel):
    id: int
    menu_item_id: int
    item_name: Optional[str] = None
    quantity: int
    unit_price: Money
    line_total: Money


class OrderResponse(CamelModel):
    """Response schema for a single order."""
    id: int
    status: str
    total: Money
    created_at: UtcDatetime
    lines: List[OrderLineResponse]

    @field_validator("status", mode="before")
    @classmethod
    def status_value(cls, v):
        return getattr(v, "value", v)


# =============================================================================
# GENERIC SCHEMAS
# =============================================================================

class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    environment: str
    timestamp: datetime
