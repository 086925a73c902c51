"""Subscription Schemas: Pydantic models with field-level validation for API boundaries.

Invariants:
    - service_name: 2-100 chars after stripping
    - price: integer in [0, MAX_PRICE] at the boundary (the > 0 creation rule lives in core)
    - end_date omitted, null or "" all mean open-ended
    - SubscriptionUpdate rejects explicit null for non-nullable fields
    - Cost period bounds accept YYYY-MM (first of month) or YYYY-MM-DD

Design Decisions:
    - Query-parameter models (Annotated[..., Query()]): FastAPI turns their
      failures into RequestValidationError, so they share the 400 envelope
"""

import re
from datetime import date, datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from subscription_service.core.domain_types import (
    MAX_PRICE, SERVICE_NAME_MAX_LENGTH, SERVICE_NAME_MIN_LENGTH,
)

_YEAR_MONTH = re.compile(r"^(\d{4})-(\d{2})$")


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _strip(v):
    return v.strip() if isinstance(v, str) else v


def parse_period_bound(v):
    """YYYY-MM -> first day of that month; anything else is left to date parsing."""
    if isinstance(v, str):
        m = _YEAR_MONTH.match(v.strip())
        if m:
            year, month = int(m.group(1)), int(m.group(2))
            if not 1 <= month <= 12:
                raise ValueError("expected YYYY-MM or YYYY-MM-DD")
            return date(year, month, 1)
    return v


ServiceName = Annotated[str, BeforeValidator(_strip)]
OptionalDate = Annotated[date | None, BeforeValidator(_blank_to_none)]
OptionalUserId = Annotated[UUID | None, BeforeValidator(_blank_to_none)]
PeriodBound = Annotated[date, BeforeValidator(parse_period_bound)]


class SubscriptionCreate(BaseModel):
    """Subscription creation body."""
    service_name: ServiceName = Field(
        min_length=SERVICE_NAME_MIN_LENGTH, max_length=SERVICE_NAME_MAX_LENGTH,
        examples=["Yandex Plus"],
    )
    price: int = Field(ge=0, le=MAX_PRICE, examples=[400])
    user_id: UUID
    start_date: date = Field(examples=["2025-07-01"])
    end_date: OptionalDate = Field(None, examples=["2025-12-31"])


class SubscriptionUpdate(BaseModel):
    """Partial update body. Only fields actually sent are applied."""
    service_name: ServiceName | None = Field(
        None, min_length=SERVICE_NAME_MIN_LENGTH, max_length=SERVICE_NAME_MAX_LENGTH,
    )
    price: int | None = Field(None, ge=0, le=MAX_PRICE)
    start_date: date | None = None
    end_date: OptionalDate = None

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        for name in ("service_name", "price", "start_date"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class SubscriptionResponse(BaseModel):
    """Public-facing subscription data."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    service_name: str
    price: int
    user_id: UUID
    start_date: date
    end_date: date | None
    created_at: datetime
    updated_at: datetime


class SubscriptionListParams(BaseModel):
    """Query parameters for GET /subscriptions."""
    user_id: OptionalUserId = None
    service_name: str | None = None
    limit: int = 100
    offset: int = 0


class CostParams(BaseModel):
    """Query parameters for GET /subscriptions/cost."""
    start_date: PeriodBound = Field(examples=["2025-01"])
    end_date: PeriodBound = Field(examples=["2025-12"])
    user_id: OptionalUserId = None
    service_name: str | None = None


class CostResponse(BaseModel):
    total: int = Field(examples=[1200])
