"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - SubscriptionId and UserId wrap UUIDs
    - Prices are integers in minor currency units (no floats anywhere)
    - Queryable fields are encoded as an Enum, never as raw column strings

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enum for fields: descriptors serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

SubscriptionId = NewType("SubscriptionId", UUID)
UserId = NewType("UserId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

MinorUnits = NewType("MinorUnits", int)   # kopecks, cents, ...

MAX_PRICE: MinorUnits = MinorUnits(2_147_483_647)   # signed 32-bit price column


# ─── Limits ──────────────────────────────────────────────────────

SERVICE_NAME_MIN_LENGTH: int = 2
SERVICE_NAME_MAX_LENGTH: int = 100

DEFAULT_PAGE_LIMIT: int = 100
MAX_PAGE_LIMIT: int = 1000


# ─── Enums ───────────────────────────────────────────────────────

class SubscriptionField(str, Enum):
    """Subscription attributes that predicates may target."""
    SERVICE_NAME = "service_name"
    USER_ID = "user_id"
    START_DATE = "start_date"
    END_DATE = "end_date"
