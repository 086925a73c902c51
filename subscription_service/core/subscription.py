"""Subscription Record: the single domain entity and its lifecycle rules.

Invariants:
    - price > 0 is checked at creation only (update leaves price unchecked)
    - end_date is never compared with start_date here
    - apply_changes returns a new record, never mutates its input
    - id, user_id and the timestamps are not changeable through apply_changes
"""

from dataclasses import dataclass, replace
from datetime import date, datetime

from subscription_service.core.domain_types import MinorUnits, SubscriptionId, UserId
from subscription_service.core.errors import ValidationError

UPDATABLE_FIELDS = frozenset({"service_name", "price", "start_date", "end_date"})


@dataclass(frozen=True)
class SubscriptionRecord:
    """Store-agnostic view of a persisted (or about to be persisted) subscription."""
    service_name: str
    price: MinorUnits
    user_id: UserId
    start_date: date
    end_date: date | None = None
    id: SubscriptionId | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


def validate_new_subscription(record: SubscriptionRecord) -> SubscriptionRecord:
    """Creation-time rule: price must be positive."""
    if record.price <= 0:
        raise ValidationError("price must be positive", field="price")
    return record


def apply_changes(record: SubscriptionRecord, changes: dict) -> SubscriptionRecord:
    """Return a copy of record with the given subset of fields replaced.

    A key present with value None clears end_date. Keys outside
    UPDATABLE_FIELDS are rejected rather than silently dropped.
    """
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(
            f"fields cannot be updated: {', '.join(sorted(unknown))}",
            field=sorted(unknown)[0],
        )
    return replace(record, **changes)
