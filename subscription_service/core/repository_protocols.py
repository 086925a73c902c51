"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All record-store IO is accessed through SubscriptionRepository
    - Implementations raise NotFoundError for unknown ids and StoreError for
      any other store failure (core/errors.py)

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO, while the core functions that
      prepare their inputs (predicates.py, cost.py) stay synchronous and pure
"""

from datetime import date
from typing import Protocol

from subscription_service.core.domain_types import MinorUnits, SubscriptionId
from subscription_service.core.predicates import PredicateSet
from subscription_service.core.subscription import SubscriptionRecord


class SubscriptionRepository(Protocol):
    """Contract for subscription persistence, implemented by shell."""
    async def create_record(self, record: SubscriptionRecord) -> SubscriptionRecord: ...
    async def read_record(self, subscription_id: SubscriptionId) -> SubscriptionRecord: ...
    async def update_record(self, record: SubscriptionRecord) -> SubscriptionRecord: ...
    async def delete_record(self, subscription_id: SubscriptionId) -> None: ...
    async def list_records(
        self, predicates: PredicateSet, limit: int, offset: int,
    ) -> list[SubscriptionRecord]: ...
    async def aggregate_cost(
        self, predicates: PredicateSet, period_start: date, period_end: date,
    ) -> MinorUnits: ...
