"""Subscription Service: the operations exposed to the request layer.

Invariants:
    - Input normalization and validation happen in core/ before the store is touched
      (InvalidRangeError and creation ValidationError never cost a round trip)
    - Store failures surface unchanged; nothing is retried or swallowed
    - Every operation logs debug on entry, info on success, error on failure

Design Decisions:
    - Repository injected per request: the service holds no state of its own
    - update() is read-modify-write over two store calls; concurrent writers
      follow last-write-wins as the store's isolation level allows
"""

import logging
from datetime import date

from subscription_service.core.cost import compose_cost_query
from subscription_service.core.domain_types import MinorUnits, SubscriptionId, UserId
from subscription_service.core.errors import SubscriptionServiceError
from subscription_service.core.predicates import compose_list_query
from subscription_service.core.repository_protocols import SubscriptionRepository
from subscription_service.core.subscription import (
    SubscriptionRecord, apply_changes, validate_new_subscription,
)

logger = logging.getLogger(__name__)


def _id_or_none(value) -> str | None:
    return str(value) if value is not None else None


class SubscriptionService:
    """CRUD, filtered listing and cost calculation over a SubscriptionRepository."""

    def __init__(self, repository: SubscriptionRepository):
        self._repository = repository

    async def create(self, record: SubscriptionRecord) -> SubscriptionRecord:
        logger.debug(
            "Creating subscription",
            extra={"service_name": record.service_name, "user_id": str(record.user_id)},
        )
        try:
            validate_new_subscription(record)
            created = await self._repository.create_record(record)
        except SubscriptionServiceError as e:
            logger.error(
                f"Failed to create subscription: {e.message}",
                extra={"user_id": str(record.user_id), "error_code": e.code},
            )
            raise
        logger.info(
            "Subscription created",
            extra={"subscription_id": str(created.id)},
        )
        return created

    async def read(self, subscription_id: SubscriptionId) -> SubscriptionRecord:
        logger.debug(
            "Fetching subscription", extra={"subscription_id": str(subscription_id)},
        )
        try:
            return await self._repository.read_record(subscription_id)
        except SubscriptionServiceError as e:
            logger.error(
                f"Failed to fetch subscription: {e.message}",
                extra={"subscription_id": str(subscription_id), "error_code": e.code},
            )
            raise

    async def update(
        self, subscription_id: SubscriptionId, changes: dict,
    ) -> SubscriptionRecord:
        """Apply a partial update. Price is not re-validated here."""
        logger.debug(
            "Updating subscription", extra={"subscription_id": str(subscription_id)},
        )
        try:
            current = await self._repository.read_record(subscription_id)
            updated = await self._repository.update_record(
                apply_changes(current, changes),
            )
        except SubscriptionServiceError as e:
            logger.error(
                f"Failed to update subscription: {e.message}",
                extra={"subscription_id": str(subscription_id), "error_code": e.code},
            )
            raise
        logger.info(
            "Subscription updated", extra={"subscription_id": str(subscription_id)},
        )
        return updated

    async def delete(self, subscription_id: SubscriptionId) -> None:
        logger.debug(
            "Deleting subscription", extra={"subscription_id": str(subscription_id)},
        )
        try:
            await self._repository.delete_record(subscription_id)
        except SubscriptionServiceError as e:
            logger.error(
                f"Failed to delete subscription: {e.message}",
                extra={"subscription_id": str(subscription_id), "error_code": e.code},
            )
            raise
        logger.info(
            "Subscription deleted", extra={"subscription_id": str(subscription_id)},
        )

    async def list_subscriptions(
        self, owner_id: UserId | None = None, service_name: str | None = None,
        limit: int = 100, offset: int = 0,
    ) -> list[SubscriptionRecord]:
        query = compose_list_query(owner_id, service_name, limit, offset)
        logger.debug(
            "Listing subscriptions",
            extra={
                "user_id": _id_or_none(owner_id), "service_name": service_name,
                "limit": query.pagination.limit, "offset": query.pagination.offset,
            },
        )
        try:
            records = await self._repository.list_records(
                query.predicates, query.pagination.limit, query.pagination.offset,
            )
        except SubscriptionServiceError as e:
            logger.error(
                f"Failed to list subscriptions: {e.message}",
                extra={"error_code": e.code},
            )
            raise
        logger.info("Subscriptions listed", extra={"count": len(records)})
        return records

    async def calculate_cost(
        self, owner_id: UserId | None, service_name: str | None,
        period_start: date, period_end: date,
    ) -> MinorUnits:
        """Total billed cost in minor units for subscriptions active in the period."""
        logger.debug(
            "Calculating subscription cost",
            extra={
                "user_id": _id_or_none(owner_id), "service_name": service_name,
                "period_start": period_start.isoformat(),
                "period_end": period_end.isoformat(),
            },
        )
        try:
            query = compose_cost_query(owner_id, service_name, period_start, period_end)
            total = await self._repository.aggregate_cost(
                query.predicates, query.period.start, query.period.end,
            )
        except SubscriptionServiceError as e:
            logger.error(
                f"Failed to calculate cost: {e.message}",
                extra={"user_id": _id_or_none(owner_id), "error_code": e.code},
            )
            raise
        logger.info(
            "Subscription cost calculated",
            extra={"user_id": _id_or_none(owner_id), "total": total},
        )
        return total
