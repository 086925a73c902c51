"""SQL Subscription Repository: SubscriptionRepository implemented on SQLAlchemy.

Invariants:
    - Predicate descriptors become SQLAlchemy expressions with bound parameters only
    - Listing orders by created_at DESC with no tie-break
    - aggregate_cost issues exactly one SELECT whose SUM runs in the database
    - Window clamping and month counting in SQL mirror core/cost.py
    - Every SQLAlchemyError is rolled back and re-raised as StoreError carrying
      the operation name and target (id or filters); driver text is only logged

Design Decisions:
    - Explicit field -> column dict over getattr: every queryable column visible in one place
    - CASE instead of GREATEST/LEAST, CAST(EXTRACT(...)) for month parts:
      the same statement runs on PostgreSQL and on SQLite (tests)
    - Substring match via icontains(autoescape=True): % and _ in user input match literally
"""

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone

from sqlalchemy import (
    BigInteger, Date, Integer, case, cast, delete, extract, func, literal, or_, select,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from subscription_service.core.domain_types import (
    MinorUnits, SubscriptionField, SubscriptionId, UserId,
)
from subscription_service.core.errors import ErrorContext, NotFoundError, StoreError
from subscription_service.core.predicates import (
    DateGTEOrNull, DateLTE, Equals, ILikeSubstring, Predicate, PredicateSet,
    describe_predicates,
)
from subscription_service.core.subscription import SubscriptionRecord
from subscription_service.models.subscription import Subscription

logger = logging.getLogger(__name__)

_COLUMNS = {
    SubscriptionField.SERVICE_NAME: Subscription.service_name,
    SubscriptionField.USER_ID: Subscription.user_id,
    SubscriptionField.START_DATE: Subscription.start_date,
    SubscriptionField.END_DATE: Subscription.end_date,
}


def predicate_to_clause(predicate: Predicate):
    """Translate one core predicate descriptor into a SQLAlchemy clause."""
    column = _COLUMNS[predicate.field]
    if isinstance(predicate, Equals):
        return column == predicate.value
    if isinstance(predicate, ILikeSubstring):
        return column.icontains(predicate.value, autoescape=True)
    if isinstance(predicate, DateLTE):
        return column <= predicate.value
    if isinstance(predicate, DateGTEOrNull):
        return or_(column.is_(None), column >= predicate.value)
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def _filtered(query, predicates: PredicateSet):
    clauses = [predicate_to_clause(p) for p in predicates]
    return query.where(*clauses) if clauses else query


def _month_part(field: str, expr):
    return cast(extract(field, expr), Integer)


def cost_expression(period_start: date, period_end: date):
    """price x inclusive months of the clamped overlap window, floored at 0.

    Evaluated in 64-bit: an int4 price times a month count overflows int4.
    """
    ps = literal(period_start, Date)
    pe = literal(period_end, Date)
    window_start = case(
        (Subscription.start_date > ps, Subscription.start_date), else_=ps,
    )
    effective_end = func.coalesce(Subscription.end_date, pe)
    window_end = case((effective_end < pe, effective_end), else_=pe)
    months = (
        (_month_part("year", window_end) - _month_part("year", window_start)) * 12
        + (_month_part("month", window_end) - _month_part("month", window_start))
        + 1
    )
    return cast(Subscription.price, BigInteger) * case((months > 0, months), else_=0)


def _to_record(row: Subscription) -> SubscriptionRecord:
    return SubscriptionRecord(
        id=SubscriptionId(row.id),
        service_name=row.service_name,
        price=row.price,
        user_id=UserId(row.user_id),
        start_date=row.start_date,
        end_date=row.end_date,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlSubscriptionRepository:
    """Record store backed by the subscriptions table."""

    def __init__(self, db: AsyncSession):
        self._db = db

    @asynccontextmanager
    async def _store_operation(
        self, operation: str,
        subscription_id: SubscriptionId | None = None,
        predicates: PredicateSet | None = None,
    ):
        """Roll back and convert SQLAlchemy failures into StoreError."""
        try:
            yield
        except SQLAlchemyError as e:
            await self._db.rollback()
            context = ErrorContext(
                operation=operation,
                subscription_id=str(subscription_id) if subscription_id else None,
                filters=(
                    describe_predicates(predicates) if predicates is not None else None
                ),
            )
            logger.error(
                f"Store {operation} failed: {e}",
                extra={"operation": operation, "subscription_id": context.subscription_id},
            )
            raise StoreError("record store unavailable", operation, context) from e

    async def create_record(self, record: SubscriptionRecord) -> SubscriptionRecord:
        now = datetime.now(timezone.utc)
        row = Subscription(
            service_name=record.service_name,
            price=record.price,
            user_id=record.user_id,
            start_date=record.start_date,
            end_date=record.end_date,
            created_at=now,
            updated_at=now,
        )
        async with self._store_operation("create"):
            self._db.add(row)
            await self._db.commit()
            await self._db.refresh(row)
        return _to_record(row)

    async def read_record(self, subscription_id: SubscriptionId) -> SubscriptionRecord:
        async with self._store_operation("read", subscription_id=subscription_id):
            row = await self._db.get(Subscription, subscription_id)
        if row is None:
            raise NotFoundError("Subscription", str(subscription_id))
        return _to_record(row)

    async def update_record(self, record: SubscriptionRecord) -> SubscriptionRecord:
        async with self._store_operation("update", subscription_id=record.id):
            row = await self._db.get(Subscription, record.id)
            if row is None:
                raise NotFoundError("Subscription", str(record.id))
            row.service_name = record.service_name
            row.price = record.price
            row.start_date = record.start_date
            row.end_date = record.end_date
            row.updated_at = datetime.now(timezone.utc)
            await self._db.commit()
            await self._db.refresh(row)
        return _to_record(row)

    async def delete_record(self, subscription_id: SubscriptionId) -> None:
        async with self._store_operation("delete", subscription_id=subscription_id):
            result = await self._db.execute(
                delete(Subscription).where(Subscription.id == subscription_id),
            )
            if result.rowcount == 0:
                raise NotFoundError("Subscription", str(subscription_id))
            await self._db.commit()

    async def list_records(
        self, predicates: PredicateSet, limit: int, offset: int,
    ) -> list[SubscriptionRecord]:
        query = _filtered(select(Subscription), predicates)
        query = (
            query
            .order_by(Subscription.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        async with self._store_operation("list", predicates=predicates):
            result = await self._db.execute(query)
            rows = result.scalars().all()
        return [_to_record(r) for r in rows]

    async def aggregate_cost(
        self, predicates: PredicateSet, period_start: date, period_end: date,
    ) -> MinorUnits:
        query = _filtered(
            select(func.coalesce(
                func.sum(cost_expression(period_start, period_end)), 0,
            )).select_from(Subscription),
            predicates,
        )
        async with self._store_operation("aggregate_cost", predicates=predicates):
            result = await self._db.execute(query)
            total = result.scalar_one()
        return MinorUnits(int(total))
