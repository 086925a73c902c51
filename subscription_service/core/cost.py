"""Cost Aggregator: month-granular cost of subscriptions over a billing period.

Invariants:
    - Period bounds are truncated to the first day of their months before use
    - period_end earlier than period_start raises InvalidRangeError before any store access
    - Candidate: start_date <= period.end AND (end_date is None OR end_date >= period.start)
    - Overlap window: [max(start_date, period.start), min(end_date or period.end, period.end)]
    - Months are counted inclusively from calendar month/year only; day-of-month ignored
    - A window whose end month precedes its start month counts zero months
    - Totals are integers in minor units; an empty candidate set totals 0

Design Decisions:
    - compose_cost_query() hands the store both the filters and the candidate
      predicates, so the whole candidate test runs store-side next to the SUM
    - subscription_cost()/total_cost() are the in-memory rendering of the same
      arithmetic; the SQL adapter is tested against them
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from subscription_service.core.domain_types import MinorUnits, SubscriptionField, UserId
from subscription_service.core.errors import InvalidRangeError
from subscription_service.core.predicates import (
    DateGTEOrNull, DateLTE, PredicateSet, compose_filters,
)
from subscription_service.core.subscription import SubscriptionRecord


@dataclass(frozen=True)
class BillingPeriod:
    """Month-truncated, inclusive query period."""
    start: date
    end: date


@dataclass(frozen=True)
class CostQuery:
    """Normalized input for SubscriptionRepository.aggregate_cost."""
    predicates: PredicateSet
    period: BillingPeriod


def first_of_month(value: date) -> date:
    return date(value.year, value.month, 1)


def billing_period(period_start: date, period_end: date) -> BillingPeriod:
    """Validate the requested range and truncate it to whole months."""
    if period_end < period_start:
        raise InvalidRangeError(period_start, period_end)
    return BillingPeriod(
        start=first_of_month(period_start), end=first_of_month(period_end),
    )


def candidate_predicates(period: BillingPeriod) -> PredicateSet:
    return (
        DateLTE(SubscriptionField.START_DATE, period.end),
        DateGTEOrNull(SubscriptionField.END_DATE, period.start),
    )


def compose_cost_query(
    owner_id: UserId | None, service_name: str | None,
    period_start: date, period_end: date,
) -> CostQuery:
    period = billing_period(period_start, period_end)
    return CostQuery(
        predicates=compose_filters(owner_id, service_name) + candidate_predicates(period),
        period=period,
    )


# ─── Interval Arithmetic ─────────────────────────────────────────

def is_candidate(
    start_date: date, end_date: date | None, period: BillingPeriod,
) -> bool:
    return start_date <= period.end and (end_date is None or end_date >= period.start)


def overlap_window(
    start_date: date, end_date: date | None, period: BillingPeriod,
) -> tuple[date, date]:
    effective_end = end_date if end_date is not None else period.end
    return max(start_date, period.start), min(effective_end, period.end)


def months_inclusive(window_start: date, window_end: date) -> int:
    """Calendar months touched by [window_start, window_end]; never negative."""
    months = (
        (window_end.year - window_start.year) * 12
        + (window_end.month - window_start.month)
        + 1
    )
    return max(months, 0)


def subscription_cost(record: SubscriptionRecord, period: BillingPeriod) -> MinorUnits:
    """price x overlapping months, or 0 when the record is not a candidate."""
    if not is_candidate(record.start_date, record.end_date, period):
        return MinorUnits(0)
    window_start, window_end = overlap_window(
        record.start_date, record.end_date, period,
    )
    return MinorUnits(record.price * months_inclusive(window_start, window_end))


def total_cost(
    records: Iterable[SubscriptionRecord], period: BillingPeriod,
) -> MinorUnits:
    return MinorUnits(sum(subscription_cost(r, period) for r in records))
